"""Image reference discovery.

Finds every image embed in a note body, in both syntaxes Obsidian
accepts, and classifies a reference path as external (left alone) or
local (a candidate for upload).
"""

from __future__ import annotations

from urllib.parse import urlparse

from notepress.converter.inline import MARKDOWN_IMAGE_RE, WIKILINK_IMAGE_RE
from notepress.frontmatter import strip_frontmatter
from notepress.models import ImageReference, ImageSyntax


def extract_image_references(markdown: str) -> list[ImageReference]:
    """Return every image reference in *markdown*.

    Markdown-syntax images (``![alt](path)``) come first, then wikilink
    embeds (``![[path|alt]]``), each group in document order.  The same
    path may appear more than once.

    Parameters
    ----------
    markdown:
        The whole note; the frontmatter block is ignored.
    """
    body = strip_frontmatter(markdown)
    refs: list[ImageReference] = [
        ImageReference(
            original_syntax=m.group(0),
            path=m.group(2),
            alt_text=m.group(1),
            syntax=ImageSyntax.MARKDOWN,
        )
        for m in MARKDOWN_IMAGE_RE.finditer(body)
    ]
    refs.extend(
        ImageReference(
            original_syntax=m.group(0),
            path=m.group(1),
            alt_text=m.group(2) or m.group(1),
            syntax=ImageSyntax.WIKILINK,
        )
        for m in WIKILINK_IMAGE_RE.finditer(body)
    )
    return refs


def is_external(path: str) -> bool:
    """Whether *path* is an ``http://`` or ``https://`` URL."""
    return urlparse(path.strip()).scheme in ("http", "https")
