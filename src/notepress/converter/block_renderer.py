"""Render raw blocks as WordPress Gutenberg block markup.

Each :class:`~notepress.models.BlockKind` has exactly one template:

- heading -> ``wp:heading`` with the numeric level
- code_fence -> ``wp:code``; language becomes a ``language-*`` class,
  content is HTML-escaped and never inline-formatted
- callout -> ``wp:quote`` with a ``callout-<kind>`` class and a bold title
- quote -> ``wp:quote`` with the de-prefixed lines as one paragraph
- list -> ``wp:list`` (``ordered`` when the first item is ``N.``)
- rule -> ``wp:separator``
- image -> ``wp:image``; unresolved paths fall back to the local path
- paragraph -> ``wp:paragraph``
"""

from __future__ import annotations

import re
from collections.abc import Callable

from notepress.converter.inline import (
    MARKDOWN_IMAGE_RE,
    WIKILINK_IMAGE_RE,
    ImageMap,
    escape_html,
    format_inline,
    resolve_image_url,
)
from notepress.converter.segmenter import FENCE_PREFIX
from notepress.models import BlockKind, CalloutInfo, ImageReference, ImageSyntax, RawBlock

HEADING_TEXT_RE = re.compile(r"^(#{1,6})\s+(.+)$")
CALLOUT_RE = re.compile(r"^>\s*\[!([\w-]+)\]([-+])?\s*(.*)$")
QUOTE_PREFIX_RE = re.compile(r"^>\s?")
ORDERED_ITEM_RE = re.compile(r"^\d+\.\s")
ITEM_MARKER_RE = re.compile(r"^([-*+]|\d+\.)\s")
CONTINUATION_RE = re.compile(r"^\s+")

SEPARATOR_MARKUP = (
    "<!-- wp:separator -->\n"
    '<hr class="wp-block-separator has-alpha-channel-opacity"/>\n'
    "<!-- /wp:separator -->"
)


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

def parse_callout(text: str) -> CalloutInfo:
    """Parse ``> [!kind]<fold> title`` plus its ``>``-prefixed body.

    ``+`` marks a foldable, expanded callout and ``-`` a foldable,
    collapsed one.  A missing title defaults to the kind with its first
    letter capitalised.
    """
    lines = text.split("\n")
    header = CALLOUT_RE.match(lines[0].strip())

    kind, title, foldable, default_folded = "note", "", False, False
    if header:
        kind = header.group(1)
        fold = header.group(2)
        foldable = fold is not None
        default_folded = fold == "-"
        title = header.group(3).strip() or kind[:1].upper() + kind[1:]

    content = "\n".join(QUOTE_PREFIX_RE.sub("", line) for line in lines[1:]).strip()
    return CalloutInfo(
        kind=kind,
        title=title,
        content=content,
        foldable=foldable,
        default_folded=default_folded,
    )


def parse_list_items(text: str) -> list[str]:
    """Join list lines into items.

    A line starting with an item marker (``-``, ``*``, ``+`` or ``N.``)
    starts a new item; an indented line, nested items included, is
    appended to the open item with a single space.  Lines that are
    neither are ignored.
    """
    items: list[str] = []
    current: str | None = None
    for line in text.split("\n"):
        marker = ITEM_MARKER_RE.match(line)
        if marker:
            if current is not None:
                items.append(current)
            current = line[marker.end():]
        elif current is not None and CONTINUATION_RE.match(line):
            current += " " + line.strip()
    if current is not None:
        items.append(current)
    return items


def extract_image_reference(text: str) -> ImageReference | None:
    """Return the first image embed in *text* (Markdown syntax first)."""
    match = MARKDOWN_IMAGE_RE.search(text)
    if match:
        return ImageReference(
            original_syntax=match.group(0),
            path=match.group(2),
            alt_text=match.group(1),
            syntax=ImageSyntax.MARKDOWN,
        )
    match = WIKILINK_IMAGE_RE.search(text)
    if match:
        return ImageReference(
            original_syntax=match.group(0),
            path=match.group(1),
            alt_text=match.group(2) or match.group(1),
            syntax=ImageSyntax.WIKILINK,
        )
    return None


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

def render_heading(text: str, image_map: ImageMap | None = None) -> str:
    match = HEADING_TEXT_RE.match(text)
    if not match:
        return render_paragraph(text, image_map)
    level = len(match.group(1))
    content = format_inline(match.group(2), image_map)
    return (
        f'<!-- wp:heading {{"level":{level}}} -->\n'
        f"<h{level}>{content}</h{level}>\n"
        "<!-- /wp:heading -->"
    )


def render_code(text: str, image_map: ImageMap | None = None) -> str:
    lines = text.split("\n")
    language = lines[0][len(FENCE_PREFIX):].strip()
    body = lines[1:]
    if body and body[-1].strip().startswith(FENCE_PREFIX):
        body = body[:-1]
    code = escape_html("\n".join(body))
    css = f' class="language-{escape_html(language)}"' if language else ""
    return (
        "<!-- wp:code -->\n"
        f'<pre class="wp-block-code"><code{css}>{code}</code></pre>\n'
        "<!-- /wp:code -->"
    )


def render_callout(text: str, image_map: ImageMap | None = None) -> str:
    info = parse_callout(text)
    css = f"callout-{info.kind.lower()}"
    content = format_inline(info.content, image_map)
    return (
        f'<!-- wp:quote {{"className":"{css}"}} -->\n'
        f'<blockquote class="wp-block-quote {css}">'
        f"<p><strong>{escape_html(info.title)}</strong></p>"
        f"<p>{content}</p></blockquote>\n"
        "<!-- /wp:quote -->"
    )


def render_quote(text: str, image_map: ImageMap | None = None) -> str:
    content = "\n".join(QUOTE_PREFIX_RE.sub("", line) for line in text.split("\n"))
    return (
        "<!-- wp:quote -->\n"
        f'<blockquote class="wp-block-quote"><p>{format_inline(content, image_map)}</p></blockquote>\n'
        "<!-- /wp:quote -->"
    )


def render_list(text: str, image_map: ImageMap | None = None) -> str:
    items = "".join(
        f"<li>{format_inline(item, image_map)}</li>" for item in parse_list_items(text)
    )
    if ORDERED_ITEM_RE.match(text):
        return (
            '<!-- wp:list {"ordered":true} -->\n'
            f'<ol class="wp-block-list">{items}</ol>\n'
            "<!-- /wp:list -->"
        )
    return (
        "<!-- wp:list -->\n"
        f'<ul class="wp-block-list">{items}</ul>\n'
        "<!-- /wp:list -->"
    )


def render_rule(text: str, image_map: ImageMap | None = None) -> str:
    return SEPARATOR_MARKUP


def render_image(text: str, image_map: ImageMap | None = None) -> str:
    ref = extract_image_reference(text)
    if ref is None:
        return render_paragraph(text, image_map)
    url = resolve_image_url(ref.path, image_map)
    return (
        "<!-- wp:image -->\n"
        f'<figure class="wp-block-image"><img src="{escape_html(url)}" alt="{escape_html(ref.alt_text)}"/></figure>\n'
        "<!-- /wp:image -->"
    )


def render_paragraph(text: str, image_map: ImageMap | None = None) -> str:
    return (
        "<!-- wp:paragraph -->\n"
        f"<p>{format_inline(text, image_map)}</p>\n"
        "<!-- /wp:paragraph -->"
    )


_RENDERERS: dict[BlockKind, Callable[[str, ImageMap | None], str]] = {
    BlockKind.HEADING: render_heading,
    BlockKind.CODE_FENCE: render_code,
    BlockKind.CALLOUT: render_callout,
    BlockKind.QUOTE: render_quote,
    BlockKind.LIST: render_list,
    BlockKind.RULE: render_rule,
    BlockKind.IMAGE: render_image,
    BlockKind.PARAGRAPH: render_paragraph,
}


def render_block(block: RawBlock, image_map: ImageMap | None = None) -> str:
    """Render one raw block with the template for its kind."""
    text = block.text if block.kind is BlockKind.CODE_FENCE else block.text.strip()
    return _RENDERERS[block.kind](text, image_map)
