"""Inline formatting: Obsidian Markdown spans to HTML.

:func:`format_inline` applies an ordered list of ``(pattern, replacement)``
rules to a block's text.  The order is part of the contract: images are
resolved before the generic bracket rules could see their syntax, combined
bold+italic markers before bold, bold before italic, and plain Markdown
links last.

Generated ``<img>`` tags are parked behind placeholders until every rule
has run, so emphasis rules never rewrite an image URL or alt text.  Any
placeholder delimiter already present in the text is parked first, so
user text can never address a parked fragment.

Code span contents are passed through without HTML escaping.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import NamedTuple

from notepress.models import UploadedImage

ImageMap = Mapping[str, UploadedImage]

_HTML_ESCAPES: tuple[tuple[str, str], ...] = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#039;"),
)

# Private-use code points delimit parked fragments.
_PARK_OPEN = "\ue000"
_PARK_CLOSE = "\ue001"
_PARKED_RE = re.compile(f"{_PARK_OPEN}(\\d+){_PARK_CLOSE}")
_DELIMITER_RE = re.compile(f"[{_PARK_OPEN}{_PARK_CLOSE}]")

WIKILINK_IMAGE_RE = re.compile(r"!\[\[([^\]|]+)(?:\|([^\]]+))?\]\]")
MARKDOWN_IMAGE_RE = re.compile(r"!\[([^\]]*)\]\(([^)]+)\)")


def escape_html(text: str) -> str:
    """Escape the five HTML metacharacters ``& < > " '``."""
    for char, entity in _HTML_ESCAPES:
        text = text.replace(char, entity)
    return text


def resolve_image_url(path: str, image_map: ImageMap | None) -> str:
    """Uploaded URL for *path*, or *path* itself when it was not uploaded."""
    uploaded = image_map.get(path) if image_map else None
    return uploaded.remote_url if uploaded else path


def image_tag(url: str, alt: str) -> str:
    return f'<img src="{escape_html(url)}" alt="{escape_html(alt)}"/>'


class InlineRule(NamedTuple):
    """One substitution step of the inline pipeline."""

    name: str
    pattern: re.Pattern[str]
    replacement: str


INLINE_RULES: tuple[InlineRule, ...] = (
    InlineRule("wikilink_alias", re.compile(r"\[\[([^\]|]+)\|([^\]]+)\]\]"), r"\2"),
    InlineRule("wikilink", re.compile(r"\[\[([^\]]+)\]\]"), r"\1"),
    InlineRule("bold_italic_star", re.compile(r"\*\*\*([^*]+)\*\*\*"), r"<strong><em>\1</em></strong>"),
    InlineRule("bold_italic_underscore", re.compile(r"___([^_]+)___"), r"<strong><em>\1</em></strong>"),
    InlineRule("bold_star", re.compile(r"\*\*([^*]+)\*\*"), r"<strong>\1</strong>"),
    InlineRule("bold_underscore", re.compile(r"__([^_]+)__"), r"<strong>\1</strong>"),
    InlineRule("italic_star", re.compile(r"\*([^*]+)\*"), r"<em>\1</em>"),
    InlineRule("italic_underscore", re.compile(r"(?<![a-zA-Z])_([^_]+)_(?![a-zA-Z])"), r"<em>\1</em>"),
    InlineRule("strikethrough", re.compile(r"~~([^~]+)~~"), r"<del>\1</del>"),
    InlineRule("code", re.compile(r"`([^`]+)`"), r"<code>\1</code>"),
    InlineRule("highlight", re.compile(r"==([^=]+)=="), r"<mark>\1</mark>"),
    InlineRule("link", re.compile(r"\[([^\]]+)\]\(([^)]+)\)"), r'<a href="\2">\1</a>'),
)


def _park(parked: list[str], fragment: str) -> str:
    parked.append(fragment)
    return f"{_PARK_OPEN}{len(parked) - 1}{_PARK_CLOSE}"


def _image_replacer(
    image_map: ImageMap | None,
    parked: list[str],
    *,
    wikilink: bool,
) -> Callable[[re.Match[str]], str]:
    def replace(match: re.Match[str]) -> str:
        if wikilink:
            path, alt = match.group(1), match.group(2) or match.group(1)
        else:
            alt, path = match.group(1), match.group(2)
        return _park(parked, image_tag(resolve_image_url(path, image_map), alt))

    return replace


def format_inline(text: str, image_map: ImageMap | None = None) -> str:
    """Apply every inline rule to *text*, in order.

    Parameters
    ----------
    text:
        Raw block text (already stripped of block markers).
    image_map:
        Local path to uploaded image.  Paths missing from the map keep
        their literal local path as the ``src``.

    Returns
    -------
    str
        The formatted HTML fragment.  The function is pure: the same
        inputs always produce the same output.
    """
    parked: list[str] = []
    result = _DELIMITER_RE.sub(lambda m: _park(parked, m.group(0)), text)
    result = WIKILINK_IMAGE_RE.sub(_image_replacer(image_map, parked, wikilink=True), result)
    result = MARKDOWN_IMAGE_RE.sub(_image_replacer(image_map, parked, wikilink=False), result)

    for rule in INLINE_RULES:
        result = rule.pattern.sub(rule.replacement, result)

    if parked:
        result = _PARKED_RE.sub(lambda m: parked[int(m.group(1))], result)
    return result
