"""Markdown-to-Gutenberg conversion: segmentation, rendering, inline spans."""

from __future__ import annotations

from .block_renderer import parse_callout, parse_list_items, render_block
from .inline import escape_html, format_inline
from .md_to_blocks import MarkdownToBlocksConverter
from .segmenter import BlockSegmenter, LineKind, ScanState, classify_line, segment

__all__ = [
    "BlockSegmenter",
    "LineKind",
    "MarkdownToBlocksConverter",
    "ScanState",
    "classify_line",
    "escape_html",
    "format_inline",
    "parse_callout",
    "parse_list_items",
    "render_block",
    "segment",
]
