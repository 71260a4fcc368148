"""Split a note body into typed raw blocks.

The segmenter is a single left-to-right scan with no lookback.  Each line
is first classified by :func:`classify_line`, whose checks run in a fixed
precedence order (first match wins):

1. code fence delimiter
2. callout header (``> [!kind]``)
3. heading (``#`` to ``######`` followed by a space)
4. horizontal rule (three or more ``-``, ``*`` or ``_`` alone)
5. list item (bullet or ``N.``)
6. blockquote (``>`` that is not a callout header)
7. standalone image (the whole line is one image embed)
8. blank line
9. anything else (text)

:class:`BlockSegmenter` then consumes the classified lines with a
three-state machine (:class:`ScanState`).  Inside a code fence every line
is swallowed verbatim.  Inside a callout, ``>`` lines and blank lines
continue it; any other line closes it and is re-evaluated in the ``TEXT``
state.  So a ``>`` line that could start either a quote or a callout is
decided by rule order, never by looking at later lines.
"""

from __future__ import annotations

import re
from enum import Enum

from notepress.models import BlockKind, RawBlock

FENCE_PREFIX = "```"

CALLOUT_HEADER_RE = re.compile(r"^>\s*\[![\w-]+\]")
HEADING_RE = re.compile(r"^#{1,6}\s")
RULE_RE = re.compile(r"^(-{3,}|\*{3,}|_{3,})$")
LIST_ITEM_RE = re.compile(r"^(\s*[-*+]|\s*\d+\.)\s")
STANDALONE_IMAGE_RE = re.compile(r"^(?:!\[[^\]]*\]\([^)]+\)|!\[\[[^\]]+\]\])$")


class LineKind(str, Enum):
    """Classification of a single body line, in precedence order."""

    FENCE = "fence"
    CALLOUT_HEADER = "callout_header"
    HEADING = "heading"
    RULE = "rule"
    LIST_ITEM = "list_item"
    QUOTE = "quote"
    IMAGE = "image"
    BLANK = "blank"
    TEXT = "text"


class ScanState(str, Enum):
    """Scanner state carried from one line to the next."""

    TEXT = "text"
    CODE_FENCE = "code_fence"
    CALLOUT = "callout"


def classify_line(line: str) -> LineKind:
    """Classify *line* by the first matching rule."""
    if line.startswith(FENCE_PREFIX):
        return LineKind.FENCE
    if CALLOUT_HEADER_RE.match(line):
        return LineKind.CALLOUT_HEADER
    if HEADING_RE.match(line):
        return LineKind.HEADING
    if RULE_RE.match(line):
        return LineKind.RULE
    if LIST_ITEM_RE.match(line):
        return LineKind.LIST_ITEM
    if line.startswith(">"):
        return LineKind.QUOTE
    if STANDALONE_IMAGE_RE.match(line.strip()):
        return LineKind.IMAGE
    if not line.strip():
        return LineKind.BLANK
    return LineKind.TEXT


# Line kinds that become a one-line block of their own.
_SINGLE_LINE_BLOCKS: dict[LineKind, BlockKind] = {
    LineKind.HEADING: BlockKind.HEADING,
    LineKind.RULE: BlockKind.RULE,
    LineKind.IMAGE: BlockKind.IMAGE,
}


class BlockSegmenter:
    """Stateful line consumer producing :class:`RawBlock` records.

    Feed lines with :meth:`feed` and collect the result with
    :meth:`finish`; or call :func:`segment` for a whole body at once.
    """

    def __init__(self) -> None:
        self.state: ScanState = ScanState.TEXT
        self._kind: BlockKind = BlockKind.PARAGRAPH
        self._lines: list[str] = []
        self._blocks: list[RawBlock] = []

    # -- accumulator -------------------------------------------------------

    def _start(self, kind: BlockKind, line: str) -> None:
        self._flush()
        self._kind = kind
        self._lines = [line]

    def _append(self, line: str, kind: BlockKind = BlockKind.PARAGRAPH) -> None:
        if not self._lines:
            self._kind = kind
        self._lines.append(line)

    def _flush(self) -> None:
        if self._lines and any(line.strip() for line in self._lines):
            self._blocks.append(RawBlock(kind=self._kind, lines=self._lines))
        self._lines = []

    def _emit(self, kind: BlockKind, line: str) -> None:
        self._flush()
        self._blocks.append(RawBlock(kind=kind, lines=[line]))

    # -- scanning ----------------------------------------------------------

    def feed(self, line: str) -> None:
        """Consume one body line."""
        kind = classify_line(line)

        if self.state is ScanState.CODE_FENCE:
            self._lines.append(line)
            if kind is LineKind.FENCE:
                self._flush()
                self.state = ScanState.TEXT
            return

        if kind is LineKind.FENCE:
            self._start(BlockKind.CODE_FENCE, line)
            self.state = ScanState.CODE_FENCE
            return

        if kind is LineKind.CALLOUT_HEADER:
            self._start(BlockKind.CALLOUT, line)
            self.state = ScanState.CALLOUT
            return

        if self.state is ScanState.CALLOUT:
            if line.startswith(">") or kind is LineKind.BLANK:
                self._lines.append(line)
                return
            self._flush()
            self.state = ScanState.TEXT

        if kind in _SINGLE_LINE_BLOCKS:
            self._emit(_SINGLE_LINE_BLOCKS[kind], line)
        elif kind is LineKind.LIST_ITEM:
            if self._lines and self._kind is not BlockKind.LIST:
                self._flush()
            self._append(line, BlockKind.LIST)
        elif kind is LineKind.QUOTE:
            if self._lines and self._kind is not BlockKind.QUOTE:
                self._flush()
            self._append(line, BlockKind.QUOTE)
        elif kind is LineKind.BLANK:
            self._flush()
        else:
            self._append(line)

    def finish(self) -> list[RawBlock]:
        """Flush the open block and return every block in order."""
        self._flush()
        self.state = ScanState.TEXT
        blocks, self._blocks = self._blocks, []
        return blocks


def segment(body: str) -> list[RawBlock]:
    """Partition a note body (frontmatter already removed) into blocks."""
    segmenter = BlockSegmenter()
    for line in body.split("\n"):
        segmenter.feed(line)
    return segmenter.finish()
