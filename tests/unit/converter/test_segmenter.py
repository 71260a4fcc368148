"""Tests for notepress.converter.segmenter.

Covers line classification precedence, the three scanner states and the
flush rules between block kinds.
"""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from notepress.converter.segmenter import (
    BlockSegmenter,
    LineKind,
    ScanState,
    classify_line,
    segment,
)
from notepress.models import BlockKind


def kinds(body: str) -> list[BlockKind]:
    return [block.kind for block in segment(body)]


# ---------------------------------------------------------------------------
# classify_line
# ---------------------------------------------------------------------------

class TestClassifyLine:
    @pytest.mark.parametrize(
        ("line", "expected"),
        [
            ("```", LineKind.FENCE),
            ("```python", LineKind.FENCE),
            ("> [!note]", LineKind.CALLOUT_HEADER),
            (">[!info] Title", LineKind.CALLOUT_HEADER),
            ("> [!my-kind]- folded", LineKind.CALLOUT_HEADER),
            ("# Heading", LineKind.HEADING),
            ("###### Six", LineKind.HEADING),
            ("---", LineKind.RULE),
            ("***", LineKind.RULE),
            ("_____", LineKind.RULE),
            ("- item", LineKind.LIST_ITEM),
            ("* item", LineKind.LIST_ITEM),
            ("+ item", LineKind.LIST_ITEM),
            ("10. ten", LineKind.LIST_ITEM),
            ("  - nested", LineKind.LIST_ITEM),
            ("> quoted", LineKind.QUOTE),
            ("![alt](a.png)", LineKind.IMAGE),
            ("![[a.png]]", LineKind.IMAGE),
            ("  ![[a.png]]  ", LineKind.IMAGE),
            ("", LineKind.BLANK),
            ("    ", LineKind.BLANK),
            ("plain text", LineKind.TEXT),
        ],
    )
    def test_classification(self, line, expected):
        assert classify_line(line) is expected

    def test_heading_requires_space(self):
        assert classify_line("#hashtag") is LineKind.TEXT

    def test_seven_hashes_is_not_heading(self):
        assert classify_line("####### seven") is LineKind.TEXT

    def test_list_item_wins_over_quote(self):
        assert classify_line("- > quoted item") is LineKind.LIST_ITEM

    def test_spaced_dashes_are_a_list_item(self):
        assert classify_line("- - -") is LineKind.LIST_ITEM

    def test_two_images_on_one_line_are_text(self):
        assert classify_line("![[a.png]] ![[b.png]]") is LineKind.TEXT

    def test_image_with_trailing_text_is_text(self):
        assert classify_line("![[a.png]] caption") is LineKind.TEXT


# ---------------------------------------------------------------------------
# segment
# ---------------------------------------------------------------------------

class TestSegment:
    def test_heading_and_paragraph(self):
        blocks = segment("# Title\n\nHello **world**.")
        assert [b.kind for b in blocks] == [BlockKind.HEADING, BlockKind.PARAGRAPH]
        assert blocks[0].lines == ["# Title"]
        assert blocks[1].lines == ["Hello **world**."]

    def test_paragraph_lines_accumulate(self):
        blocks = segment("one\ntwo\n\nthree")
        assert [b.lines for b in blocks] == [["one", "two"], ["three"]]

    def test_heading_splits_paragraph(self):
        assert kinds("text\n# H\nmore") == [
            BlockKind.PARAGRAPH,
            BlockKind.HEADING,
            BlockKind.PARAGRAPH,
        ]

    def test_empty_body(self):
        assert segment("") == []

    def test_whitespace_only_body(self):
        assert segment("\n\n   \n") == []

    def test_finish_resets_state(self):
        segmenter = BlockSegmenter()
        segmenter.feed("```")
        assert segmenter.state is ScanState.CODE_FENCE
        segmenter.finish()
        assert segmenter.state is ScanState.TEXT


class TestCodeFence:
    def test_fence_swallows_everything(self):
        body = "```python\nx = 1\n\n# not a heading\n- not a list\n```\nafter"
        blocks = segment(body)
        assert [b.kind for b in blocks] == [BlockKind.CODE_FENCE, BlockKind.PARAGRAPH]
        assert blocks[0].lines == [
            "```python",
            "x = 1",
            "",
            "# not a heading",
            "- not a list",
            "```",
        ]

    def test_unterminated_fence_runs_to_end(self):
        blocks = segment("```\ncode\nmore")
        assert len(blocks) == 1
        assert blocks[0].kind is BlockKind.CODE_FENCE
        assert blocks[0].lines == ["```", "code", "more"]

    def test_fence_flushes_open_paragraph(self):
        assert kinds("intro\n```\ncode\n```") == [BlockKind.PARAGRAPH, BlockKind.CODE_FENCE]

    def test_consecutive_fences(self):
        assert kinds("```\na\n```\n```\nb\n```") == [BlockKind.CODE_FENCE, BlockKind.CODE_FENCE]


class TestCallout:
    def test_callout_continues_on_quote_and_blank_lines(self):
        blocks = segment("> [!note]\n> a\n\n> b\nafter")
        assert [b.kind for b in blocks] == [BlockKind.CALLOUT, BlockKind.PARAGRAPH]
        assert blocks[0].lines == ["> [!note]", "> a", "", "> b"]
        assert blocks[1].lines == ["after"]

    def test_non_quote_line_closes_callout_and_is_reevaluated(self):
        assert kinds("> [!tip]\n> body\n# Heading") == [BlockKind.CALLOUT, BlockKind.HEADING]

    def test_unprefixed_line_after_header_leaves_callout(self):
        blocks = segment("> [!warning]- Careful\nWatch out")
        assert [b.kind for b in blocks] == [BlockKind.CALLOUT, BlockKind.PARAGRAPH]

    def test_callout_header_flushes_quote(self):
        assert kinds("> plain quote\n> [!info] Title") == [BlockKind.QUOTE, BlockKind.CALLOUT]

    def test_fence_closes_callout(self):
        blocks = segment("> [!note]\n```\ncode\n```")
        assert [b.kind for b in blocks] == [BlockKind.CALLOUT, BlockKind.CODE_FENCE]
        assert blocks[1].lines == ["```", "code", "```"]

    def test_two_callouts_in_a_row(self):
        assert kinds("> [!note]\n> a\n> [!tip]\n> b") == [BlockKind.CALLOUT, BlockKind.CALLOUT]


class TestListsAndQuotes:
    def test_list_run(self):
        blocks = segment("- a\n- b\n1. c")
        assert len(blocks) == 1
        assert blocks[0].kind is BlockKind.LIST
        assert blocks[0].lines == ["- a", "- b", "1. c"]

    def test_paragraph_then_list_is_split(self):
        assert kinds("text\n- a") == [BlockKind.PARAGRAPH, BlockKind.LIST]

    def test_text_after_list_continues_list(self):
        blocks = segment("- a\n  continued")
        assert len(blocks) == 1
        assert blocks[0].kind is BlockKind.LIST

    def test_quote_then_list_is_split(self):
        assert kinds("> q\n- a") == [BlockKind.QUOTE, BlockKind.LIST]

    def test_list_then_quote_is_split(self):
        assert kinds("- a\n> q") == [BlockKind.LIST, BlockKind.QUOTE]

    def test_quote_run(self):
        blocks = segment("> one\n> two")
        assert len(blocks) == 1
        assert blocks[0].kind is BlockKind.QUOTE

    def test_blank_line_ends_list(self):
        assert kinds("- a\n\n- b") == [BlockKind.LIST, BlockKind.LIST]


class TestSingleLineBlocks:
    def test_rule_between_paragraphs(self):
        assert kinds("a\n***\nb") == [BlockKind.PARAGRAPH, BlockKind.RULE, BlockKind.PARAGRAPH]

    def test_standalone_image(self):
        blocks = segment("before\n![[a.png]]\nafter")
        assert [b.kind for b in blocks] == [
            BlockKind.PARAGRAPH,
            BlockKind.IMAGE,
            BlockKind.PARAGRAPH,
        ]
        assert blocks[1].lines == ["![[a.png]]"]

    def test_inline_image_stays_in_paragraph(self):
        assert kinds("see ![[a.png]] here") == [BlockKind.PARAGRAPH]


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------

_line_st = st.one_of(
    st.sampled_from([
        "", "  ", "# Heading", "## Sub", "---", "***", "- item", "1. first",
        "  - nested", "> quote", "> [!note] Title", "> [!tip]-",
        "![[a.png]]", "![alt](b.png)", "plain text", "more **text**",
    ]),
    st.text(alphabet="abc #>-*![]()1. ", max_size=12),
).filter(lambda line: not line.startswith("```"))


class TestSegmentationCoverage:
    @given(st.lists(_line_st, max_size=30))
    def test_every_non_blank_line_lands_in_exactly_one_block(self, lines):
        blocks = segment("\n".join(lines))
        emitted = sorted(line for block in blocks for line in block.lines if line.strip())
        expected = sorted(line for line in lines if line.strip())
        assert emitted == expected

    @given(st.lists(_line_st, max_size=30))
    def test_no_block_is_blank(self, lines):
        for block in segment("\n".join(lines)):
            assert any(line.strip() for line in block.lines)
