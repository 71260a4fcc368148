"""Tests for notepress.converter.block_renderer: one template per block kind."""

from __future__ import annotations

from notepress.converter.block_renderer import (
    SEPARATOR_MARKUP,
    extract_image_reference,
    parse_callout,
    parse_list_items,
    render_block,
)
from notepress.models import BlockKind, CalloutInfo, ImageSyntax, RawBlock, UploadedImage


def render(kind: BlockKind, text: str, image_map=None) -> str:
    return render_block(RawBlock(kind=kind, lines=text.split("\n")), image_map)


class TestParseCallout:
    def test_foldable_collapsed_with_title(self):
        info = parse_callout("> [!warning]- Careful\nWatch out")
        assert info == CalloutInfo(
            kind="warning",
            title="Careful",
            content="Watch out",
            foldable=True,
            default_folded=True,
        )

    def test_foldable_expanded(self):
        info = parse_callout("> [!tip]+ Open")
        assert info.foldable is True
        assert info.default_folded is False

    def test_not_foldable_without_marker(self):
        info = parse_callout("> [!note] Plain")
        assert info.foldable is False
        assert info.default_folded is False

    def test_missing_title_defaults_to_capitalised_kind(self):
        assert parse_callout("> [!example]\n> body").title == "Example"

    def test_body_lines_are_de_prefixed(self):
        info = parse_callout("> [!info]\n> line one\n>line two\n>")
        assert info.content == "line one\nline two"


class TestParseListItems:
    def test_one_item_per_marker(self):
        assert parse_list_items("- a\n- b\n* c") == ["a", "b", "c"]

    def test_indented_lines_continue_the_open_item(self):
        assert parse_list_items("- first\n  wrapped\n- second") == ["first wrapped", "second"]

    def test_nested_items_fold_into_parent(self):
        assert parse_list_items("- parent\n  - child") == ["parent - child"]

    def test_ordered_and_unordered_markers_mix(self):
        assert parse_list_items("1. one\n- two") == ["one", "two"]

    def test_unindented_text_is_ignored(self):
        assert parse_list_items("- a\nstray") == ["a"]


class TestExtractImageReference:
    def test_markdown_syntax(self):
        ref = extract_image_reference("![Alt](img/a.png)")
        assert ref.path == "img/a.png"
        assert ref.alt_text == "Alt"
        assert ref.syntax is ImageSyntax.MARKDOWN

    def test_wikilink_without_alias_uses_path_as_alt(self):
        ref = extract_image_reference("![[a.png]]")
        assert ref.alt_text == "a.png"
        assert ref.syntax is ImageSyntax.WIKILINK

    def test_none_when_absent(self):
        assert extract_image_reference("no image") is None


class TestTemplates:
    def test_heading(self):
        assert render(BlockKind.HEADING, "## Sub *title*") == (
            '<!-- wp:heading {"level":2} -->\n'
            "<h2>Sub <em>title</em></h2>\n"
            "<!-- /wp:heading -->"
        )

    def test_code_with_language(self):
        assert render(BlockKind.CODE_FENCE, "```python\nif a < b:\n    pass\n```") == (
            "<!-- wp:code -->\n"
            '<pre class="wp-block-code"><code class="language-python">'
            "if a &lt; b:\n    pass</code></pre>\n"
            "<!-- /wp:code -->"
        )

    def test_code_without_language(self):
        assert render(BlockKind.CODE_FENCE, "```\nx\n```") == (
            "<!-- wp:code -->\n"
            '<pre class="wp-block-code"><code>x</code></pre>\n'
            "<!-- /wp:code -->"
        )

    def test_code_is_not_inline_formatted(self):
        result = render(BlockKind.CODE_FENCE, "```\n**not bold** & 'q'\n```")
        assert "<strong>" not in result
        assert "**not bold** &amp; &#039;q&#039;" in result

    def test_unterminated_code_keeps_last_line(self):
        assert "<code>a\nb</code>" in render(BlockKind.CODE_FENCE, "```\na\nb")

    def test_callout(self):
        assert render(BlockKind.CALLOUT, "> [!Tip] Pro <move>\n> Use **this**") == (
            '<!-- wp:quote {"className":"callout-tip"} -->\n'
            '<blockquote class="wp-block-quote callout-tip">'
            "<p><strong>Pro &lt;move&gt;</strong></p>"
            "<p>Use <strong>this</strong></p></blockquote>\n"
            "<!-- /wp:quote -->"
        )

    def test_quote(self):
        assert render(BlockKind.QUOTE, "> line one\n> *line* two") == (
            "<!-- wp:quote -->\n"
            '<blockquote class="wp-block-quote"><p>line one\n<em>line</em> two</p></blockquote>\n'
            "<!-- /wp:quote -->"
        )

    def test_unordered_list(self):
        assert render(BlockKind.LIST, "- one\n- **two**\n  continued") == (
            "<!-- wp:list -->\n"
            '<ul class="wp-block-list"><li>one</li><li><strong>two</strong> continued</li></ul>\n'
            "<!-- /wp:list -->"
        )

    def test_ordered_list(self):
        assert render(BlockKind.LIST, "1. a\n2. b") == (
            '<!-- wp:list {"ordered":true} -->\n'
            '<ol class="wp-block-list"><li>a</li><li>b</li></ol>\n'
            "<!-- /wp:list -->"
        )

    def test_rule(self):
        assert render(BlockKind.RULE, "---") == SEPARATOR_MARKUP

    def test_image_unresolved(self):
        assert render(BlockKind.IMAGE, "![[photo.png]]") == (
            "<!-- wp:image -->\n"
            '<figure class="wp-block-image"><img src="photo.png" alt="photo.png"/></figure>\n'
            "<!-- /wp:image -->"
        )

    def test_image_resolved(self):
        image_map = {"a.png": UploadedImage("a.png", "https://cdn.example.com/a.png", 3)}
        assert 'src="https://cdn.example.com/a.png" alt="Alt"' in render(
            BlockKind.IMAGE, "![Alt](a.png)", image_map,
        )

    def test_paragraph(self):
        assert render(BlockKind.PARAGRAPH, "Hello **world**.") == (
            "<!-- wp:paragraph -->\n"
            "<p>Hello <strong>world</strong>.</p>\n"
            "<!-- /wp:paragraph -->"
        )
