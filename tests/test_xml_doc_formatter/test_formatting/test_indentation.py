"""Tests for the indentation engine."""

import pytest

from xml_doc_formatter.formatting import (
    IndentationEngine,
    NestingStack,
    count_line_breaks,
    split_lines,
)
from xml_doc_formatter.shared import FormattingPreferences
from xml_doc_formatter.tokenization import XMLTokenizer


def render(text, **changes):
    engine = IndentationEngine(FormattingPreferences(**changes))
    return engine.render(XMLTokenizer().tokenize(text))


class TestLineHelpers:
    """Tests for line break helpers."""

    def test_split_lines_any_convention(self):
        """Test splitting on LF, CR and CRLF."""
        assert split_lines("a\r\nb\rc\nd") == ["a", "b", "c", "d"]
        assert split_lines("single") == ["single"]

    def test_count_line_breaks(self):
        """Test that CRLF counts as one break."""
        assert count_line_breaks("a\r\nb\rc\nd") == 3
        assert count_line_breaks("   ") == 0


class TestNestingStack:
    """Tests for NestingStack."""

    def test_push_and_close(self):
        """Test opening and closing elements."""
        stack = NestingStack()
        stack.push("a")
        stack.push("b")

        assert stack.depth == 2
        assert list(stack) == ["a", "b"]
        assert stack.close("b") == 1
        assert stack.depth == 1

    def test_close_outer_element(self):
        """Test that closing an outer element closes inner ones."""
        stack = NestingStack()
        for name in ("a", "b", "c"):
            stack.push(name)

        assert stack.close("a") == 0
        assert len(stack) == 0

    def test_close_unknown_element(self):
        """Test that an unknown name leaves the stack untouched."""
        stack = NestingStack()
        stack.push("a")

        assert stack.close("x") is None
        assert list(stack) == ["a"]


class TestIndentationEngine:
    """Tests for token placement."""

    def test_nested_elements(self):
        """Test one indent level per nesting depth."""
        assert render("<a><b><c/></b></a>") == ["<a>", "\t<b>", "\t\t<c/>", "\t</b>", "</a>"]

    def test_space_indentation(self):
        """Test indentation with spaces."""
        lines = render("<a><b/></a>", tab_instead_of_spaces=False, tab_width=2)
        assert lines == ["<a>", "  <b/>", "</a>"]

    def test_source_indentation_is_replaced(self):
        """Test that existing layout whitespace is normalized."""
        assert render("<a>\n        <b/>\n  </a>") == ["<a>", "\t<b/>", "</a>"]

    def test_blank_lines_preserved(self):
        """Test that blank lines between elements are kept."""
        assert render("<a>\n\n\n<b/>\n</a>") == ["<a>", "", "", "\t<b/>", "</a>"]

    def test_blank_lines_deleted(self):
        """Test delete_blank_lines."""
        assert render("<a>\n\n\n<b/>\n</a>", delete_blank_lines=True) == ["<a>", "\t<b/>", "</a>"]

    def test_no_blank_lines_at_document_edges(self):
        """Test that leading and trailing blank lines are dropped."""
        assert render("\n\n<a/>\n\n\n") == ["<a/>"]

    def test_empty_element_stays_on_one_line(self):
        """Test that an end tag right after its start tag stays inline."""
        assert render("<root><a></a></root>") == ["<root>", "\t<a></a>", "</root>"]

    def test_mixed_content_inline(self):
        """Test that markup inside text stays on the text line."""
        assert render("<p>Hello <b>world</b>!</p>") == ["<p>Hello <b>world</b>!</p>"]

    def test_text_followed_by_line_break(self):
        """Test markup after text that ends with a line break."""
        assert render("<p>text\n<b/></p>") == ["<p>text", "\t<b/>", "</p>"]

    def test_multi_line_text(self):
        """Test that only the first line of text is reindented."""
        assert render("<a>\n  hello\n    world\n</a>") == ["<a>", "\thello", "    world", "</a>"]

    def test_cdata_inline(self):
        """Test that CDATA is copied verbatim."""
        assert render("<a><![CDATA[x < y]]></a>") == ["<a><![CDATA[x < y]]></a>"]

    def test_cdata_on_own_line(self):
        """Test CDATA after layout whitespace."""
        assert render("<a>\n  <![CDATA[x]]>\n</a>") == ["<a>", "\t<![CDATA[x]]>", "</a>"]

    def test_multi_line_comment(self):
        """Test that comment content is copied verbatim."""
        lines = render("<a>\n<!--\n  note\n-->\n</a>")
        assert lines == ["<a>", "\t<!--", "  note", "-->", "</a>"]

    def test_unterminated_comment_at_end(self):
        """Test that a comment running to the end adds no empty last line."""
        assert render("<a>\n<!-- open\n") == ["<a>", "\t<!-- open"]

    def test_attribute_value_with_line_break(self):
        """Test that line breaks inside attribute values become line boundaries."""
        assert render('<a><b x="1\r\n2"/></a>') == ["<a>", '\t<b x="1', '2"/>', "</a>"]

    def test_unmatched_end_tag_keeps_depth(self):
        """Test that an end tag matching nothing does not change depth."""
        assert render("<a></x><b/></a>") == ["<a>", "\t</x>", "\t<b/>", "</a>"]

    def test_end_tag_closes_inner_elements(self):
        """Test that closing an outer element resets depth to its level."""
        assert render("<a><b></a><c/>") == ["<a>", "\t<b>", "</a>", "<c/>"]

    def test_unclosed_elements(self):
        """Test that missing end tags leave the rest indented."""
        assert render("<a><b>\n<c/>") == ["<a>", "\t<b>", "\t\t<c/>"]

    def test_top_level_text(self):
        """Test text outside any element."""
        assert render("hello") == ["hello"]

    def test_empty_input(self):
        """Test that empty input renders nothing."""
        assert render("") == []

    @pytest.mark.parametrize("text", [
        "<a><b></a>",
        "<a>\n<b>\n</c>\n</a>",
        '<a x="1><b/>',
    ])
    def test_engine_is_reusable(self, text):
        """Test that rendering does not leak state between calls."""
        engine = IndentationEngine(FormattingPreferences())
        tokenizer = XMLTokenizer()
        clean = engine.render(tokenizer.tokenize("<r><s/></r>"))

        engine.render(tokenizer.tokenize(text))

        assert engine.render(tokenizer.tokenize("<r><s/></r>")) == clean
        assert clean == ["<r>", "\t<s/>", "</r>"]
