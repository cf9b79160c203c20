"""Start tag layout: attribute splitting and long-line wrapping.

The composer renders a start tag for a given indent level. With
``split_multi_attrs`` every attribute of a multi-attribute tag gets its own
line; with ``wrap_long_lines`` a tag that would overflow ``max_line_length``
is wrapped at attribute boundaries. Attribute values and element names are
never broken.
"""

from typing import List, Optional

from xml_doc_formatter.shared import FormattingPreferences
from xml_doc_formatter.tokenization import Token

# Continuation lines of a wrapped tag are indented this many levels deeper
WRAP_INDENT_LEVELS = 2


class LineComposer:
    """Renders tags into output lines according to the preferences."""

    def __init__(self, preferences: FormattingPreferences) -> None:
        self.preferences = preferences
        self._unit = preferences.canonical_indent

    def indent(self, level: int) -> str:
        """Indent prefix for the given nesting level."""
        return self._unit * max(level, 0)

    def width(self, text: str) -> int:
        """Display width of text, counting a tab as ``tab_width`` columns."""
        return len(text) + text.count("\t") * (self.preferences.tab_width - 1)

    @staticmethod
    def render_end_tag(token: Token) -> str:
        """Canonical form of an end tag."""
        return f"</{token.name or ''}>"

    @staticmethod
    def render_start_tag(token: Token) -> str:
        """Canonical single-line form of a start tag."""
        closer = "/>" if token.self_closing else ">"
        attributes = "".join(" " + attribute.render() for attribute in token.attributes)
        return f"<{token.name}{attributes}{closer}"

    def compose_start_tag(
        self,
        token: Token,
        level: int,
        column: Optional[int] = None
    ) -> List[str]:
        """Lay out a start tag.

        Args:
            token: START_TAG token to render
            level: Nesting level of the element
            column: Width of the line the tag continues, or None when the
                tag starts a new line at its indent

        Returns:
            Output lines. When ``column`` is given the first entry is a
            fragment to append to the current line; otherwise every entry
            is a complete line including its indent.
        """
        prefs = self.preferences
        prefix = "" if column is not None else self.indent(level)
        start_width = column if column is not None else self.width(prefix)
        closer = "/>" if token.self_closing else ">"
        head = f"<{token.name}"
        attributes = [attribute.render() for attribute in token.attributes]

        if prefs.split_multi_attrs and len(attributes) > 1:
            attribute_indent = self.indent(level + 1)
            return (
                [prefix + head]
                + [attribute_indent + attribute for attribute in attributes]
                + [self.indent(level) + closer]
            )

        single = self.render_start_tag(token)
        if (not prefs.wrap_long_lines
                or not attributes
                or start_width + self.width(single) <= prefs.max_line_length):
            return [prefix + single]

        return self._wrap(prefix + head, start_width + self.width(head),
                          attributes, closer, level)

    def _wrap(
        self,
        first_line: str,
        first_width: int,
        attributes: List[str],
        closer: str,
        level: int
    ) -> List[str]:
        # Greedy fill; an attribute too long for a fresh continuation line stays long
        continuation = self.indent(level + WRAP_INDENT_LEVELS)
        limit = self.preferences.max_line_length
        lines: List[str] = []
        current, current_width = first_line, first_width
        last = len(attributes) - 1
        for index, attribute in enumerate(attributes):
            piece = attribute + closer if index == last else attribute
            needed = current_width + 1 + self.width(piece)
            if needed <= limit:
                current += " " + piece
                current_width = needed
            else:
                lines.append(current)
                current = continuation + piece
                current_width = self.width(current)
        lines.append(current)
        return lines
