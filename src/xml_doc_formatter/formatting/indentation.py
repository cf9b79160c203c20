"""Indentation engine converting a token stream into output lines.

The engine keeps an element nesting stack for the duration of one ``render``
call and places every token on the output according to these rules:

* markup (tags, comments, processing instructions, DOCTYPE) starts a new
  line indented to the current depth, unless it follows content text on the
  same line;
* whitespace-only text containing a line break is layout: it is dropped and
  only contributes blank lines (suppressed by ``delete_blank_lines``);
* other text and CDATA sections are content and are copied verbatim;
  surrounding whitespace is only replaced where it contains a line break;
* an end tag right after its own start tag stays on that line.

An end tag that matches no open element does not change the depth.
"""

import re
from typing import Iterable, Iterator, List, Optional

from xml_doc_formatter.shared import FormattingPreferences, get_logger
from xml_doc_formatter.tokenization import Token, TokenType

from .composer import LineComposer

LINE_BREAK = re.compile(r"\r\n|\r|\n")
XML_WHITESPACE = " \t\r\n"


def split_lines(text: str) -> List[str]:
    """Split text on any line break convention."""
    return LINE_BREAK.split(text)


def count_line_breaks(text: str) -> int:
    """Number of line breaks in text, counting CRLF once."""
    return len(LINE_BREAK.findall(text))


class NestingStack:
    """Names of the currently open elements, outermost first."""

    def __init__(self) -> None:
        self._names: List[str] = []

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    @property
    def depth(self) -> int:
        """Current nesting depth."""
        return len(self._names)

    def push(self, name: str) -> None:
        """Open an element."""
        self._names.append(name)

    def close(self, name: str) -> Optional[int]:
        """Close the innermost open element called ``name``.

        Elements opened inside it are closed implicitly.

        Returns:
            Depth at which the closed element was opened, or None if no open
            element has that name (the stack is left untouched)
        """
        for index in range(len(self._names) - 1, -1, -1):
            if self._names[index] == name:
                del self._names[index:]
                return index
        return None


class _LineBuffer:
    """Output lines plus pending blank lines for one render call."""

    def __init__(self, keep_blank_lines: bool) -> None:
        self.lines: List[str] = []
        self.keep_blank_lines = keep_blank_lines
        self.pending_blank_lines = 0

    @property
    def current(self) -> str:
        return self.lines[-1] if self.lines else ""

    def request_blank_lines(self, count: int) -> None:
        # Blank lines before the first line of output are dropped
        if self.keep_blank_lines and self.lines and count > 0:
            self.pending_blank_lines = count

    def start_line(self, text: str) -> None:
        if self.pending_blank_lines:
            self.lines.extend([""] * self.pending_blank_lines)
            self.pending_blank_lines = 0
        self.lines.append(text)

    def append(self, text: str) -> None:
        if self.lines:
            self.lines[-1] += text
        else:
            self.lines.append(text)

    def add_verbatim(self, first: str, rest: List[str], new_line: bool) -> None:
        if new_line:
            self.start_line(first)
        else:
            self.append(first)
        self.lines.extend(rest)


class IndentationEngine:
    """Turns a validated token stream into indented output lines."""

    def __init__(
        self,
        preferences: FormattingPreferences,
        composer: Optional[LineComposer] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.preferences = preferences
        self.composer = composer or LineComposer(preferences)
        self.logger = get_logger(__name__, correlation_id, "indentation_engine")

    def render(self, tokens: Iterable[Token]) -> List[str]:
        """Render tokens into lines without line separators.

        All layout state is local to this call.
        """
        stack = NestingStack()
        out = _LineBuffer(keep_blank_lines=not self.preferences.delete_blank_lines)
        # Markup continues the current line only directly after content text
        continue_line = False
        # Content starts a new line after layout whitespace
        after_break = True
        previous: Optional[Token] = None
        unmatched_end_tags = 0

        for token in tokens:
            if token.type == TokenType.TEXT:
                if token.is_whitespace and count_line_breaks(token.value):
                    out.request_blank_lines(count_line_breaks(token.value) - 1)
                    continue_line, after_break = False, True
                else:
                    trailing_break = self._emit_text(token.value, stack.depth, out, after_break)
                    continue_line, after_break = not trailing_break, trailing_break

            elif token.type == TokenType.CDATA:
                self._emit_verbatim(token.value, stack.depth, out, new_line=after_break)
                continue_line, after_break = True, False

            elif token.type == TokenType.START_TAG:
                self._emit_start_tag(token, stack.depth, out, continue_line)
                if not token.self_closing:
                    stack.push(token.name or "")
                continue_line, after_break = False, False

            elif token.type == TokenType.END_TAG:
                level = stack.close(token.name or "")
                if level is None:
                    unmatched_end_tags += 1
                    level = stack.depth
                text = self.composer.render_end_tag(token)
                if continue_line or self._closes_previous(previous, token):
                    out.append(text)
                else:
                    out.start_line(self.composer.indent(level) + text)
                continue_line, after_break = False, False

            else:
                # Comments, processing instructions and DOCTYPE never change depth
                self._emit_verbatim(token.value, stack.depth, out, new_line=not continue_line)
                continue_line, after_break = False, False

            previous = token

        # A verbatim token ending in a line break leaves an empty last line
        if len(out.lines) > 1 and not out.lines[-1]:
            out.lines.pop()

        self.logger.debug(
            "Rendered token stream",
            extra={
                "line_count": len(out.lines),
                "unclosed_elements": stack.depth,
                "unmatched_end_tags": unmatched_end_tags,
            }
        )
        return out.lines

    @staticmethod
    def _closes_previous(previous: Optional[Token], token: Token) -> bool:
        return (previous is not None
                and previous.type == TokenType.START_TAG
                and not previous.self_closing
                and previous.name == token.name)

    def _emit_start_tag(
        self,
        token: Token,
        level: int,
        out: _LineBuffer,
        continue_line: bool
    ) -> None:
        inline = continue_line and bool(out.lines)
        column = self.composer.width(out.current) if inline else None
        lines = self.composer.compose_start_tag(token, level, column=column)
        # Attribute values may themselves contain line breaks
        first, *rest = split_lines("\n".join(lines))
        out.add_verbatim(first, rest, new_line=not inline)

    def _emit_verbatim(self, text: str, level: int, out: _LineBuffer, new_line: bool) -> None:
        first, *rest = split_lines(text)
        if new_line or not out.lines:
            first = self.composer.indent(level) + first
            new_line = True
        out.add_verbatim(first, rest, new_line)

    def _emit_text(self, text: str, level: int, out: _LineBuffer, after_break: bool) -> bool:
        """Emit content text; returns True if it ended with a line break."""
        core = text.lstrip(XML_WHITESPACE)
        leading = text[:len(text) - len(core)]
        if count_line_breaks(leading):
            out.request_blank_lines(count_line_breaks(leading) - 1)
            new_line = True
        else:
            core = text
            new_line = after_break

        stripped = core.rstrip(XML_WHITESPACE)
        trailing = core[len(stripped):]
        trailing_break = count_line_breaks(trailing) > 0
        if trailing_break:
            core = stripped

        self._emit_verbatim(core, level, out, new_line=new_line)

        if trailing_break:
            out.request_blank_lines(count_line_breaks(trailing) - 1)
        return trailing_break
