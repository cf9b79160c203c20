"""XML tokenization with well-formedness diagnostics.

This module implements a best-effort XML tokenizer that walks raw document
text and lazily yields lexical tokens in document order. Malformed constructs
never stop the scan on their own: they are reported to a diagnostic callback
and the tokenizer recovers locally. A callback that raises stops the scan,
which is how the FAIL policy aborts at the first diagnostic.

DOCTYPE declarations are kept as opaque spans; nothing referenced by them is
ever fetched or interpreted.
"""

import bisect
import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from xml_doc_formatter.shared.result import DiagnosticEntry, DiagnosticKind

# Markup delimiters
COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"
CDATA_OPEN = "<![CDATA["
CDATA_CLOSE = "]]>"
DOCTYPE_OPEN = "<!DOCTYPE"
PI_OPEN = "<?"
PI_CLOSE = "?>"

XML_WHITESPACE = " \t\r\n"
QUOTE_CHARS = ('"', "'")
QUOTE_ENTITIES = {'"': "&quot;", "'": "&apos;"}
BYTE_ORDER_MARK = "\ufeff"
UNICODE_START_OFFSET = 0x80  # Start of Unicode characters

COMPONENT = "xml_tokenizer"

logger = logging.getLogger(__name__)

DiagnosticCallback = Callable[[DiagnosticEntry], None]


class TokenType(Enum):
    """XML token types produced by the tokenizer."""

    START_TAG = auto()               # <name attr="v"> or <name/>
    END_TAG = auto()                 # </name>
    TEXT = auto()                    # Character content between markup
    COMMENT = auto()                 # <!-- ... -->
    PROCESSING_INSTRUCTION = auto()  # <?target ... ?>, including <?xml ...?>
    CDATA = auto()                   # <![CDATA[ ... ]]>
    DOCTYPE = auto()                 # <!DOCTYPE ...>, kept opaque


@dataclass(frozen=True)
class TokenPosition:
    """Position information for XML tokens."""

    line: int
    column: int
    offset: int

    def __post_init__(self) -> None:
        """Validate position values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")

    def to_dict(self) -> Dict[str, int]:
        """Convert to the position mapping used by diagnostics."""
        return {"line": self.line, "column": self.column, "offset": self.offset}


@dataclass
class Attribute:
    """A single attribute of a start tag, in source order."""

    name: str
    value: Optional[str]
    quote: str = '"'
    position: Optional[TokenPosition] = None

    def render(self) -> str:
        """Render the attribute in canonical ``name="value"`` form."""
        if self.value is None:
            return self.name
        quote = self.quote
        value = self.value
        if quote in value:
            other = "'" if quote == '"' else '"'
            if other in value:
                value = value.replace(quote, QUOTE_ENTITIES[quote])
            else:
                quote = other
        return f"{self.name}={quote}{value}{quote}"


@dataclass
class Token:
    """Represents a single XML token with its source span."""

    type: TokenType
    value: str
    position: TokenPosition
    end_offset: int
    name: Optional[str] = None
    attributes: List[Attribute] = field(default_factory=list)
    self_closing: bool = False

    def __post_init__(self) -> None:
        """Validate token span."""
        if self.end_offset < self.position.offset:
            raise ValueError("Token end offset must not precede its start")

    @property
    def is_whitespace(self) -> bool:
        """Check if this is a text token made only of whitespace."""
        return self.type == TokenType.TEXT and not self.value.strip(XML_WHITESPACE)


def is_name_start_char(char: str) -> bool:
    """Check if character can start an XML name."""
    return (char.isalpha() or
            char == "_" or
            char == ":" or
            ord(char) >= UNICODE_START_OFFSET)


def is_name_char(char: str) -> bool:
    """Check if character can be part of an XML name."""
    return (is_name_start_char(char) or
            char.isdigit() or
            char in ".-")


def _discard(diagnostic: DiagnosticEntry) -> None:
    pass


class XMLTokenizer:
    """XML tokenizer producing a lazy, single-pass token stream.

    The tokenizer object only holds configuration. All scanning state lives in
    a scanner created for each ``tokenize`` call, so one tokenizer can be
    shared freely between calls and threads.

    Examples:
        >>> tokenizer = XMLTokenizer()
        >>> [t.type.name for t in tokenizer.tokenize("<a>x</a>")]
        ['START_TAG', 'TEXT', 'END_TAG']
    """

    def __init__(
        self,
        correlation_id: Optional[str] = None,
        check_root_element: bool = False
    ) -> None:
        """Initialize the XML tokenizer.

        Args:
            correlation_id: Optional correlation ID for tracking requests
            check_root_element: Report documents without exactly one root
                element, or with content outside it
        """
        self.correlation_id = correlation_id
        self.check_root_element = check_root_element

    def tokenize(
        self,
        text: str,
        on_diagnostic: Optional[DiagnosticCallback] = None
    ) -> Iterator[Token]:
        """Tokenize document text.

        Args:
            text: Complete XML document text
            on_diagnostic: Callback receiving well-formedness diagnostics in
                document order; exceptions it raises stop the scan

        Returns:
            Iterator over tokens in document order

        Raises:
            TypeError: If text is not a string
        """
        if not isinstance(text, str):
            raise TypeError(f"XML source must be str, not {type(text).__name__}")
        scanner = _DocumentScanner(
            text,
            on_diagnostic or _discard,
            check_root_element=self.check_root_element,
            correlation_id=self.correlation_id,
        )
        return scanner.scan()


class _DocumentScanner:
    """Per-call scanning state for XMLTokenizer."""

    def __init__(
        self,
        text: str,
        on_diagnostic: DiagnosticCallback,
        check_root_element: bool,
        correlation_id: Optional[str]
    ) -> None:
        self.text = text
        self.length = len(text)
        self.pos = 0
        self.on_diagnostic = on_diagnostic
        self.check_root_element = check_root_element
        self.correlation_id = correlation_id

        self.line_starts = [0]
        self.line_starts.extend(i + 1 for i, char in enumerate(text) if char == "\n")

        self.open_elements: List[Tuple[str, TokenPosition]] = []
        self.root_count = 0
        self.doctype_seen = False
        self.token_count = 0
        self.diagnostic_count = 0

    def scan(self) -> Iterator[Token]:
        logger.debug(
            "Starting tokenization",
            extra={
                "component": COMPONENT,
                "correlation_id": self.correlation_id,
                "char_count": self.length,
            }
        )

        while self.pos < self.length:
            if self.text[self.pos] == "<" and self._is_markup_start(self.pos):
                token = self._scan_markup()
            else:
                token = self._scan_text()
            self._track_structure(token)
            self.token_count += 1
            yield token

        self._finish()

        logger.debug(
            "Tokenization completed",
            extra={
                "component": COMPONENT,
                "correlation_id": self.correlation_id,
                "token_count": self.token_count,
                "diagnostic_count": self.diagnostic_count,
            }
        )

    # Position and reporting

    def _position(self, offset: int) -> TokenPosition:
        line = bisect.bisect_right(self.line_starts, offset)
        column = offset - self.line_starts[line - 1] + 1
        return TokenPosition(line, column, offset)

    def _report(
        self,
        kind: DiagnosticKind,
        message: str,
        offset: int,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        self.diagnostic_count += 1
        entry = DiagnosticEntry(
            severity=kind.default_severity,
            message=message,
            component=COMPONENT,
            kind=kind,
            position=self._position(min(offset, self.length)).to_dict(),
            details=details,
            correlation_id=self.correlation_id,
        )
        self.on_diagnostic(entry)

    # Character helpers

    def _is_markup_start(self, offset: int) -> bool:
        if offset + 1 >= self.length:
            return False
        char = self.text[offset + 1]
        return char in "!?/" or is_name_start_char(char)

    def _scan_name(self, offset: int) -> int:
        while offset < self.length and is_name_char(self.text[offset]):
            offset += 1
        return offset

    def _skip_whitespace(self, offset: int) -> int:
        while offset < self.length and self.text[offset] in XML_WHITESPACE:
            offset += 1
        return offset

    def _find_tag_close(self, offset: int) -> int:
        """Index of the next '>' or '<', or the end of the text."""
        while offset < self.length and self.text[offset] not in "<>":
            offset += 1
        return offset

    def _make_token(self, token_type: TokenType, start: int, end: int, **payload: Any) -> Token:
        self.pos = end
        return Token(
            type=token_type,
            value=self.text[start:end],
            position=self._position(start),
            end_offset=end,
            **payload
        )

    # Scanners

    def _scan_text(self) -> Token:
        start = self.pos
        offset = start
        while True:
            lt = self.text.find("<", offset)
            if lt == -1:
                end = self.length
                break
            if self._is_markup_start(lt):
                end = lt
                break
            self._report(
                DiagnosticKind.INVALID_MARKUP,
                "Unescaped '<' in character data",
                lt
            )
            offset = lt + 1
        return self._make_token(TokenType.TEXT, start, end)

    def _scan_markup(self) -> Token:
        text = self.text
        start = self.pos
        if text.startswith(COMMENT_OPEN, start):
            return self._scan_delimited(
                TokenType.COMMENT, COMMENT_OPEN, COMMENT_CLOSE,
                DiagnosticKind.UNTERMINATED_COMMENT, "Comment"
            )
        if text.startswith(CDATA_OPEN, start):
            return self._scan_delimited(
                TokenType.CDATA, CDATA_OPEN, CDATA_CLOSE,
                DiagnosticKind.UNTERMINATED_CDATA, "CDATA section"
            )
        if text.startswith(DOCTYPE_OPEN, start):
            return self._scan_doctype()
        if text.startswith("<!", start):
            end = self._find_tag_close(start + 2)
            if end < self.length and text[end] == ">":
                end += 1
            self._report(
                DiagnosticKind.INVALID_MARKUP,
                "Unknown markup declaration",
                start,
                details={"markup": text[start:end]}
            )
            return self._make_token(TokenType.TEXT, start, end)
        if text.startswith(PI_OPEN, start):
            return self._scan_processing_instruction()
        if text.startswith("</", start):
            return self._scan_end_tag()
        return self._scan_start_tag()

    def _scan_delimited(
        self,
        token_type: TokenType,
        opener: str,
        closer: str,
        kind: DiagnosticKind,
        label: str
    ) -> Token:
        start = self.pos
        close = self.text.find(closer, start + len(opener))
        if close == -1:
            self._report(kind, f"{label} is not terminated", start)
            end = self.length
        else:
            end = close + len(closer)
        return self._make_token(token_type, start, end)

    def _scan_processing_instruction(self) -> Token:
        start = self.pos
        target_end = self._scan_name(start + len(PI_OPEN))
        target = self.text[start + len(PI_OPEN):target_end]
        if not target:
            self._report(
                DiagnosticKind.INVALID_MARKUP,
                "Processing instruction has no target",
                start
            )
        token = self._scan_delimited(
            TokenType.PROCESSING_INSTRUCTION, PI_OPEN, PI_CLOSE,
            DiagnosticKind.UNTERMINATED_PROCESSING_INSTRUCTION,
            "Processing instruction"
        )
        token.name = target
        return token

    def _scan_doctype(self) -> Token:
        text = self.text
        start = self.pos
        offset = start + len(DOCTYPE_OPEN)
        name_start = self._skip_whitespace(offset)
        name = text[name_start:self._scan_name(name_start)]

        quote: Optional[str] = None
        bracket_depth = 0
        end = self.length
        while offset < self.length:
            char = text[offset]
            if quote:
                if char == quote:
                    quote = None
            elif bracket_depth and text.startswith((COMMENT_OPEN, PI_OPEN), offset):
                # Comments and PIs in the internal subset may hold stray quotes
                if text.startswith(COMMENT_OPEN, offset):
                    opener, closer = COMMENT_OPEN, COMMENT_CLOSE
                else:
                    opener, closer = PI_OPEN, PI_CLOSE
                close = text.find(closer, offset + len(opener))
                if close == -1:
                    offset = self.length
                    continue
                offset = close + len(closer)
                continue
            elif char in QUOTE_CHARS:
                quote = char
            elif char == "[":
                bracket_depth += 1
            elif char == "]":
                bracket_depth = max(0, bracket_depth - 1)
            elif char == ">" and bracket_depth == 0:
                end = offset + 1
                break
            offset += 1
        else:
            self._report(
                DiagnosticKind.UNTERMINATED_DOCTYPE,
                "DOCTYPE declaration is not terminated",
                start
            )
        return self._make_token(TokenType.DOCTYPE, start, end, name=name or None)

    def _scan_end_tag(self) -> Token:
        text = self.text
        start = self.pos
        name_start = start + 2
        name_end = self._scan_name(name_start)
        name = text[name_start:name_end]
        if not name:
            self._report(
                DiagnosticKind.MALFORMED_TAG,
                "End tag has no element name",
                start
            )

        offset = self._skip_whitespace(name_end)
        if offset < self.length and text[offset] == ">":
            end = offset + 1
        else:
            close = self._find_tag_close(offset)
            if close < self.length and text[close] == ">":
                self._report(
                    DiagnosticKind.MALFORMED_TAG,
                    f"Unexpected content in end tag </{name}>",
                    offset
                )
                end = close + 1
            else:
                self._report(
                    DiagnosticKind.UNTERMINATED_TAG,
                    f"End tag </{name}> is not terminated",
                    start
                )
                end = close
        return self._make_token(TokenType.END_TAG, start, end, name=name)

    def _scan_start_tag(self) -> Token:
        text = self.text
        start = self.pos
        name_end = self._scan_name(start + 1)
        name = text[start + 1:name_end]

        attributes: List[Attribute] = []
        seen_names = set()
        self_closing = False
        offset = name_end
        while True:
            gap_start = offset
            offset = self._skip_whitespace(offset)
            if offset >= self.length:
                self._report(
                    DiagnosticKind.UNTERMINATED_TAG,
                    f"Start tag <{name}> is not terminated",
                    start
                )
                end = self.length
                break

            char = text[offset]
            if char == ">":
                end = offset + 1
                break
            if char == "/":
                if text.startswith("/>", offset):
                    self_closing = True
                    end = offset + 2
                    break
                self._report(
                    DiagnosticKind.MALFORMED_TAG,
                    f"Unexpected '/' in start tag <{name}>",
                    offset
                )
                offset += 1
                continue
            if char == "<":
                self._report(
                    DiagnosticKind.UNTERMINATED_TAG,
                    f"Start tag <{name}> is not terminated",
                    start
                )
                end = offset
                break
            if is_name_start_char(char):
                if offset == gap_start and attributes:
                    self._report(
                        DiagnosticKind.MALFORMED_ATTRIBUTE,
                        f"Attributes of <{name}> must be separated by whitespace",
                        offset
                    )
                attribute, offset = self._scan_attribute(offset, name)
                if attribute.name in seen_names:
                    self._report(
                        DiagnosticKind.DUPLICATE_ATTRIBUTE,
                        f"Attribute '{attribute.name}' is repeated in <{name}>",
                        attribute.position.offset if attribute.position else offset
                    )
                seen_names.add(attribute.name)
                attributes.append(attribute)
                continue

            self._report(
                DiagnosticKind.MALFORMED_TAG,
                f"Unexpected character {char!r} in start tag <{name}>",
                offset
            )
            offset += 1

        return self._make_token(
            TokenType.START_TAG, start, end,
            name=name, attributes=attributes, self_closing=self_closing
        )

    def _scan_attribute(self, offset: int, tag_name: str) -> Tuple[Attribute, int]:
        text = self.text
        attr_start = offset
        name_end = self._scan_name(offset)
        attr_name = text[offset:name_end]
        position = self._position(attr_start)

        offset = self._skip_whitespace(name_end)
        if offset >= self.length or text[offset] != "=":
            self._report(
                DiagnosticKind.MALFORMED_ATTRIBUTE,
                f"Attribute '{attr_name}' in <{tag_name}> has no value",
                attr_start
            )
            return Attribute(attr_name, None, position=position), name_end

        offset = self._skip_whitespace(offset + 1)
        if offset < self.length and text[offset] in QUOTE_CHARS:
            quote = text[offset]
            close = text.find(quote, offset + 1)
            if close == -1 or "<" in text[offset + 1:close]:
                # Missing or mismatched quote: the value ends with the tag
                self._report(
                    DiagnosticKind.UNTERMINATED_ATTRIBUTE_VALUE,
                    f"Value of attribute '{attr_name}' in <{tag_name}> is not terminated",
                    offset
                )
                stop = self._find_tag_close(offset + 1)
                return Attribute(attr_name, text[offset + 1:stop], quote, position), stop
            return Attribute(attr_name, text[offset + 1:close], quote, position), close + 1

        value_end = offset
        while (value_end < self.length
               and text[value_end] not in XML_WHITESPACE
               and text[value_end] not in "<>"
               and not text.startswith("/>", value_end)):
            value_end += 1
        if value_end == offset:
            message = f"Attribute '{attr_name}' in <{tag_name}> has no value"
        else:
            message = f"Value of attribute '{attr_name}' in <{tag_name}> is not quoted"
        self._report(DiagnosticKind.MALFORMED_ATTRIBUTE, message, offset)
        return Attribute(attr_name, text[offset:value_end], '"', position), value_end

    # Structure bookkeeping

    def _track_structure(self, token: Token) -> None:
        if token.type == TokenType.START_TAG:
            if not self.open_elements:
                self.root_count += 1
                if self.check_root_element and self.root_count == 2:
                    self._report(
                        DiagnosticKind.MULTIPLE_ROOT_ELEMENTS,
                        f"Document has more than one root element: <{token.name}>",
                        token.position.offset
                    )
            if not token.self_closing:
                self.open_elements.append((token.name or "", token.position))
        elif token.type == TokenType.END_TAG:
            self._close_element(token)
        elif token.type in (TokenType.TEXT, TokenType.CDATA):
            content = token.value
            if token.position.offset == 0:
                content = content.lstrip(BYTE_ORDER_MARK)
            if (self.check_root_element
                    and not self.open_elements
                    and (token.type == TokenType.CDATA or content.strip(XML_WHITESPACE))):
                self._report(
                    DiagnosticKind.CONTENT_OUTSIDE_ROOT,
                    "Character data outside the root element",
                    token.position.offset
                )
        elif token.type == TokenType.DOCTYPE:
            if self.doctype_seen or self.root_count:
                self._report(
                    DiagnosticKind.MISPLACED_DOCTYPE,
                    "DOCTYPE declaration must appear once, before the root element",
                    token.position.offset
                )
            self.doctype_seen = True
        elif token.type == TokenType.PROCESSING_INSTRUCTION:
            if (token.name or "").lower() == "xml" and not self._at_document_start(token):
                self._report(
                    DiagnosticKind.MISPLACED_XML_DECLARATION,
                    "XML declaration is only allowed at the start of the document",
                    token.position.offset
                )

    def _at_document_start(self, token: Token) -> bool:
        offset = token.position.offset
        return offset == 0 or (offset == 1 and self.text[0] == BYTE_ORDER_MARK)

    def _close_element(self, token: Token) -> None:
        name = token.name or ""
        if not self.open_elements:
            self._report(
                DiagnosticKind.UNEXPECTED_END_TAG,
                f"End tag </{name}> has no matching start tag",
                token.position.offset
            )
            return

        if self.open_elements[-1][0] == name:
            self.open_elements.pop()
            return

        if any(open_name == name for open_name, _ in self.open_elements):
            while self.open_elements[-1][0] != name:
                unclosed, opened_at = self.open_elements.pop()
                self._report(
                    DiagnosticKind.MISMATCHED_END_TAG,
                    f"Element <{unclosed}> opened at line {opened_at.line} "
                    f"is closed by </{name}>",
                    token.position.offset
                )
            self.open_elements.pop()
        else:
            self._report(
                DiagnosticKind.MISMATCHED_END_TAG,
                f"End tag </{name}> does not match open element "
                f"<{self.open_elements[-1][0]}>",
                token.position.offset
            )

    def _finish(self) -> None:
        for name, opened_at in reversed(self.open_elements):
            self._report(
                DiagnosticKind.UNCLOSED_ELEMENT,
                f"Element <{name}> is never closed (unbalanced end tags)",
                opened_at.offset
            )
        if self.check_root_element and self.root_count == 0:
            self._report(
                DiagnosticKind.MISSING_ROOT_ELEMENT,
                "Document has no root element",
                self.length
            )
