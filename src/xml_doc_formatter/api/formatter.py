"""Formatting entry points for XML documents.

This module provides a module-level ``format_xml`` function for one-off use
and the reusable ``XMLDocumentFormatter`` class. Each call tokenizes the
document, applies the well-formedness policy, renders indented lines and
joins them with the caller's line separator.

All per-document state (nesting stack, diagnostics, counters) is created
inside each call, so a formatter instance can be reused and shared between
threads.
"""

import time
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional

from xml_doc_formatter.formatting import IndentationEngine, LineComposer
from xml_doc_formatter.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    FormatMetrics,
    FormattingPreferences,
    WellFormedValidation,
    get_logger,
)
from xml_doc_formatter.tokenization import Token, XMLTokenizer
from xml_doc_formatter.validation import InvalidDocumentError, WellFormednessValidator

# Constants for API operations
PREVIEW_LENGTH = 100  # Max length for content preview in logs
MS_PER_SECOND = 1000  # Milliseconds per second conversion
DEFAULT_LINE_SEPARATOR = "\n"


@dataclass
class FormatResult:
    """Outcome of formatting one document.

    Either ``text`` holds the formatted document, or ``error`` holds the
    well-formedness failure that stopped formatting under the FAIL policy.
    """

    text: Optional[str] = None
    success: bool = True
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    error: Optional[InvalidDocumentError] = None
    policy: WellFormedValidation = WellFormedValidation.WARN
    metrics: FormatMetrics = field(default_factory=FormatMetrics)
    correlation_id: Optional[str] = None

    @property
    def well_formed(self) -> Optional[bool]:
        """True if no diagnostic was recorded, None under the IGNORE policy."""
        if self.policy is WellFormedValidation.IGNORE:
            return None
        return not self.diagnostics

    @property
    def processing_time_ms(self) -> float:
        """Get processing time in milliseconds."""
        return self.metrics.processing_time_ms

    def get_diagnostics_by_severity(
        self,
        severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(
            diag.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for diag in self.diagnostics
        )

    def unwrap(self) -> str:
        """Return the formatted text, or raise the failure.

        Raises:
            InvalidDocumentError: If formatting failed
        """
        if self.error is not None:
            raise self.error
        return self.text or ""


def format_xml(
    source_text: str,
    preferences: Optional[FormattingPreferences] = None,
    line_separator: str = DEFAULT_LINE_SEPARATOR,
    correlation_id: Optional[str] = None
) -> str:
    """Format an XML document.

    Args:
        source_text: XML document text
        preferences: Formatting preferences (defaults when omitted)
        line_separator: String placed at every output line boundary
        correlation_id: Optional correlation ID for request tracking

    Returns:
        Formatted document text

    Raises:
        InvalidDocumentError: Under the FAIL policy, for a document that is
            not well-formed

    Examples:
        >>> format_xml('<root><item id="1">value</item></root>')
        '<root>\\n\\t<item id="1">value</item>\\n</root>\\n'
    """
    formatter = XMLDocumentFormatter(line_separator, preferences, correlation_id)
    return formatter.format(source_text)


class XMLDocumentFormatter:
    """Reusable XML formatter bound to a line separator and preferences.

    Attributes:
        line_separator: String placed at every output line boundary
        preferences: Immutable formatting preferences
        correlation_id: Correlation ID for request tracking

    Examples:
        Reusing one formatter for many documents:
        >>> formatter = XMLDocumentFormatter("\\n", FormattingPreferences())
        >>> outputs = [formatter.format(xml) for xml in documents]

        Branching on the result instead of catching:
        >>> result = formatter.format_document("<a><b></a>")
        >>> result.success, result.has_errors()
        (True, True)
    """

    def __init__(
        self,
        line_separator: str = DEFAULT_LINE_SEPARATOR,
        preferences: Optional[FormattingPreferences] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the formatter.

        Args:
            line_separator: Non-empty string placed at every line boundary
            preferences: Formatting preferences (defaults when omitted)
            correlation_id: Optional correlation ID for request tracking

        Raises:
            TypeError: If an argument has the wrong type
            ValueError: If the line separator is empty
        """
        if not isinstance(line_separator, str):
            raise TypeError(
                f"line_separator must be str, not {type(line_separator).__name__}"
            )
        if not line_separator:
            raise ValueError("line_separator must not be empty")
        if preferences is None:
            preferences = FormattingPreferences()
        elif not isinstance(preferences, FormattingPreferences):
            raise TypeError(
                "preferences must be FormattingPreferences, "
                f"not {type(preferences).__name__}"
            )

        self.line_separator = line_separator
        self.preferences = preferences
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "xml_document_formatter")

        self._tokenizer = XMLTokenizer(
            correlation_id=correlation_id,
            check_root_element=preferences.check_root_element,
        )
        self._engine = IndentationEngine(
            preferences,
            LineComposer(preferences),
            correlation_id=correlation_id,
        )

    def format(self, source_text: str) -> str:
        """Format a document, raising on failure.

        Raises:
            InvalidDocumentError: Under the FAIL policy, for a document that
                is not well-formed
        """
        return self.format_document(source_text).unwrap()

    def format_document(self, source_text: str) -> FormatResult:
        """Format a document and report the outcome as a result object.

        Well-formedness problems never raise from this method; under the FAIL
        policy they are returned in ``FormatResult.error``.

        Raises:
            TypeError: If source_text is not a string
        """
        if not isinstance(source_text, str):
            raise TypeError(
                f"XML source must be str, not {type(source_text).__name__}"
            )

        start_time = time.time()
        policy = self.preferences.well_formed_validation
        metrics = FormatMetrics(characters_processed=len(source_text))
        validator = WellFormednessValidator(policy, self.correlation_id)

        self.logger.debug(
            "Starting format operation",
            extra={
                "content_length": len(source_text),
                "policy": policy.value,
                "preview": (
                    source_text[:PREVIEW_LENGTH] + "..."
                    if len(source_text) > PREVIEW_LENGTH else source_text
                )
            }
        )

        tokens = self._tokenizer.tokenize(source_text, validator.report)
        try:
            lines = self._engine.render(self._count_tokens(tokens, metrics))
        except InvalidDocumentError as e:
            metrics.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND
            metrics.diagnostics_reported = len(validator.outcome.diagnostics)
            return FormatResult(
                text=None,
                success=False,
                diagnostics=list(validator.outcome.diagnostics),
                error=e,
                policy=policy,
                metrics=metrics,
                correlation_id=self.correlation_id,
            )

        text = self.line_separator.join(lines)
        if lines:
            text += self.line_separator

        metrics.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND
        metrics.lines_emitted = len(lines)
        metrics.diagnostics_reported = len(validator.outcome.diagnostics)

        self.logger.info(
            "Format operation completed",
            extra={
                "lines_emitted": metrics.lines_emitted,
                "diagnostics": metrics.diagnostics_reported,
                "processing_time_ms": metrics.processing_time_ms,
            }
        )

        return FormatResult(
            text=text,
            success=True,
            diagnostics=list(validator.outcome.diagnostics),
            policy=policy,
            metrics=metrics,
            correlation_id=self.correlation_id,
        )

    @staticmethod
    def _count_tokens(tokens: Iterable[Token], metrics: FormatMetrics) -> Iterator[Token]:
        for token in tokens:
            metrics.tokens_processed += 1
            yield token
