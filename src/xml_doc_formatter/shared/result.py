"""Diagnostic types and metrics for XML document formatting.

This module defines the diagnostic entries reported while scanning a document
and the per-call metrics attached to every formatting result.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()      # Debug-level information
    INFO = auto()       # Informational messages
    WARNING = auto()    # Structural advisories (root element checks)
    ERROR = auto()      # Well-formedness violations
    CRITICAL = auto()   # Failures that stopped formatting


class DiagnosticKind(Enum):
    """Well-formedness conditions detected while scanning a document."""

    # Unterminated constructs
    UNTERMINATED_TAG = auto()
    UNTERMINATED_COMMENT = auto()
    UNTERMINATED_CDATA = auto()
    UNTERMINATED_PROCESSING_INSTRUCTION = auto()
    UNTERMINATED_DOCTYPE = auto()
    UNTERMINATED_ATTRIBUTE_VALUE = auto()

    # Malformed markup
    INVALID_MARKUP = auto()
    MALFORMED_TAG = auto()
    MALFORMED_ATTRIBUTE = auto()
    DUPLICATE_ATTRIBUTE = auto()
    MISPLACED_DOCTYPE = auto()
    MISPLACED_XML_DECLARATION = auto()

    # Element balance
    UNEXPECTED_END_TAG = auto()
    MISMATCHED_END_TAG = auto()
    UNCLOSED_ELEMENT = auto()

    # Structural advisories, only reported with root element checking
    MISSING_ROOT_ELEMENT = auto()
    MULTIPLE_ROOT_ELEMENTS = auto()
    CONTENT_OUTSIDE_ROOT = auto()

    @property
    def is_structural(self) -> bool:
        """Check if this kind is a structural advisory rather than a syntax error."""
        return self in _STRUCTURAL_KINDS

    @property
    def default_severity(self) -> DiagnosticSeverity:
        """Severity used when the tokenizer reports this kind."""
        if self.is_structural:
            return DiagnosticSeverity.WARNING
        return DiagnosticSeverity.ERROR


_STRUCTURAL_KINDS = frozenset({
    DiagnosticKind.MISSING_ROOT_ELEMENT,
    DiagnosticKind.MULTIPLE_ROOT_ELEMENTS,
    DiagnosticKind.CONTENT_OUTSIDE_ROOT,
})


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    kind: Optional[DiagnosticKind] = None
    position: Optional[Dict[str, int]] = None
    details: Optional[Dict[str, Any]] = None
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")

    @property
    def line(self) -> Optional[int]:
        """Line number of the diagnostic, if known."""
        return self.position.get("line") if self.position else None

    @property
    def column(self) -> Optional[int]:
        """Column number of the diagnostic, if known."""
        return self.position.get("column") if self.position else None

    def describe(self) -> str:
        """Human readable description including the location."""
        if self.line is None:
            return self.message
        return f"{self.message} (line {self.line}, column {self.column})"


@dataclass
class FormatMetrics:
    """Performance metrics for a single formatting call."""

    processing_time_ms: float = 0.0
    characters_processed: int = 0
    tokens_processed: int = 0
    lines_emitted: int = 0
    diagnostics_reported: int = 0

    @property
    def characters_per_second(self) -> float:
        """Calculate characters processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.characters_processed * 1000.0) / self.processing_time_ms

    @property
    def tokens_per_second(self) -> float:
        """Calculate tokens processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.tokens_processed * 1000.0) / self.processing_time_ms

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to a plain dictionary."""
        return {
            "processing_time_ms": self.processing_time_ms,
            "characters_processed": self.characters_processed,
            "tokens_processed": self.tokens_processed,
            "lines_emitted": self.lines_emitted,
            "diagnostics_reported": self.diagnostics_reported,
        }
