"""Well-formedness policy enforcement for XML document formatting.

The tokenizer reports diagnostics; this module decides what they mean for
the current call. Under FAIL the first diagnostic aborts formatting, under
WARN diagnostics are collected and logged, and under IGNORE they are
dropped without being recorded.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from xml_doc_formatter.shared import (
    DiagnosticEntry,
    DiagnosticKind,
    DiagnosticSeverity,
    WellFormedValidation,
    get_logger,
)


class InvalidDocumentError(ValueError):
    """Raised when a document is not well-formed under the FAIL policy."""

    def __init__(self, diagnostic: DiagnosticEntry) -> None:
        super().__init__(f"Document is not well-formed: {diagnostic.describe()}")
        self.diagnostic = diagnostic

    @property
    def kind(self) -> Optional[DiagnosticKind]:
        """Kind of the diagnostic that failed the document."""
        return self.diagnostic.kind

    @property
    def line(self) -> Optional[int]:
        """Line of the offending construct."""
        return self.diagnostic.line

    @property
    def column(self) -> Optional[int]:
        """Column of the offending construct."""
        return self.diagnostic.column


@dataclass
class ValidationOutcome:
    """Diagnostics collected for one formatting call."""

    policy: WellFormedValidation
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)

    @property
    def checked(self) -> bool:
        """Whether diagnostics were recorded at all (False under IGNORE)."""
        return self.policy is not WellFormedValidation.IGNORE

    @property
    def well_formed(self) -> Optional[bool]:
        """True if no diagnostic was recorded, None when nothing was checked."""
        if not self.checked:
            return None
        return not self.diagnostics

    @property
    def error_count(self) -> int:
        """Get number of error-level diagnostics."""
        return len([
            diag for diag in self.diagnostics
            if diag.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
        ])

    @property
    def warning_count(self) -> int:
        """Get number of warning-level diagnostics."""
        return len([
            diag for diag in self.diagnostics
            if diag.severity == DiagnosticSeverity.WARNING
        ])

    def get_diagnostics_by_kind(self, kind: DiagnosticKind) -> List[DiagnosticEntry]:
        """Get diagnostics of a specific kind."""
        return [diag for diag in self.diagnostics if diag.kind == kind]


class WellFormednessValidator:
    """Applies a well-formedness policy to tokenizer diagnostics.

    A validator is created for each formatting call; ``report`` is passed to
    the tokenizer as its diagnostic callback.

    Examples:
        >>> validator = WellFormednessValidator(WellFormedValidation.WARN)
        >>> tokens = list(XMLTokenizer().tokenize("<a>", validator.report))
        >>> validator.outcome.well_formed
        False
    """

    def __init__(
        self,
        policy: WellFormedValidation,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the validator.

        Args:
            policy: Policy applied to every reported diagnostic
            correlation_id: Optional correlation ID for request tracking
        """
        self.policy = WellFormedValidation.parse(policy)
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "well_formed_validator")
        self._outcome = ValidationOutcome(policy=self.policy)

    @property
    def outcome(self) -> ValidationOutcome:
        """Diagnostics recorded so far."""
        return self._outcome

    def report(self, diagnostic: DiagnosticEntry) -> None:
        """Handle one diagnostic according to the policy.

        Raises:
            InvalidDocumentError: Under the FAIL policy
        """
        if self.policy is WellFormedValidation.IGNORE:
            return

        self._outcome.diagnostics.append(diagnostic)

        if self.policy is WellFormedValidation.FAIL:
            self.logger.info(
                "Document rejected by well-formedness validation",
                extra={
                    "kind": diagnostic.kind.name if diagnostic.kind else None,
                    "position": diagnostic.position,
                }
            )
            raise InvalidDocumentError(diagnostic)

        self.logger.warning(
            diagnostic.describe(),
            extra={
                "kind": diagnostic.kind.name if diagnostic.kind else None,
                "position": diagnostic.position,
            }
        )
