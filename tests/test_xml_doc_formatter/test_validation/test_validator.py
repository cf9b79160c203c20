"""Tests for well-formedness policy enforcement."""

import logging

import pytest

from xml_doc_formatter.shared import (
    ConfigValidationError,
    DiagnosticEntry,
    DiagnosticKind,
    DiagnosticSeverity,
    WellFormedValidation,
)
from xml_doc_formatter.tokenization import XMLTokenizer
from xml_doc_formatter.validation import (
    InvalidDocumentError,
    ValidationOutcome,
    WellFormednessValidator,
)


def make_diagnostic(kind=DiagnosticKind.UNCLOSED_ELEMENT, line=2, column=4):
    return DiagnosticEntry(
        severity=kind.default_severity,
        message="Element <a> is never closed (unbalanced end tags)",
        component="xml_tokenizer",
        kind=kind,
        position={"line": line, "column": column, "offset": 10},
    )


class TestInvalidDocumentError:
    """Tests for InvalidDocumentError."""

    def test_error_carries_diagnostic(self):
        """Test error attributes and message."""
        diagnostic = make_diagnostic()
        error = InvalidDocumentError(diagnostic)

        assert isinstance(error, ValueError)
        assert error.diagnostic is diagnostic
        assert error.kind == DiagnosticKind.UNCLOSED_ELEMENT
        assert (error.line, error.column) == (2, 4)
        assert str(error) == (
            "Document is not well-formed: Element <a> is never closed "
            "(unbalanced end tags) (line 2, column 4)"
        )


class TestWellFormednessValidator:
    """Tests for policy handling."""

    def test_fail_raises_on_first_diagnostic(self):
        """Test that FAIL aborts on the first diagnostic."""
        validator = WellFormednessValidator(WellFormedValidation.FAIL)
        diagnostic = make_diagnostic()

        with pytest.raises(InvalidDocumentError) as exc_info:
            validator.report(diagnostic)

        assert exc_info.value.diagnostic is diagnostic
        assert validator.outcome.diagnostics == [diagnostic]
        assert validator.outcome.well_formed is False

    def test_warn_collects_and_logs(self, caplog):
        """Test that WARN records diagnostics and logs a warning."""
        validator = WellFormednessValidator(WellFormedValidation.WARN, correlation_id="req-9")

        with caplog.at_level(logging.WARNING, logger="xml_doc_formatter.validation.validator"):
            validator.report(make_diagnostic())
            validator.report(make_diagnostic(DiagnosticKind.MISSING_ROOT_ELEMENT))

        assert len(validator.outcome.diagnostics) == 2
        assert validator.outcome.error_count == 1
        assert validator.outcome.warning_count == 1
        assert len(caplog.records) == 2
        assert caplog.records[0].levelno == logging.WARNING
        assert caplog.records[0].kind == "UNCLOSED_ELEMENT"
        assert caplog.records[0].correlation_id == "req-9"
        assert "(line 2, column 4)" in caplog.records[0].getMessage()

    def test_ignore_drops_diagnostics(self, caplog):
        """Test that IGNORE neither records nor logs."""
        validator = WellFormednessValidator(WellFormedValidation.IGNORE)

        with caplog.at_level(logging.DEBUG, logger="xml_doc_formatter.validation.validator"):
            validator.report(make_diagnostic())

        assert validator.outcome.diagnostics == []
        assert validator.outcome.checked is False
        assert validator.outcome.well_formed is None
        assert caplog.records == []

    def test_policy_by_name(self):
        """Test that the policy may be given by name."""
        assert WellFormednessValidator("fail").policy is WellFormedValidation.FAIL

    def test_unknown_policy(self):
        """Test that unknown policies are rejected."""
        with pytest.raises(ConfigValidationError):
            WellFormednessValidator("lenient")

    def test_as_tokenizer_callback(self):
        """Test the validator driving a tokenizer scan."""
        validator = WellFormednessValidator(WellFormedValidation.FAIL)
        stream = XMLTokenizer().tokenize("<a><b></a>", validator.report)

        with pytest.raises(InvalidDocumentError) as exc_info:
            list(stream)

        assert exc_info.value.kind == DiagnosticKind.MISMATCHED_END_TAG
        assert (exc_info.value.line, exc_info.value.column) == (1, 7)


class TestValidationOutcome:
    """Tests for ValidationOutcome."""

    def test_well_formed_when_clean(self):
        """Test an outcome without diagnostics."""
        outcome = ValidationOutcome(WellFormedValidation.WARN)
        assert outcome.checked is True
        assert outcome.well_formed is True

    def test_diagnostics_by_kind(self):
        """Test filtering diagnostics by kind."""
        outcome = ValidationOutcome(
            WellFormedValidation.WARN,
            [
                make_diagnostic(),
                make_diagnostic(DiagnosticKind.DUPLICATE_ATTRIBUTE),
                make_diagnostic(),
            ],
        )

        assert len(outcome.get_diagnostics_by_kind(DiagnosticKind.UNCLOSED_ELEMENT)) == 2
        assert outcome.get_diagnostics_by_kind(DiagnosticKind.UNTERMINATED_TAG) == []
        assert all(
            diag.severity == DiagnosticSeverity.ERROR for diag in outcome.diagnostics
        )
