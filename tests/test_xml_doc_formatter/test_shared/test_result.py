"""Tests for diagnostic entries and formatting metrics."""

import pytest

from xml_doc_formatter.shared.result import (
    DiagnosticEntry,
    DiagnosticKind,
    DiagnosticSeverity,
    FormatMetrics,
)


class TestDiagnosticKind:
    """Test suite for DiagnosticKind."""

    @pytest.mark.parametrize("kind", [
        DiagnosticKind.MISSING_ROOT_ELEMENT,
        DiagnosticKind.MULTIPLE_ROOT_ELEMENTS,
        DiagnosticKind.CONTENT_OUTSIDE_ROOT,
    ])
    def test_structural_kinds_are_warnings(self, kind):
        """Test that root element advisories default to WARNING."""
        assert kind.is_structural
        assert kind.default_severity == DiagnosticSeverity.WARNING

    def test_syntax_kinds_are_errors(self):
        """Test that every other kind defaults to ERROR."""
        structural = {
            DiagnosticKind.MISSING_ROOT_ELEMENT,
            DiagnosticKind.MULTIPLE_ROOT_ELEMENTS,
            DiagnosticKind.CONTENT_OUTSIDE_ROOT,
        }
        for kind in DiagnosticKind:
            if kind not in structural:
                assert not kind.is_structural
                assert kind.default_severity == DiagnosticSeverity.ERROR


class TestDiagnosticEntry:
    """Test suite for DiagnosticEntry."""

    def test_entry_with_position(self):
        """Test location accessors and description."""
        entry = DiagnosticEntry(
            severity=DiagnosticSeverity.ERROR,
            message="Element <a> is never closed (unbalanced end tags)",
            component="xml_tokenizer",
            kind=DiagnosticKind.UNCLOSED_ELEMENT,
            position={"line": 3, "column": 5, "offset": 20},
        )

        assert entry.line == 3
        assert entry.column == 5
        assert entry.describe() == (
            "Element <a> is never closed (unbalanced end tags) (line 3, column 5)"
        )

    def test_entry_without_position(self):
        """Test description when no position is known."""
        entry = DiagnosticEntry(DiagnosticSeverity.INFO, "note", "tests")

        assert entry.line is None
        assert entry.column is None
        assert entry.describe() == "note"

    def test_empty_message_rejected(self):
        """Test diagnostic validation."""
        with pytest.raises(ValueError, match="message cannot be empty"):
            DiagnosticEntry(DiagnosticSeverity.ERROR, "", "tests")

    def test_empty_component_rejected(self):
        """Test diagnostic validation."""
        with pytest.raises(ValueError, match="component cannot be empty"):
            DiagnosticEntry(DiagnosticSeverity.ERROR, "message", "")


class TestFormatMetrics:
    """Test suite for FormatMetrics."""

    def test_rates(self):
        """Test throughput calculations."""
        metrics = FormatMetrics(
            processing_time_ms=500.0, characters_processed=1000, tokens_processed=50
        )

        assert metrics.characters_per_second == 2000.0
        assert metrics.tokens_per_second == 100.0

    def test_rates_without_time(self):
        """Test that zero processing time yields zero rates."""
        metrics = FormatMetrics(characters_processed=10)

        assert metrics.characters_per_second == 0.0
        assert metrics.tokens_per_second == 0.0

    def test_to_dict(self):
        """Test dictionary conversion."""
        data = FormatMetrics(lines_emitted=4, diagnostics_reported=1).to_dict()

        assert data["lines_emitted"] == 4
        assert data["diagnostics_reported"] == 1
        assert set(data) == {
            "processing_time_ms",
            "characters_processed",
            "tokens_processed",
            "lines_emitted",
            "diagnostics_reported",
        }
