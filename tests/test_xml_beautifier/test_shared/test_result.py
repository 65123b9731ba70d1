"""Tests for diagnostic entries, build metrics and exceptions."""

from pathlib import Path

import pytest

from xml_beautifier.shared import (
    BeautifierError,
    BuildMetrics,
    DiagnosticEntry,
    DiagnosticSeverity,
    InputSourceError,
    ParserFatalError,
    StructuralInconsistencyError,
)


class TestDiagnosticEntry:
    """Test DiagnosticEntry functionality."""

    def test_diagnostic_entry_creation(self):
        """Test creating a diagnostic entry with position."""
        entry = DiagnosticEntry(
            severity=DiagnosticSeverity.WARNING,
            message="Something odd",
            component="parser",
            position={"line": 3, "column": 7},
            correlation_id="abc",
        )

        assert entry.line == 3
        assert entry.column == 7
        assert entry.timestamp > 0
        assert entry.correlation_id == "abc"

    def test_diagnostic_entry_validation(self):
        """Test that message and component are required."""
        with pytest.raises(ValueError, match="message"):
            DiagnosticEntry(DiagnosticSeverity.INFO, "", "parser")
        with pytest.raises(ValueError, match="component"):
            DiagnosticEntry(DiagnosticSeverity.INFO, "message", "")

    def test_format_with_source_and_position(self):
        """Test the compiler-style single line rendering."""
        entry = DiagnosticEntry(
            DiagnosticSeverity.ERROR, "bad thing", "parser", {"line": 2, "column": 5}
        )
        assert entry.format("doc.xml") == "doc.xml:2:5: ERROR: bad thing"
        assert entry.format() == "2:5: ERROR: bad thing"

    def test_format_without_position(self):
        """Test rendering when no position is known."""
        entry = DiagnosticEntry(DiagnosticSeverity.WARNING, "left open", "tree_builder")
        assert entry.line is None
        assert entry.format() == "WARNING: left open"
        assert entry.format("doc.xml") == "doc.xml: WARNING: left open"


class TestBuildMetrics:
    """Test BuildMetrics functionality."""

    def test_default_metrics(self):
        """Test that all counters start at zero."""
        metrics = BuildMetrics()
        assert metrics.events_processed == 0
        assert metrics.max_depth == 0
        assert metrics.events_per_second == 0.0

    def test_record_depth_keeps_maximum(self):
        """Test that only deeper levels are recorded."""
        metrics = BuildMetrics()
        metrics.record_depth(3)
        metrics.record_depth(1)
        assert metrics.max_depth == 3

    def test_events_per_second(self):
        """Test throughput calculation."""
        metrics = BuildMetrics(processing_time_ms=500.0, events_processed=100)
        assert metrics.events_per_second == 200.0

    def test_to_dict(self):
        """Test dictionary conversion."""
        data = BuildMetrics(elements_created=4).to_dict()
        assert data["elements_created"] == 4
        assert set(data) == {
            "processing_time_ms",
            "events_processed",
            "elements_created",
            "attributes_set",
            "namespaces_declared",
            "processing_instructions",
            "max_depth",
        }


class TestExceptions:
    """Test the terminal failure exceptions."""

    def test_hierarchy(self):
        """Test that all failures share the BeautifierError base."""
        assert issubclass(ParserFatalError, BeautifierError)
        assert issubclass(StructuralInconsistencyError, BeautifierError)
        assert issubclass(InputSourceError, BeautifierError)

    def test_parser_fatal_error_message(self):
        """Test that the position is part of the message."""
        error = ParserFatalError("mismatched tag", line=1, column=9)
        assert str(error) == "mismatched tag (line 1, column 9)"
        assert error.message == "mismatched tag"
        assert str(ParserFatalError("no element found", line=4)) == "no element found (line 4)"
        assert str(ParserFatalError("boom")) == "boom"

    def test_structural_inconsistency_depth(self):
        """Test that the stack depth is kept on the exception."""
        error = StructuralInconsistencyError("unexpected end", depth=2)
        assert error.depth == 2
        assert str(error) == "unexpected end"

    def test_input_source_error_path(self):
        """Test that the path is normalized to a Path."""
        error = InputSourceError("cannot read", "missing.xml")
        assert error.path == Path("missing.xml")
        assert InputSourceError("cannot read").path is None
