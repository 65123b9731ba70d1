"""Diagnostic reporting for parser notifications and builder inconsistencies."""

import logging
from typing import Any, Dict, List, Optional

from xml_beautifier.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    get_logger,
)

_LOG_LEVELS = {
    DiagnosticSeverity.DEBUG: logging.DEBUG,
    DiagnosticSeverity.INFO: logging.INFO,
    DiagnosticSeverity.WARNING: logging.WARNING,
    DiagnosticSeverity.ERROR: logging.ERROR,
    DiagnosticSeverity.CRITICAL: logging.CRITICAL,
}


class DiagnosticReporter:
    """Collects diagnostics for one build and mirrors them to the log.

    Reporting never interrupts event delivery; whether parsing continues after
    a fatal notification is left to the parser itself.
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "diagnostic_reporter")
        self.entries: List[DiagnosticEntry] = []

    def report(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        position: Optional[Dict[str, int]] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> DiagnosticEntry:
        entry = DiagnosticEntry(
            severity=severity,
            message=message,
            component=component,
            position=position,
            details=details,
            correlation_id=self.correlation_id
        )
        self.entries.append(entry)

        extra: Dict[str, Any] = {"source_component": component}
        if position:
            extra.update(position)
        location = ":".join(
            str(part) for part in (entry.line, entry.column) if part is not None
        )
        self.logger.log(
            _LOG_LEVELS[severity],
            f"{location}: {message}" if location else message,
            extra=extra
        )
        return entry

    def warning(self, message: str, position: Optional[Dict[str, int]] = None) -> DiagnosticEntry:
        return self.report(DiagnosticSeverity.WARNING, message, "parser", position)

    def error(self, message: str, position: Optional[Dict[str, int]] = None) -> DiagnosticEntry:
        return self.report(DiagnosticSeverity.ERROR, message, "parser", position)

    def fatal(self, message: str, position: Optional[Dict[str, int]] = None) -> DiagnosticEntry:
        return self.report(DiagnosticSeverity.CRITICAL, message, "parser", position)

    def inconsistency(
        self,
        message: str,
        severity: DiagnosticSeverity = DiagnosticSeverity.WARNING,
        details: Optional[Dict[str, Any]] = None
    ) -> DiagnosticEntry:
        """Record a structural inconsistency tolerated by the builder."""
        return self.report(severity, message, "tree_builder", details=details)

    def by_severity(self, severity: DiagnosticSeverity) -> List[DiagnosticEntry]:
        return [entry for entry in self.entries if entry.severity == severity]
