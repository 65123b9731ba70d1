"""Result objects and diagnostic types for the XML beautifier.

This module defines the diagnostic entries recorded while a document is being
rebuilt and the metrics gathered for each build.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()      # Debug-level information
    INFO = auto()       # Informational messages
    WARNING = auto()    # Parser warnings and tolerated inconsistencies
    ERROR = auto()      # Recoverable parser errors
    CRITICAL = auto()   # Fatal parser errors, the build is abandoned


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    position: Optional[Dict[str, int]] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")

    @property
    def line(self) -> Optional[int]:
        return self.position.get("line") if self.position else None

    @property
    def column(self) -> Optional[int]:
        return self.position.get("column") if self.position else None

    def format(self, source: Optional[str] = None) -> str:
        """Render the entry as a single ``source:line:column: SEVERITY: message`` line."""
        location = [source] if source else []
        if self.line is not None:
            location.append(str(self.line))
            if self.column is not None:
                location.append(str(self.column))

        prefix = ":".join(location)
        text = f"{self.severity.name}: {self.message}"
        return f"{prefix}: {text}" if prefix else text


@dataclass
class BuildMetrics:
    """Counters gathered while a document is rebuilt from parse events."""

    processing_time_ms: float = 0.0
    events_processed: int = 0
    elements_created: int = 0
    attributes_set: int = 0
    namespaces_declared: int = 0
    processing_instructions: int = 0
    max_depth: int = 0

    @property
    def events_per_second(self) -> float:
        """Calculate events processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.events_processed * 1000.0) / self.processing_time_ms

    def record_depth(self, depth: int) -> None:
        if depth > self.max_depth:
            self.max_depth = depth

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processing_time_ms": self.processing_time_ms,
            "events_processed": self.events_processed,
            "elements_created": self.elements_created,
            "attributes_set": self.attributes_set,
            "namespaces_declared": self.namespaces_declared,
            "processing_instructions": self.processing_instructions,
            "max_depth": self.max_depth,
        }
