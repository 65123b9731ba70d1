"""Shared utilities for the XML beautifier.

This module provides the configuration objects, result and diagnostic types,
exceptions and logging helpers used across all layers.
"""

from .config import (
    BeautifierConfig,
    BuilderConfig,
    ConfigError,
    ConfigValidationError,
    GlobalConfig,
    OutputConfig,
    ParserConfig,
)
from .exceptions import (
    BeautifierError,
    InputSourceError,
    ParserFatalError,
    StructuralInconsistencyError,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
    new_correlation_id,
)
from .result import (
    BuildMetrics,
    DiagnosticEntry,
    DiagnosticSeverity,
)

__all__ = [
    "BeautifierConfig",
    "BuilderConfig",
    "ConfigError",
    "ConfigValidationError",
    "GlobalConfig",
    "OutputConfig",
    "ParserConfig",
    "BeautifierError",
    "InputSourceError",
    "ParserFatalError",
    "StructuralInconsistencyError",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "new_correlation_id",
    "BuildMetrics",
    "DiagnosticEntry",
    "DiagnosticSeverity",
]
