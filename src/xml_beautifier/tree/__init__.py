"""Tree rebuilding engine for the XML beautifier.

This module turns a stream of parse events into an in-memory document and
renders that document as indented text.

Key Components:
    XMLTreeBuilder: State machine consuming ParseEvent values
    XMLDocument: Root element plus document-level processing instructions
    XMLElement: Element with ordered attributes, namespace binding and children
    BuildResult: Document (or NO_RESULT) with diagnostics and metrics
    OutputFormatter: Pretty-printer for finished documents
"""

from .builder import (
    NO_RESULT,
    BuildResult,
    BuildState,
    FrameStack,
    NoResult,
    ProcessingInstruction,
    ProcessingInstructionCollector,
    XMLDocument,
    XMLElement,
    XMLTreeBuilder,
)
from .diagnostics import DiagnosticReporter
from .events import EventType, ParseEvent
from .formatter import FormatResult, OutputFormatter
from .namespaces import Namespace, is_namespace_declaration, resolve_namespace

__all__ = [
    "NO_RESULT",
    "BuildResult",
    "BuildState",
    "FrameStack",
    "NoResult",
    "ProcessingInstruction",
    "ProcessingInstructionCollector",
    "XMLDocument",
    "XMLElement",
    "XMLTreeBuilder",
    "DiagnosticReporter",
    "EventType",
    "ParseEvent",
    "FormatResult",
    "OutputFormatter",
    "Namespace",
    "is_namespace_declaration",
    "resolve_namespace",
]
