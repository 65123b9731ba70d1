"""Parse events consumed by the tree builder.

The streaming parser's callbacks are translated into ``ParseEvent`` values so
that the builder has a single entry point and its transitions can be driven
directly from tests.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Optional, Tuple


class EventType(Enum):
    """Kinds of events delivered to the tree builder."""

    START_ELEMENT = auto()
    END_ELEMENT = auto()
    ATTRIBUTE = auto()
    TEXT = auto()
    PROCESSING_INSTRUCTION = auto()
    WARNING = auto()
    ERROR = auto()
    FATAL_ERROR = auto()
    END_DOCUMENT = auto()


DIAGNOSTIC_EVENTS = frozenset({EventType.WARNING, EventType.ERROR, EventType.FATAL_ERROR})


@dataclass(frozen=True)
class ParseEvent:
    """One parse event.

    Which fields are meaningful depends on ``type``:

    - START_ELEMENT: ``name`` and ``attributes`` (ordered name/value pairs)
    - END_ELEMENT: ``name``
    - ATTRIBUTE: ``name`` and ``value``
    - TEXT: ``value``
    - PROCESSING_INSTRUCTION: ``name`` is the target, ``value`` the data
    - WARNING / ERROR / FATAL_ERROR: ``value`` is the message, plus optional
      ``line`` and ``column``
    """

    type: EventType
    name: str = ""
    value: str = ""
    attributes: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)
    line: Optional[int] = None
    column: Optional[int] = None

    @property
    def position(self) -> Optional[Dict[str, int]]:
        if self.line is None:
            return None
        position = {"line": self.line}
        if self.column is not None:
            position["column"] = self.column
        return position

    @property
    def is_diagnostic(self) -> bool:
        return self.type in DIAGNOSTIC_EVENTS


def start_element(name: str, attributes=(), line=None, column=None) -> ParseEvent:
    if hasattr(attributes, "items"):
        attributes = attributes.items()
    return ParseEvent(
        EventType.START_ELEMENT, name=name, attributes=tuple(attributes),
        line=line, column=column
    )


def end_element(name: str = "", line=None, column=None) -> ParseEvent:
    return ParseEvent(EventType.END_ELEMENT, name=name, line=line, column=column)


def attribute(name: str, value: str) -> ParseEvent:
    return ParseEvent(EventType.ATTRIBUTE, name=name, value=value)


def text(content: str) -> ParseEvent:
    return ParseEvent(EventType.TEXT, value=content)


def processing_instruction(target: str, data: str = "") -> ParseEvent:
    return ParseEvent(EventType.PROCESSING_INSTRUCTION, name=target, value=data)


def warning(message: str, line=None, column=None) -> ParseEvent:
    return ParseEvent(EventType.WARNING, value=message, line=line, column=column)


def error(message: str, line=None, column=None) -> ParseEvent:
    return ParseEvent(EventType.ERROR, value=message, line=line, column=column)


def fatal_error(message: str, line=None, column=None) -> ParseEvent:
    return ParseEvent(EventType.FATAL_ERROR, value=message, line=line, column=column)


def end_document() -> ParseEvent:
    return ParseEvent(EventType.END_DOCUMENT)
