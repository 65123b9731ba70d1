"""Exception hierarchy for terminal failures of a beautifier run.

Recoverable parser problems never raise; they are recorded as diagnostics on
the build result. The exceptions below abort the whole operation.
"""

from pathlib import Path
from typing import Optional, Union


class BeautifierError(Exception):
    """Base exception for all terminal beautifier failures."""


class ParserFatalError(BeautifierError):
    """The streaming parser could not continue tokenizing the input."""

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None
    ) -> None:
        self.message = message
        self.line = line
        self.column = column
        super().__init__(self._describe())

    def _describe(self) -> str:
        if self.line is None:
            return self.message
        if self.column is None:
            return f"{self.message} (line {self.line})"
        return f"{self.message} (line {self.line}, column {self.column})"


class StructuralInconsistencyError(BeautifierError):
    """An event does not fit the open-element stack (strict mode only)."""

    def __init__(self, message: str, depth: int = 0) -> None:
        super().__init__(message)
        self.depth = depth


class InputSourceError(BeautifierError):
    """The input source could not be opened or read."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None
