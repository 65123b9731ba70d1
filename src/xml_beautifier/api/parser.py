"""Core beautifier API with progressive disclosure.

Level 1 functions build or beautify a single input; ``XMLBeautifier`` keeps a
configuration and usage statistics across many inputs. The ``build_document*``
functions never raise for parser failures and report them on the result
instead; the ``beautify*`` functions raise, because their output is text.
"""

import time
from pathlib import Path
from typing import Any, Dict, Optional, Union

from xml_beautifier.api.sax import run_sax_parser
from xml_beautifier.shared import (
    BeautifierConfig,
    DiagnosticSeverity,
    InputSourceError,
    ParserFatalError,
    get_logger,
    new_correlation_id,
)
from xml_beautifier.tree import events
from xml_beautifier.tree.builder import BuildResult, XMLTreeBuilder
from xml_beautifier.tree.formatter import OutputFormatter

# Type definitions for input data
ContentType = Union[str, bytes]
InputType = Union[str, bytes, Path]

PREVIEW_LENGTH = 100  # Max length for content preview in logs
MS_PER_SECOND = 1000


def _correlation_id(config: BeautifierConfig, correlation_id: Optional[str]) -> Optional[str]:
    if correlation_id is None and config.global_.enable_correlation_tracking:
        return new_correlation_id()
    return correlation_id


def _new_builder(config: BeautifierConfig, correlation_id: Optional[str]) -> XMLTreeBuilder:
    return XMLTreeBuilder(config=config.builder, correlation_id=correlation_id)


def _build(
    content: ContentType,
    config: BeautifierConfig,
    builder: XMLTreeBuilder
) -> XMLTreeBuilder:
    """Run one input through ``builder``; parser failures propagate."""
    logger = get_logger(__name__, builder.correlation_id, "build")
    data = content.encode(config.parser.encoding) if isinstance(content, str) else content

    if not data.strip():
        builder.reporter.report(
            DiagnosticSeverity.INFO,
            "Empty input; no document produced",
            "api_parser",
            details={"input_bytes": len(data)}
        )
        builder.handle(events.end_document())
        return builder

    logger.info(
        "Starting build",
        extra={
            "input_bytes": len(data),
            "preview": data[:PREVIEW_LENGTH].decode(config.parser.encoding, "replace"),
        }
    )
    run_sax_parser(data, builder, config.parser)
    return builder


def _read_file(path: Path, correlation_id: Optional[str]) -> bytes:
    logger = get_logger(__name__, correlation_id, "read_file")
    try:
        with path.open("rb") as stream:
            data = stream.read()
    except OSError as e:
        logger.error("Could not read input file", extra={"file_path": str(path)})
        raise InputSourceError(f"Could not read {path}: {e.strerror or e}", path) from e

    logger.debug("Input file read", extra={"file_path": str(path), "input_bytes": len(data)})
    return data


def build_document_string(
    content: ContentType,
    config: Optional[BeautifierConfig] = None,
    correlation_id: Optional[str] = None
) -> BuildResult:
    """Rebuild the document tree of an XML string or byte string.

    Args:
        content: XML content; ``str`` is encoded with the configured encoding
        config: Optional configuration (defaults to ``BeautifierConfig()``)
        correlation_id: Optional correlation ID for build tracking

    Returns:
        BuildResult whose ``document`` is NO_RESULT for empty input or when
        the parser failed; parser failures appear as CRITICAL diagnostics

    Examples:
        >>> result = build_document_string('<a x="1"><b/><c/></a>')
        >>> [child.tag for child in result.document.root.children]
        ['b', 'c']
    """
    config = config or BeautifierConfig()
    correlation_id = _correlation_id(config, correlation_id)
    logger = get_logger(__name__, correlation_id, "build_document")

    builder = _new_builder(config, correlation_id)
    try:
        _build(content, config, builder)
    except ParserFatalError as e:
        logger.warning("Parser failed; no document produced", extra={"error": str(e)})
    return builder.result()


def build_document_file(
    file_path: Union[str, Path],
    config: Optional[BeautifierConfig] = None,
    correlation_id: Optional[str] = None
) -> BuildResult:
    """Rebuild the document tree of an XML file.

    Raises:
        InputSourceError: The file could not be opened or read
    """
    config = config or BeautifierConfig()
    correlation_id = _correlation_id(config, correlation_id)
    data = _read_file(Path(file_path), correlation_id)
    return build_document_string(data, config, correlation_id)


def build_document(
    input_data: InputType,
    config: Optional[BeautifierConfig] = None,
    correlation_id: Optional[str] = None
) -> BuildResult:
    """Rebuild a document from a string, bytes or a ``Path``.

    Strings are treated as XML content, never as file names; pass a ``Path``
    to read a file.
    """
    if isinstance(input_data, Path):
        return build_document_file(input_data, config, correlation_id)
    if isinstance(input_data, (str, bytes)):
        return build_document_string(input_data, config, correlation_id)
    raise TypeError(f"Unsupported input type: {type(input_data).__name__}")


def beautify_string(
    content: ContentType,
    config: Optional[BeautifierConfig] = None,
    correlation_id: Optional[str] = None
) -> str:
    """Return the pretty-printed form of an XML string.

    Returns the configured no-output text (``<No Output>``) when the input
    contains no element.

    Raises:
        ParserFatalError: The input is not well-formed
        StructuralInconsistencyError: Strict mode found an inconsistent event
    """
    config = config or BeautifierConfig()
    correlation_id = _correlation_id(config, correlation_id)
    builder = _build(content, config, _new_builder(config, correlation_id))
    formatter = OutputFormatter(config.output, correlation_id)
    return formatter.format(builder.output)


def beautify_file(
    file_path: Union[str, Path],
    config: Optional[BeautifierConfig] = None,
    correlation_id: Optional[str] = None
) -> str:
    """Return the pretty-printed form of an XML file.

    Raises:
        InputSourceError: The file could not be opened or read
        ParserFatalError: The file is not well-formed
    """
    config = config or BeautifierConfig()
    correlation_id = _correlation_id(config, correlation_id)
    data = _read_file(Path(file_path), correlation_id)
    return beautify_string(data, config, correlation_id)


def beautify(
    input_data: InputType,
    config: Optional[BeautifierConfig] = None,
    correlation_id: Optional[str] = None
) -> str:
    """Beautify a string, bytes or a ``Path``."""
    if isinstance(input_data, Path):
        return beautify_file(input_data, config, correlation_id)
    if isinstance(input_data, (str, bytes)):
        return beautify_string(input_data, config, correlation_id)
    raise TypeError(f"Unsupported input type: {type(input_data).__name__}")


class XMLBeautifier:
    """Configured, reusable beautifier.

    Each call builds a fresh document; the instance only keeps the
    configuration and usage statistics.

    Examples:
        >>> beautifier = XMLBeautifier(BeautifierConfig.strict())
        >>> print(beautifier.process('<a><b/></a>'))
        <?xml version="1.0" encoding="UTF-8"?>
        <a>
          <b/>
        </a>
    """

    def __init__(
        self,
        config: Optional[BeautifierConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or BeautifierConfig()
        self.correlation_id = correlation_id
        self.formatter = OutputFormatter(self.config.output, correlation_id)
        self.logger = get_logger(__name__, correlation_id, "xml_beautifier")

        self._run_count = 0
        self._successful_runs = 0
        self._total_processing_time = 0.0
        self.last_result: Optional[BuildResult] = None

    def build(self, input_data: InputType) -> BuildResult:
        """Rebuild a document without formatting it; never raises for parser errors."""
        start_time = time.perf_counter()
        result = build_document(input_data, self.config, self.correlation_id)
        self._record(result.success, start_time)
        self.last_result = result
        return result

    def process(self, input_data: InputType) -> str:
        """Rebuild and pretty-print one input.

        Raises:
            InputSourceError: A ``Path`` input could not be read
            ParserFatalError: The input is not well-formed
        """
        start_time = time.perf_counter()
        correlation_id = _correlation_id(self.config, self.correlation_id)
        builder = _new_builder(self.config, correlation_id)
        try:
            if isinstance(input_data, Path):
                content = _read_file(input_data, correlation_id)
            elif isinstance(input_data, (str, bytes)):
                content = input_data
            else:
                raise TypeError(f"Unsupported input type: {type(input_data).__name__}")
            _build(content, self.config, builder)
        except Exception:
            self.last_result = builder.result()
            self._record(False, start_time)
            raise

        self.last_result = builder.result()
        self._record(True, start_time)
        return self.formatter.format(builder.output)

    def process_file(self, file_path: Union[str, Path]) -> str:
        return self.process(Path(file_path))

    def _record(self, success: bool, start_time: float) -> None:
        processing_time = (time.perf_counter() - start_time) * MS_PER_SECOND
        self._run_count += 1
        self._total_processing_time += processing_time
        if success:
            self._successful_runs += 1
        self.logger.debug(
            "Run recorded",
            extra={"success": success, "processing_time_ms": processing_time}
        )

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get beautifier usage statistics."""
        return {
            "total_runs": self._run_count,
            "successful_runs": self._successful_runs,
            "success_rate": (
                self._successful_runs / self._run_count
                if self._run_count > 0 else 0.0
            ),
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._run_count
                if self._run_count > 0 else 0.0
            ),
        }

    def reset_statistics(self) -> None:
        self._run_count = 0
        self._successful_runs = 0
        self._total_processing_time = 0.0
