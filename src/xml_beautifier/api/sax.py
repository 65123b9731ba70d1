"""Bridge from the streaming SAX parser to the tree builder.

Namespace processing is left off so that qualified names and raw ``xmlns``
attributes reach the builder unchanged. The expat reader is the hardened one
from ``defusedxml``, which refuses entity expansion and external references
unless the configuration allows them.
"""

import io
from typing import Optional, Tuple
from xml.sax import SAXException, SAXParseException
from xml.sax.handler import ContentHandler, ErrorHandler, feature_namespaces
from xml.sax.xmlreader import InputSource

from defusedxml.common import DefusedXmlException, EntitiesForbidden
from defusedxml.expatreader import DefusedExpatParser

from xml_beautifier.shared import ParserConfig, ParserFatalError, get_logger
from xml_beautifier.tree import events
from xml_beautifier.tree.builder import XMLTreeBuilder


class SAXEventAdapter(ContentHandler, ErrorHandler):
    """Translates SAX callbacks into ``ParseEvent`` values for a builder."""

    def __init__(self, builder: XMLTreeBuilder) -> None:
        ContentHandler.__init__(self)
        self.builder = builder

    def current_position(self) -> Tuple[Optional[int], Optional[int]]:
        if self._locator is None:
            return None, None
        return self._locator.getLineNumber(), self._locator.getColumnNumber()

    # ContentHandler

    def startElement(self, name, attrs):
        line, column = self.current_position()
        self.builder.handle(events.start_element(name, attrs.items(), line, column))

    def endElement(self, name):
        line, column = self.current_position()
        self.builder.handle(events.end_element(name, line, column))

    def characters(self, content):
        self.builder.handle(events.text(content))

    def processingInstruction(self, target, data):
        self.builder.handle(events.processing_instruction(target, data))

    def endDocument(self):
        self.builder.handle(events.end_document())

    # ErrorHandler

    def warning(self, exception):
        self.builder.handle(events.warning(
            exception.getMessage(), exception.getLineNumber(), exception.getColumnNumber()
        ))

    def error(self, exception):
        self.builder.handle(events.error(
            exception.getMessage(), exception.getLineNumber(), exception.getColumnNumber()
        ))

    def fatalError(self, exception):
        self.builder.handle(events.fatal_error(
            exception.getMessage(), exception.getLineNumber(), exception.getColumnNumber()
        ))
        raise exception


def create_parser(config: Optional[ParserConfig] = None) -> DefusedExpatParser:
    """Create a non-namespace-aware, hardened expat SAX reader."""
    config = config or ParserConfig()
    parser = DefusedExpatParser(
        forbid_dtd=config.forbid_dtd,
        forbid_entities=config.forbid_entities,
        forbid_external=config.forbid_external,
    )
    parser.setFeature(feature_namespaces, False)
    return parser


def run_sax_parser(
    data: bytes,
    builder: XMLTreeBuilder,
    config: Optional[ParserConfig] = None
) -> None:
    """Parse ``data`` and deliver every event to ``builder``.

    Raises:
        ParserFatalError: The parser could not continue; the builder has been
            told about the failure and yields NO_RESULT.
    """
    config = config or ParserConfig()
    logger = get_logger(__name__, builder.correlation_id, "sax_parser")

    parser = create_parser(config)
    adapter = SAXEventAdapter(builder)
    parser.setContentHandler(adapter)
    parser.setErrorHandler(adapter)

    source = InputSource()
    source.setByteStream(io.BytesIO(data))
    source.setEncoding(config.encoding)

    logger.debug("Starting SAX parse", extra={"input_bytes": len(data)})
    try:
        parser.parse(source)
    except SAXParseException as e:
        raise ParserFatalError(
            e.getMessage(), e.getLineNumber(), e.getColumnNumber()
        ) from e
    except DefusedXmlException as e:
        message = f"Forbidden XML construct: {e}"
        if isinstance(e, EntitiesForbidden):
            message += "; set parser.forbid_entities to false to allow entity declarations"
        line, column = adapter.current_position()
        if not builder.finished:
            builder.handle(events.fatal_error(message, line, column))
        raise ParserFatalError(message, line, column) from e
    except SAXException as e:
        message = e.getMessage() or str(e)
        if not builder.finished:
            builder.handle(events.fatal_error(message))
        raise ParserFatalError(message) from e
