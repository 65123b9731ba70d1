"""Pretty-printing of rebuilt documents.

The formatter renders the declaration, the processing instructions and the
element tree with one element per line. Its output parses back to the same
tree, so formatting is a fixed point after one pass.
"""

import time
from dataclasses import dataclass
from typing import List, Optional, Union
from xml.sax.saxutils import escape

from xml_beautifier.shared import OutputConfig, get_logger
from xml_beautifier.tree.builder import (
    NoResult,
    ProcessingInstruction,
    XMLDocument,
    XMLElement,
)

_ATTRIBUTE_ENTITIES = {
    '"': "&quot;",
    "\n": "&#10;",
    "\r": "&#13;",
    "\t": "&#9;",
}


@dataclass
class FormatResult:
    """Result of a formatting operation."""

    formatted_output: str = ""
    has_document: bool = True
    processing_time_ms: float = 0.0

    @property
    def output_size_bytes(self) -> int:
        return len(self.formatted_output.encode("utf-8"))


def escape_text(text: str) -> str:
    return escape(text)


def escape_attribute(value: str) -> str:
    return escape(value, _ATTRIBUTE_ENTITIES)


class OutputFormatter:
    """Renders an ``XMLDocument`` as indented XML text."""

    def __init__(
        self,
        config: Optional[OutputConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or OutputConfig()
        self.logger = get_logger(__name__, correlation_id, "output_formatter")

    def format(self, document: Union[XMLDocument, NoResult]) -> str:
        return self.format_with_result(document).formatted_output

    def format_with_result(self, document: Union[XMLDocument, NoResult]) -> FormatResult:
        """Format a document; NO_RESULT renders as the configured no-output text."""
        start_time = time.perf_counter()
        if not isinstance(document, XMLDocument):
            return FormatResult(
                formatted_output=self.config.no_output_text,
                has_document=False,
            )

        lines: List[str] = []
        if self.config.xml_declaration:
            lines.append(
                f'<?xml version="1.0" encoding="{self.config.xml_encoding}"?>'
            )
        lines.extend(
            self._format_instruction(pi) for pi in document.processing_instructions
        )
        self._format_element(document.root, 0, lines)

        result = FormatResult(
            formatted_output="\n".join(lines),
            processing_time_ms=(time.perf_counter() - start_time) * 1000,
        )
        self.logger.debug(
            "Document formatted",
            extra={"output_size_bytes": result.output_size_bytes, "lines": len(lines)}
        )
        return result

    @staticmethod
    def _format_instruction(instruction: ProcessingInstruction) -> str:
        if instruction.data:
            return f"<?{instruction.target} {instruction.data}?>"
        return f"<?{instruction.target}?>"

    def _format_start_tag(self, element: XMLElement) -> str:
        tag_parts = [element.tag]
        if element.namespace is not None:
            tag_parts.append(
                f'{element.namespace.attribute_name}="{escape_attribute(element.namespace.uri)}"'
            )
        for name, value in element.attributes.items():
            tag_parts.append(f'{name}="{escape_attribute(value)}"')
        return " ".join(tag_parts)

    def _format_element(self, element: XMLElement, level: int, lines: List[str]) -> None:
        indent = self.config.indent * level
        start_tag = self._format_start_tag(element)

        if not element.children:
            if element.text:
                lines.append(
                    f"{indent}<{start_tag}>{escape_text(element.text)}</{element.tag}>"
                )
            else:
                lines.append(f"{indent}<{start_tag}/>")
            return

        # Mixed content: text and tails each get a line in document order
        inner_indent = indent + self.config.indent
        lines.append(f"{indent}<{start_tag}>")
        if element.text:
            lines.append(f"{inner_indent}{escape_text(element.text)}")
        for child in element.children:
            self._format_element(child, level + 1, lines)
            if child.tail:
                lines.append(f"{inner_indent}{escape_text(child.tail)}")
        lines.append(f"{indent}</{element.tag}>")
