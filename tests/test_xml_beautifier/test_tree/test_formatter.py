"""Tests for pretty-printing rebuilt documents."""

import pytest
from lxml import etree

from xml_beautifier.api import build_document_string
from xml_beautifier.shared import OutputConfig
from xml_beautifier.tree.builder import (
    NO_RESULT,
    ProcessingInstruction,
    XMLDocument,
    XMLElement,
)
from xml_beautifier.tree.formatter import (
    OutputFormatter,
    escape_attribute,
    escape_text,
)
from xml_beautifier.tree.namespaces import Namespace


@pytest.fixture
def sample_document() -> XMLDocument:
    """Create a small document with a namespace, attributes and text."""
    root = XMLElement(tag="p:root", namespace=Namespace("urn:p", "p"))
    root.set_attribute("p:id", "7")
    root.add_child(XMLElement(tag="empty"))
    root.add_child(XMLElement(tag="title", text="Tom & Jerry"))
    return XMLDocument(
        root=root,
        processing_instructions=[ProcessingInstruction("xml-stylesheet", 'href="s.xsl"')],
    )


class TestEscaping:
    """Test character escaping helpers."""

    def test_escape_text(self):
        """Test markup characters in text."""
        assert escape_text("a < b & c > d") == "a &lt; b &amp; c &gt; d"

    def test_escape_attribute(self):
        """Test quotes and whitespace characters in attribute values."""
        assert escape_attribute('say "hi"\n') == "say &quot;hi&quot;&#10;"
        assert escape_attribute("a\tb\rc") == "a&#9;b&#13;c"


class TestOutputFormatter:
    """Test OutputFormatter functionality."""

    def test_format_document(self, sample_document):
        """Test the complete layout of a document."""
        output = OutputFormatter().format(sample_document)
        assert output == "\n".join([
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<?xml-stylesheet href="s.xsl"?>',
            '<p:root xmlns:p="urn:p" p:id="7">',
            "  <empty/>",
            "  <title>Tom &amp; Jerry</title>",
            "</p:root>",
        ])

    def test_format_without_declaration(self):
        """Test switching the XML declaration off."""
        formatter = OutputFormatter(OutputConfig(xml_declaration=False))
        assert formatter.format(XMLDocument(root=XMLElement("a"))) == "<a/>"

    def test_custom_indent(self):
        """Test a wider indentation unit."""
        root = XMLElement("a", children=[XMLElement("b", children=[XMLElement("c")])])
        formatter = OutputFormatter(OutputConfig(indent="    ", xml_declaration=False))
        assert formatter.format(XMLDocument(root=root)) == (
            "<a>\n    <b>\n        <c/>\n    </b>\n</a>"
        )

    def test_instruction_without_data(self):
        """Test that an instruction without data has no trailing space."""
        document = XMLDocument(
            root=XMLElement("a"),
            processing_instructions=[ProcessingInstruction("marker")],
        )
        output = OutputFormatter(OutputConfig(xml_declaration=False)).format(document)
        assert output.splitlines()[0] == "<?marker?>"

    def test_default_namespace_first(self):
        """Test that the namespace declaration precedes the attributes."""
        root = XMLElement("a", attributes={"x": "1"}, namespace=Namespace("urn:d"))
        output = OutputFormatter(OutputConfig(xml_declaration=False)).format(
            XMLDocument(root=root)
        )
        assert output == '<a xmlns="urn:d" x="1"/>'

    def test_mixed_content(self):
        """Test that text and tails are printed where they occur."""
        root = XMLElement("a", text="intro", children=[
            XMLElement("b", tail="middle"),
            XMLElement("c", text="inner", tail="end"),
        ])
        output = OutputFormatter(OutputConfig(xml_declaration=False)).format(
            XMLDocument(root=root)
        )
        assert output == "\n".join([
            "<a>",
            "  intro",
            "  <b/>",
            "  middle",
            "  <c>inner</c>",
            "  end",
            "</a>",
        ])

    def test_tail_without_leading_text(self):
        """Test an element whose only text follows a child."""
        root = XMLElement("a", children=[XMLElement("b", tail="after & more")])
        output = OutputFormatter(OutputConfig(xml_declaration=False)).format(
            XMLDocument(root=root)
        )
        assert output == "<a>\n  <b/>\n  after &amp; more\n</a>"

    def test_no_result(self):
        """Test rendering NO_RESULT."""
        formatter = OutputFormatter()
        assert formatter.format(NO_RESULT) == "<No Output>"

        result = formatter.format_with_result(NO_RESULT)
        assert result.has_document is False

        custom = OutputFormatter(OutputConfig(no_output_text=""))
        assert custom.format(NO_RESULT) == ""

    def test_format_with_result(self, sample_document):
        """Test the result wrapper."""
        result = OutputFormatter().format_with_result(sample_document)
        assert result.has_document is True
        assert result.output_size_bytes == len(result.formatted_output.encode("utf-8"))
        assert result.processing_time_ms >= 0


class TestFormattingRoundTrip:
    """Test that formatted output is well-formed and stable."""

    SOURCES = [
        '<a x="1"><b/><c/></a>',
        '<?xml-stylesheet href="s.xsl"?><p:root xmlns:p="urn:p" p:id="7"/>',
        '<r xmlns="urn:d"><t q="&quot;x&quot; &amp; y">1 &lt; 2</t><e/></r>',
        "<r>lead<c>inner</c>tail</r>",
        "<a><b><c><d>deep</d></c></b></a><?after done?>",
        "<p>Hello <b>big</b> world</p>",
        "<a><b>&#160;</b><c>&#x2003;x</c></a>",
    ]

    @pytest.mark.parametrize("source", SOURCES)
    def test_output_is_well_formed(self, source):
        """Test that lxml accepts every formatted document."""
        output = OutputFormatter().format(build_document_string(source).document)
        etree.fromstring(output.encode("utf-8"))

    @pytest.mark.parametrize("source", SOURCES)
    def test_formatting_is_idempotent(self, source):
        """Test that formatting the formatted output changes nothing."""
        formatter = OutputFormatter()
        once = formatter.format(build_document_string(source).document)
        twice = formatter.format(build_document_string(once).document)
        assert once == twice
