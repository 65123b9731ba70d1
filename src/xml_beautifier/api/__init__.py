"""Public entry points: build or beautify XML from strings, bytes and files."""

from .parser import (
    XMLBeautifier,
    beautify,
    beautify_file,
    beautify_string,
    build_document,
    build_document_file,
    build_document_string,
)
from .sax import SAXEventAdapter, create_parser, run_sax_parser

__all__ = [
    "XMLBeautifier",
    "beautify",
    "beautify_file",
    "beautify_string",
    "build_document",
    "build_document_file",
    "build_document_string",
    "SAXEventAdapter",
    "create_parser",
    "run_sax_parser",
]
