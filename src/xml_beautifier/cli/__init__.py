"""Command-line interface for the XML beautifier."""

from .main import create_argument_parser, main

__all__ = ["create_argument_parser", "main"]
