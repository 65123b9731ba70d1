"""XML Beautifier.

Rebuilds an XML document from the events of a streaming parser and prints it
back with consistent indentation. Namespace declarations are kept apart from
ordinary attributes and processing instructions keep their document order.

Progressive API Disclosure:
- Level 1: Simple functions - beautify(), beautify_string(), beautify_file()
- Level 2: Tree access - build_document() and friends return a BuildResult
- Level 3: Configured beautifier - XMLBeautifier class
- Level 4: Event level - XMLTreeBuilder fed with ParseEvent values
"""

__version__ = "0.1.0"
__author__ = "XML Beautifier Team"

from .api import (
    XMLBeautifier,
    beautify,
    beautify_file,
    beautify_string,
    build_document,
    build_document_file,
    build_document_string,
)
from .shared.config import BeautifierConfig
from .shared.exceptions import (
    BeautifierError,
    InputSourceError,
    ParserFatalError,
    StructuralInconsistencyError,
)
from .tree.builder import (
    NO_RESULT,
    BuildResult,
    ProcessingInstruction,
    XMLDocument,
    XMLElement,
    XMLTreeBuilder,
)
from .tree.namespaces import Namespace

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "beautify",
    "beautify_string",
    "beautify_file",

    # Level 2: Tree access
    "build_document",
    "build_document_string",
    "build_document_file",

    # Level 3: Configured beautifier
    "XMLBeautifier",
    "BeautifierConfig",

    # Level 4: Event level
    "XMLTreeBuilder",

    # Result objects and data structures
    "NO_RESULT",
    "BuildResult",
    "Namespace",
    "ProcessingInstruction",
    "XMLDocument",
    "XMLElement",

    # Exceptions
    "BeautifierError",
    "InputSourceError",
    "ParserFatalError",
    "StructuralInconsistencyError",
]
