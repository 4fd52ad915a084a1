"""Bounded XML Parser.

A small DOM-style parser for constrained XML snippets. A single pass of a
table-driven automaton builds the tree using one bounded stack; token length
and nesting depth are fixed configuration limits, and exceeding them is a
clean parse failure.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), parse_string(), parse_file(), create_tree()
- Level 2: Configured parser - BoundedXMLParser with ParserConfig
"""

__version__ = "0.1.0"
__author__ = "Bounded XML Parser Team"

from .api import (
    BoundedXMLParser,
    ParseResult,
    create_tree,
    parse,
    parse_file,
    parse_string,
)
from .shared.config import CloseTagMatch, ParserConfig, QuoteStyle
from .shared.result import FailureReason
from .tree import (
    XMLAttribute,
    XMLElement,
    count_elements_by_name,
    format_tree,
    get_attribute_by_name,
    get_elements_by_name,
    print_tree,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing functions
    "create_tree",
    "parse",
    "parse_file",
    "parse_string",

    # Level 2: Configured parser
    "BoundedXMLParser",
    "ParserConfig",
    "QuoteStyle",
    "CloseTagMatch",

    # Results and tree
    "ParseResult",
    "FailureReason",
    "XMLAttribute",
    "XMLElement",

    # Tree queries
    "count_elements_by_name",
    "format_tree",
    "get_attribute_by_name",
    "get_elements_by_name",
    "print_tree",
]
