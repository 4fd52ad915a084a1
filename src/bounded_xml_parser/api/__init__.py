"""Public parsing API for bounded XML parsing."""

from .adapters import (
    ElementTreeAdapter,
    LxmlAdapter,
    get_adapter,
    list_available_adapters,
)
from .parser import (
    BoundedXMLParser,
    ParseResult,
    create_tree,
    parse,
    parse_file,
    parse_string,
)

__all__ = [
    "ElementTreeAdapter",
    "LxmlAdapter",
    "get_adapter",
    "list_available_adapters",
    "BoundedXMLParser",
    "ParseResult",
    "create_tree",
    "parse",
    "parse_file",
    "parse_string",
]
