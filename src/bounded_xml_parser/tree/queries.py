"""Read-only queries over a finished tree.

All traversals are depth-first pre-order (document order) and use an
explicit work list instead of recursion.
"""

import sys
from typing import Iterator, List, Optional, TextIO, Tuple

from bounded_xml_parser.shared import QuoteStyle

from .model import XMLAttribute, XMLElement


def iter_elements(root: XMLElement) -> Iterator[XMLElement]:
    """Yield ``root`` and every descendant in document order."""
    pending = [root]
    while pending:
        element = pending.pop()
        yield element
        pending.extend(reversed(element.children))


def iter_with_depth(root: XMLElement) -> Iterator[Tuple[XMLElement, int]]:
    """Yield ``(element, depth)`` pairs in document order, root at depth 0."""
    pending = [(root, 0)]
    while pending:
        element, depth = pending.pop()
        yield element, depth
        pending.extend((child, depth + 1) for child in reversed(element.children))


def count_elements_by_name(root: XMLElement, name: str) -> int:
    """Count the elements called ``name`` in the subtree, root included."""
    return sum(1 for element in iter_elements(root) if element.name == name)


def get_elements_by_name(
    root: XMLElement,
    name: str,
    limit: Optional[int] = None
) -> List[XMLElement]:
    """Collect elements called ``name`` in document order.

    Args:
        root: Root of the subtree to search (included in the search)
        name: Element name to look for
        limit: Maximum number of elements to return, None for all

    Returns:
        The matching elements, at most ``limit`` of them
    """
    if limit is not None and limit < 0:
        raise ValueError("limit must be >= 0 or None")

    found: List[XMLElement] = []
    if limit == 0:
        return found

    for element in iter_elements(root):
        if element.name == name:
            found.append(element)
            if limit is not None and len(found) >= limit:
                break
    return found


def get_attribute_by_name(element: XMLElement, name: str) -> Optional[XMLAttribute]:
    """Return the first attribute of ``element`` called ``name``, or None."""
    for attribute in element.attributes:
        if attribute.name == name:
            return attribute
    return None


def format_tree(root: XMLElement) -> str:
    """Render a subtree as indented text, one element per line.

    Each line holds the element name, its attributes as ``(name=value)``
    and its body, indented by one space per level.
    """
    lines = []
    for element, depth in iter_with_depth(root):
        parts = [element.name]
        parts.extend(
            f"({attribute.name}={attribute.value or ''})"
            for attribute in element.attributes
        )
        if element.body is not None:
            parts.append(element.body)
        lines.append(" " * (depth + 1) + " ".join(parts))
    return "\n".join(lines)


def print_tree(root: XMLElement, file: Optional[TextIO] = None) -> None:
    """Print the rendering produced by ``format_tree``."""
    print(format_tree(root), file=file or sys.stdout)


def to_xml(root: XMLElement, quote_style: QuoteStyle = QuoteStyle.DOUBLE) -> str:
    """Serialize a subtree into text the parser accepts.

    A root sentinel serializes as the concatenation of its children. A body on
    the root (top-level text between elements) is written after the first
    child, since a document must start with a tag. Text is written verbatim;
    the grammar has no escaping.
    """
    if root.is_root:
        parts = [to_xml(child, quote_style) for child in root.children]
        if root.body is not None:
            parts.insert(min(1, len(parts)), root.body)
        return "".join(parts)

    quote = quote_style.char
    parts: List[str] = []
    # (element, closing) pairs; closing entries emit the end tag
    pending: List[Tuple[XMLElement, bool]] = [(root, False)]

    while pending:
        element, closing = pending.pop()
        if closing:
            parts.append(f"</{element.name}>")
            continue

        attributes = "".join(
            f" {attribute.name}={quote}{attribute.value or ''}{quote}"
            for attribute in element.attributes
        )
        if element.body is None and not element.children:
            parts.append(f"<{element.name}{attributes}/>")
            continue

        parts.append(f"<{element.name}{attributes}>")
        if element.body is not None:
            parts.append(element.body)
        pending.append((element, True))
        pending.extend((child, False) for child in reversed(element.children))

    return "".join(parts)
