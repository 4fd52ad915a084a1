"""Tree model and assembly for bounded XML parsing.

Key Components:
    XMLElement / XMLAttribute: Nodes of the parsed tree
    FrameStack: Bounded construction stack of element and attribute frames
    TreeAssembler: Action handlers run on every state transition
    queries: Read-only lookups over a finished tree
"""

from .builder import TreeAssembler
from .model import ROOT_NAME, XMLAttribute, XMLElement, release_tree
from .queries import (
    count_elements_by_name,
    format_tree,
    get_attribute_by_name,
    get_elements_by_name,
    iter_elements,
    iter_with_depth,
    print_tree,
    to_xml,
)
from .stack import AttributeFrame, ElementFrame, Frame, FrameKind, FrameStack

__all__ = [
    "TreeAssembler",
    "ROOT_NAME",
    "XMLAttribute",
    "XMLElement",
    "release_tree",
    "count_elements_by_name",
    "format_tree",
    "get_attribute_by_name",
    "get_elements_by_name",
    "iter_elements",
    "iter_with_depth",
    "print_tree",
    "to_xml",
    "AttributeFrame",
    "ElementFrame",
    "Frame",
    "FrameKind",
    "FrameStack",
]
