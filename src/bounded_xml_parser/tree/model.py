"""Tree data model for bounded XML parsing.

Elements own their attributes and children once attached. The root element
is supplied and owned by the caller; the parser only ever resets and fills
it in place.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

ROOT_NAME = "root"


@dataclass(eq=False)
class XMLAttribute:
    """Element attribute whose value is filled in once the value token is read."""

    name: str
    value: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate attribute values."""
        if not self.name:
            raise ValueError("Attribute name cannot be empty")

    @property
    def has_value(self) -> bool:
        """Check whether the value has been assigned."""
        return self.value is not None

    def assign_value(self, value: str) -> None:
        """Set the value; an attribute value may only be set once."""
        if self.value is not None:
            raise ValueError(f"Attribute '{self.name}' already has a value")
        self.value = value

    def to_dict(self) -> Dict[str, Any]:
        """Convert attribute to dictionary representation."""
        return {"name": self.name, "value": self.value}


@dataclass(eq=False)
class XMLElement:
    """Single element of the document tree.

    ``body`` is only present when the element had loose text content.
    Attributes and children keep document order.
    """

    name: str
    body: Optional[str] = None
    attributes: List[XMLAttribute] = field(default_factory=list)
    children: List["XMLElement"] = field(default_factory=list)
    parent: Optional["XMLElement"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Validate element values and establish parent-child relationships."""
        if not self.name:
            raise ValueError("Element name cannot be empty")

        for child in self.children:
            child.parent = self

    @classmethod
    def create_root(cls) -> "XMLElement":
        """Create an empty root sentinel."""
        return cls(name=ROOT_NAME)

    @property
    def is_root(self) -> bool:
        """Check whether this element is the sentinel at the top of a tree."""
        return self.parent is None and self.name == ROOT_NAME

    @property
    def is_empty(self) -> bool:
        """Check for an element with no body, attributes or children."""
        return self.body is None and not self.attributes and not self.children

    def add_child(self, child: "XMLElement") -> None:
        """Append a child element and establish parent relationship."""
        if not isinstance(child, XMLElement):
            raise TypeError("Child must be an XMLElement instance")

        child.parent = self
        self.children.append(child)

    def add_attribute(self, attribute: XMLAttribute) -> None:
        """Append an attribute."""
        if not isinstance(attribute, XMLAttribute):
            raise TypeError("Attribute must be an XMLAttribute instance")

        self.attributes.append(attribute)

    def get_depth(self) -> int:
        """Get depth of this element in the tree (root = 0)."""
        depth = 0
        node = self.parent
        while node is not None:
            depth += 1
            node = node.parent
        return depth

    def reset_root(self) -> None:
        """Turn this element into an empty root sentinel."""
        release_tree(self)
        self.name = ROOT_NAME
        self.parent = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert element to dictionary representation."""
        result: Dict[str, Any] = {"name": self.name}

        if self.body is not None:
            result["body"] = self.body

        if self.attributes:
            result["attributes"] = [attr.to_dict() for attr in self.attributes]

        if self.children:
            result["children"] = [child.to_dict() for child in self.children]

        return result


def release_tree(root: XMLElement) -> int:
    """Release everything below ``root``, leaving the root itself empty.

    Nodes are detached and cleared with an explicit work list so arbitrarily
    deep trees do not hit the recursion limit.

    Returns:
        Number of elements released, not counting the root
    """
    released = 0
    pending = list(root.children)

    root.children = []
    root.attributes = []
    root.body = None

    while pending:
        element = pending.pop()
        pending.extend(element.children)
        element.children = []
        element.attributes = []
        element.parent = None
        released += 1

    return released
