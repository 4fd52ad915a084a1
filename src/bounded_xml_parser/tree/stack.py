"""Bounded construction stack holding element and attribute frames.

Frames are tagged with their kind so the action handlers can check they
are looking at the frame they expect rather than trusting the automaton.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Union

from .model import XMLAttribute, XMLElement


class FrameKind(Enum):
    """Kinds of construction frame."""

    ELEMENT = auto()     # Element whose end tag has not been read
    ATTRIBUTE = auto()   # Attribute whose value has not been read


@dataclass(frozen=True, eq=False)
class ElementFrame:
    """Element still under construction."""

    element: XMLElement
    kind: FrameKind = field(default=FrameKind.ELEMENT, init=False)


@dataclass(frozen=True, eq=False)
class AttributeFrame:
    """Attribute still under construction."""

    attribute: XMLAttribute
    kind: FrameKind = field(default=FrameKind.ATTRIBUTE, init=False)


Frame = Union[ElementFrame, AttributeFrame]


class FrameStack:
    """Fixed-capacity LIFO of construction frames.

    Capacity is the maximum combined element and attribute nesting depth,
    root included.
    """

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("Stack capacity must be > 0")
        self._capacity = capacity
        self._frames: List[Frame] = []
        self.high_water_mark = 0

    @property
    def capacity(self) -> int:
        """Maximum number of frames."""
        return self._capacity

    def __len__(self) -> int:
        return len(self._frames)

    def is_empty(self) -> bool:
        """Check whether the stack holds no frames."""
        return not self._frames

    def is_full(self) -> bool:
        """Check whether another push would fail."""
        return len(self._frames) >= self._capacity

    def push(self, frame: Optional[Frame]) -> bool:
        """Push a frame.

        Returns:
            False if the stack is full or ``frame`` is None, True otherwise
        """
        if frame is None or self.is_full():
            return False

        self._frames.append(frame)
        self.high_water_mark = max(self.high_water_mark, len(self._frames))
        return True

    def pop(self) -> Optional[Frame]:
        """Remove and return the top frame, or None if the stack is empty."""
        if not self._frames:
            return None
        return self._frames.pop()

    def peek(self) -> Optional[Frame]:
        """Return the top frame without removing it, or None if empty."""
        if not self._frames:
            return None
        return self._frames[-1]

    def clear(self) -> None:
        """Drop every frame."""
        self._frames.clear()
