"""Tests for the bounded construction stack."""

import pytest

from bounded_xml_parser.tree.model import XMLAttribute, XMLElement
from bounded_xml_parser.tree.stack import (
    AttributeFrame,
    ElementFrame,
    FrameKind,
    FrameStack,
)


class TestFrames:
    """Test tagged frames."""

    def test_frame_kinds(self):
        """Test the kind tag of each frame."""
        assert ElementFrame(XMLElement("a")).kind is FrameKind.ELEMENT
        assert AttributeFrame(XMLAttribute("k")).kind is FrameKind.ATTRIBUTE

    def test_frames_compare_by_identity(self):
        """Test that equal-looking frames are distinct."""
        element = XMLElement("a")

        assert ElementFrame(element) != ElementFrame(element)


class TestFrameStack:
    """Test FrameStack behaviour."""

    def test_invalid_capacity(self):
        """Test capacity validation."""
        with pytest.raises(ValueError, match="Stack capacity must be > 0"):
            FrameStack(0)

    def test_lifo_order(self):
        """Test push, peek and pop order."""
        stack = FrameStack(3)
        first = ElementFrame(XMLElement("a"))
        second = AttributeFrame(XMLAttribute("k"))

        assert stack.push(first)
        assert stack.push(second)

        assert len(stack) == 2
        assert stack.peek() is second
        assert stack.pop() is second
        assert stack.pop() is first
        assert stack.is_empty()

    def test_push_beyond_capacity(self):
        """Test that a full stack rejects pushes."""
        stack = FrameStack(1)

        assert stack.push(ElementFrame(XMLElement("a")))
        assert stack.is_full()
        assert not stack.push(ElementFrame(XMLElement("b")))
        assert len(stack) == 1

    def test_push_none(self):
        """Test that None is rejected."""
        stack = FrameStack(2)

        assert not stack.push(None)
        assert stack.is_empty()

    def test_empty_pop_and_peek(self):
        """Test underflow returns None."""
        stack = FrameStack(2)

        assert stack.pop() is None
        assert stack.peek() is None

    def test_high_water_mark_and_clear(self):
        """Test depth tracking and clearing."""
        stack = FrameStack(4)
        for name in "abc":
            stack.push(ElementFrame(XMLElement(name)))
        stack.pop()
        stack.clear()

        assert stack.high_water_mark == 3
        assert len(stack) == 0
        assert stack.capacity == 4
