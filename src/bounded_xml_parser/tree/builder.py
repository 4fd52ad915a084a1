"""Action handlers that assemble the tree while the automaton runs.

Each completed token is handed to the handler registered for the state the
automaton is leaving. Handlers mutate the tree and the construction stack
and raise ``ParseError`` when the document cannot be assembled.
"""

from typing import Callable, Dict

from bounded_xml_parser.shared import (
    CloseTagMatch,
    FailureReason,
    ParseError,
    ParserConfig,
)
from bounded_xml_parser.tokenization import ParserState, Transition

from .model import XMLAttribute, XMLElement
from .stack import AttributeFrame, ElementFrame, Frame, FrameStack

Handler = Callable[[str, Transition], None]


class TreeAssembler:
    """Builds the element tree from the tokens completed by the automaton.

    The stack always holds the caller's root at the bottom. Element frames
    are pushed for open tags and popped by their end tag; attribute frames
    are pushed for an attribute name and popped once its value is read.
    """

    def __init__(
        self,
        root: XMLElement,
        stack: FrameStack,
        config: ParserConfig
    ) -> None:
        """Initialize the assembler.

        Args:
            root: Root sentinel receiving the top-level elements
            stack: Construction stack, expected to hold the root frame
            config: Parser configuration (close-tag policy)
        """
        self.root = root
        self.stack = stack
        self.config = config
        self._handlers: Dict[ParserState, Handler] = {
            ParserState.TAG_OPEN_NAME: self.on_tag_open_name,
            ParserState.TAG_CLOSE_NAME: self.on_tag_close_name,
            ParserState.ATTRIBUTE_NAME: self.on_attribute_name,
            ParserState.ATTRIBUTE_VALUE: self.on_attribute_value,
            ParserState.ELEMENT_BODY: self.on_element_body,
            ParserState.COMMENT: self.on_comment,
            ParserState.END: self.on_end,
        }

    def handle(self, state: ParserState, token: str, transition: Transition) -> None:
        """Run the handler for the state the automaton is leaving."""
        self._handlers[state](token, transition)

    def close_tag_matches(self, open_name: str, token: str) -> bool:
        """Apply the configured close-tag policy."""
        if self.config.close_tag_match is CloseTagMatch.PREFIX:
            return open_name.startswith(token)
        return open_name == token

    # Frame helpers

    def _peek_element(self) -> ElementFrame:
        frame = self.stack.peek()
        if frame is None:
            raise ParseError(
                FailureReason.STACK_UNDERFLOW, "No open element on the stack"
            )
        if not isinstance(frame, ElementFrame):
            raise ParseError(
                FailureReason.FRAME_MISMATCH,
                f"Expected an element frame, found attribute "
                f"'{frame.attribute.name}'",
            )
        return frame

    def _peek_attribute(self) -> AttributeFrame:
        frame = self.stack.peek()
        if frame is None:
            raise ParseError(
                FailureReason.STACK_UNDERFLOW, "No open attribute on the stack"
            )
        if not isinstance(frame, AttributeFrame):
            raise ParseError(
                FailureReason.FRAME_MISMATCH,
                f"Expected an attribute frame, found element "
                f"'{frame.element.name}'",
            )
        return frame

    def _push(self, frame: Frame) -> None:
        if not self.stack.push(frame):
            raise ParseError(
                FailureReason.STACK_OVERFLOW,
                f"Nesting exceeds stack capacity of {self.stack.capacity}",
            )

    def _pop_expected(self, frame: Frame) -> None:
        if self.stack.pop() is not frame:
            raise ParseError(
                FailureReason.STACK_CORRUPTED,
                "Popped frame is not the frame that was peeked",
            )

    def _pop_open_element(self) -> XMLElement:
        frame = self._peek_element()
        if frame.element is self.root:
            raise ParseError(
                FailureReason.CLOSE_TAG_MISMATCH, "No open element to close"
            )
        self._pop_expected(frame)
        return frame.element

    # Handlers

    def on_tag_open_name(self, token: str, transition: Transition) -> None:
        """Create an element, attach it, and push it unless self-closing."""
        if not token:
            raise ParseError(FailureReason.EMPTY_NAME, "Element name is empty")

        element = XMLElement(name=token)
        parent = self.stack.peek()
        if parent is not None:
            if not isinstance(parent, ElementFrame):
                raise ParseError(
                    FailureReason.FRAME_MISMATCH,
                    f"Element '{token}' opened inside an attribute",
                )
            parent.element.add_child(element)

        if transition.is_self_closing:
            return

        self._push(ElementFrame(element))

    def on_tag_close_name(self, token: str, transition: Transition) -> None:
        """Pop the open element named by a closing tag."""
        frame = self._peek_element()
        open_name = frame.element.name
        if frame.element is self.root or not self.close_tag_matches(open_name, token):
            raise ParseError(
                FailureReason.CLOSE_TAG_MISMATCH,
                f"Closing tag '{token}' does not match open element "
                f"'{open_name}'",
            )
        self._pop_expected(frame)

    def on_attribute_name(self, token: str, transition: Transition) -> None:
        """Create an attribute on the open element and push it."""
        if not token:
            raise ParseError(FailureReason.EMPTY_NAME, "Attribute name is empty")

        owner = self._peek_element()
        attribute = XMLAttribute(name=token)
        owner.element.add_attribute(attribute)
        self._push(AttributeFrame(attribute))

    def on_attribute_value(self, token: str, transition: Transition) -> None:
        """Set the open attribute's value and pop it.

        When the value closes a self-closing tag the owning element is
        popped as well.
        """
        frame = self._peek_attribute()
        try:
            frame.attribute.assign_value(token)
        except ValueError as e:
            raise ParseError(
                FailureReason.ATTRIBUTE_VALUE_REASSIGNED, str(e)
            ) from e
        self._pop_expected(frame)

        if transition.is_self_closing:
            self._pop_open_element()

    def on_element_body(self, token: str, transition: Transition) -> None:
        """Replace the open element's body text."""
        frame = self._peek_element()
        frame.element.body = token

    def on_comment(self, token: str, transition: Transition) -> None:
        """Discard comment text."""

    def on_end(self, token: str, transition: Transition) -> None:
        """Terminal state; the driver stops before this could run."""
