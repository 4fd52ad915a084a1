"""State machine grammar for bounded XML parsing.

The grammar is a table indexed by (source state, target state). Each cell
holds up to two alternative patterns written in the mini-language of
``patterns``. When several candidates match at the same position the one
with the longest raw pattern wins; equal lengths go to the candidate seen
first, i.e. the lower target state, then the lower alternative.

Tables are built once per quote style at import time and never mutated.
"""

from dataclasses import dataclass
from enum import IntEnum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from bounded_xml_parser.shared.config import QuoteStyle

from .patterns import match_pattern

SELF_CLOSE_MARKER = "/>"

# Alternatives per (source, target) cell
STATE_CHOICES = 2


class ParserState(IntEnum):
    """States of the parsing automaton, in table order."""

    TAG_OPEN_NAME = 0     # Inside a starting (or self-closing) tag name
    TAG_CLOSE_NAME = 1    # Inside an ending tag name
    ATTRIBUTE_NAME = 2    # Inside an attribute name
    ATTRIBUTE_VALUE = 3   # Inside an attribute value
    ELEMENT_BODY = 4      # Inside an element body
    COMMENT = 5           # Inside a comment body
    END = 6               # Past the end of the document

    @property
    def is_terminal(self) -> bool:
        """Check whether this is the terminal state."""
        return self is ParserState.END


NUM_STATES = len(ParserState)

Cell = Tuple[str, ...]
Row = Tuple[Cell, ...]


@dataclass(frozen=True)
class Transition:
    """A matched state change."""

    source: ParserState
    target: ParserState
    pattern: str
    consumed: int
    advance: int

    @property
    def is_self_closing(self) -> bool:
        """Check whether the matched pattern closes its tag with '/>'."""
        return SELF_CLOSE_MARKER in self.pattern


def _grammar(quote: str) -> Dict[ParserState, Dict[ParserState, Cell]]:
    """Describe the grammar for the given attribute quote character."""
    q = quote
    return {
        ParserState.TAG_OPEN_NAME: {
            ParserState.TAG_OPEN_NAME: ("s>s<a", "s/>s<a"),
            ParserState.TAG_CLOSE_NAME: ("s>s</a", "s/>s</a"),
            ParserState.ATTRIBUTE_NAME: ("Ssa",),
            ParserState.ELEMENT_BODY: ("s>sA", "s/>sA"),
            ParserState.COMMENT: ("s>s<!--sA", "s/>s<!--sA"),
            ParserState.END: ("s/>s0",),
        },
        ParserState.TAG_CLOSE_NAME: {
            ParserState.TAG_OPEN_NAME: ("s>s<a",),
            ParserState.TAG_CLOSE_NAME: ("s>s</a",),
            ParserState.ELEMENT_BODY: ("s>sA",),
            ParserState.COMMENT: ("s>s<!--",),
            ParserState.END: ("s>s0",),
        },
        ParserState.ATTRIBUTE_NAME: {
            ParserState.ATTRIBUTE_VALUE: (f"={q}sA",),
        },
        ParserState.ATTRIBUTE_VALUE: {
            ParserState.TAG_OPEN_NAME: (f"{q}s>s<a", f"{q}s/>s<a"),
            ParserState.TAG_CLOSE_NAME: (f"{q}s>s</a", f"{q}s/>s</a"),
            ParserState.ATTRIBUTE_NAME: (f"{q}Ssa",),
            ParserState.ELEMENT_BODY: (f"{q}s>sA", f"{q}s/>sA"),
            ParserState.COMMENT: (f"{q}s>s<!--sA", f"{q}s/>s<!--sA"),
            ParserState.END: (f"{q}s/>s0",),
        },
        ParserState.ELEMENT_BODY: {
            ParserState.TAG_OPEN_NAME: ("s<a",),
            ParserState.TAG_CLOSE_NAME: ("s</a",),
            ParserState.COMMENT: ("<!--sA",),
        },
        ParserState.COMMENT: {
            ParserState.TAG_OPEN_NAME: ("-->s<a",),
            ParserState.TAG_CLOSE_NAME: ("-->s</a",),
            ParserState.ELEMENT_BODY: ("-->sA",),
            ParserState.COMMENT: ("-->s<!--sA",),
        },
        ParserState.END: {},
    }


class TransitionTable:
    """Immutable transition table for one quote style."""

    def __init__(self, quote_style: QuoteStyle) -> None:
        self.quote_style = quote_style
        grammar = _grammar(quote_style.char)

        rows = []
        for source in ParserState:
            cells = []
            for target in ParserState:
                cell = grammar[source].get(target, ())
                if len(cell) > STATE_CHOICES:
                    raise ValueError(
                        f"Too many alternatives for {source.name} -> {target.name}"
                    )
                cells.append(tuple(cell))
            rows.append(tuple(cells))
        self._rows: Tuple[Row, ...] = tuple(rows)

    def patterns(self, source: ParserState, target: ParserState) -> Cell:
        """Return the alternatives registered for a state change."""
        return self._rows[source][target]

    def targets(self, source: ParserState) -> Tuple[ParserState, ...]:
        """Return the states reachable from ``source``."""
        return tuple(
            target for target in ParserState if self._rows[source][target]
        )

    def next_transition(
        self,
        state: ParserState,
        text: str,
        position: int
    ) -> Optional[Transition]:
        """Find the best transition out of ``state`` at ``position``.

        Args:
            state: Current automaton state
            text: Complete input text
            position: Cursor offset into ``text``

        Returns:
            The winning Transition, or None if no candidate matches
        """
        best: Optional[Transition] = None
        best_length = -1

        for target in ParserState:
            for pattern in self._rows[state][target]:
                match = match_pattern(text, position, pattern)
                if match is None:
                    continue
                # Strictly longer only: the first candidate of maximal length wins
                if len(pattern) > best_length:
                    best_length = len(pattern)
                    best = Transition(
                        source=state,
                        target=target,
                        pattern=pattern,
                        consumed=match.consumed,
                        advance=match.advance,
                    )

        return best


TRANSITION_TABLES: Mapping[QuoteStyle, TransitionTable] = MappingProxyType({
    style: TransitionTable(style) for style in QuoteStyle
})


def get_transition_table(quote_style: QuoteStyle) -> TransitionTable:
    """Return the shared table for ``quote_style``."""
    return TRANSITION_TABLES[quote_style]
