"""Tokenizing state machine for bounded XML parsing.

Key Components:
    match_pattern: Compare one transition pattern against the input
    TransitionTable: Grammar table choosing the longest matching transition
    ParserState: The seven automaton states
"""

from .patterns import (
    BODY_START_CHARS,
    END_OF_INPUT,
    PatternMatch,
    char_at,
    is_alnum,
    is_body_start,
    is_space,
    match_pattern,
)
from .transitions import (
    NUM_STATES,
    SELF_CLOSE_MARKER,
    TRANSITION_TABLES,
    ParserState,
    Transition,
    TransitionTable,
    get_transition_table,
)

__all__ = [
    "BODY_START_CHARS",
    "END_OF_INPUT",
    "PatternMatch",
    "char_at",
    "is_alnum",
    "is_body_start",
    "is_space",
    "match_pattern",
    "NUM_STATES",
    "SELF_CLOSE_MARKER",
    "TRANSITION_TABLES",
    "ParserState",
    "Transition",
    "TransitionTable",
    "get_transition_table",
]
