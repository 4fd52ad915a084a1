"""Pattern mini-language used by the transition table.

A transition pattern is a string evaluated left to right against the input.
Every character stands for itself except:

    a   one ASCII letter or digit
    A   one ASCII letter or digit, or one of BODY_START_CHARS
    S   exactly one whitespace character
    s   any number (including zero) of whitespace characters, greedy
    0   the end of the input

Classification is byte-oriented and ASCII only.
"""

import string
from dataclasses import dataclass
from typing import Optional

# Characters that element bodies, attribute values and comment bodies may start with
BODY_START_CHARS = frozenset("!@#$%^&*()-_=+[{]}\\/|;:,.?")

ALNUM_CHARS = frozenset(string.ascii_letters + string.digits)
WHITESPACE_CHARS = frozenset(" \t\n\r\v\f")

# Returned for any position past the end of the text
END_OF_INPUT = "\0"

PATTERN_ALNUM = "a"
PATTERN_BODY_START = "A"
PATTERN_ONE_SPACE = "S"
PATTERN_SPACES = "s"
PATTERN_END = "0"


@dataclass(frozen=True)
class PatternMatch:
    """Outcome of a successful pattern comparison.

    ``consumed`` counts every input character matched by the pattern.
    ``advance`` counts the characters matched by all items but the last one:
    the final item of a transition pattern is lookahead for the first
    character of the next token, so the cursor only skips the delimiter.
    """

    consumed: int
    advance: int


def char_at(text: str, position: int) -> str:
    """Return the character at ``position`` or END_OF_INPUT past the end."""
    if position < len(text):
        return text[position]
    return END_OF_INPUT


def is_alnum(char: str) -> bool:
    """Check for an ASCII letter or digit."""
    return char in ALNUM_CHARS


def is_space(char: str) -> bool:
    """Check for an ASCII whitespace character."""
    return char in WHITESPACE_CHARS


def is_body_start(char: str) -> bool:
    """Check whether ``char`` may start a body, attribute value or comment."""
    return char in ALNUM_CHARS or char in BODY_START_CHARS


def match_pattern(text: str, position: int, pattern: str) -> Optional[PatternMatch]:
    """Compare ``pattern`` against ``text`` starting at ``position``.

    Args:
        text: Complete input text
        position: Offset of the first character to compare
        pattern: Transition pattern in the mini-language

    Returns:
        PatternMatch on success, None if the input does not conform
    """
    cursor = position
    advance = 0
    last_index = len(pattern) - 1

    for index, item in enumerate(pattern):
        if index == last_index:
            advance = cursor - position

        char = char_at(text, cursor)

        if item == PATTERN_SPACES:
            while is_space(char):
                cursor += 1
                char = char_at(text, cursor)
            continue

        if item == PATTERN_END:
            if char != END_OF_INPUT:
                return None
            continue

        if item == PATTERN_ALNUM:
            matched = is_alnum(char)
        elif item == PATTERN_BODY_START:
            matched = is_body_start(char)
        elif item == PATTERN_ONE_SPACE:
            matched = is_space(char)
        else:
            matched = char == item and char != END_OF_INPUT

        if not matched:
            return None
        cursor += 1

    return PatternMatch(consumed=cursor - position, advance=advance)
