"""Configuration for bounded XML parsing.

The parser is deliberately bounded: the longest token it accepts and the
deepest combined element/attribute nesting it can track are explicit
configuration values rather than accidental integer widths.
"""

import json
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Any, Dict, List, Optional

DEFAULT_MAX_TOKEN_LENGTH = 1000
DEFAULT_STACK_CAPACITY = 100

# Root frame plus at least one element frame
MIN_STACK_CAPACITY = 2

VALID_LOGGING_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class QuoteStyle(Enum):
    """Attribute value delimiter recognised by the transition table."""

    DOUBLE = auto()   # name="value"
    SINGLE = auto()   # name='value'

    @property
    def char(self) -> str:
        """The quote character for this style."""
        return '"' if self is QuoteStyle.DOUBLE else "'"


class CloseTagMatch(Enum):
    """Policy used to match a closing tag against the open element."""

    EXACT = auto()    # Names must be equal
    PREFIX = auto()   # Open name only has to start with the closing token (legacy)


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ParserConfig:
    """Immutable configuration for the bounded XML parser.

    Thread-safe due to frozen dataclass implementation.
    """

    max_token_length: int = DEFAULT_MAX_TOKEN_LENGTH
    stack_capacity: int = DEFAULT_STACK_CAPACITY
    quote_style: QuoteStyle = QuoteStyle.DOUBLE
    close_tag_match: CloseTagMatch = CloseTagMatch.EXACT
    encoding: str = "utf-8"

    # Logging and diagnostics
    logging_level: str = "WARNING"
    trace_transitions: bool = False

    # Metadata
    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the parser configuration."""
        if not isinstance(self.max_token_length, int) or self.max_token_length <= 0:
            raise ConfigValidationError(
                "max_token_length must be > 0",
                field_name="max_token_length",
            )
        if (
            not isinstance(self.stack_capacity, int)
            or self.stack_capacity < MIN_STACK_CAPACITY
        ):
            raise ConfigValidationError(
                f"stack_capacity must be >= {MIN_STACK_CAPACITY}",
                field_name="stack_capacity",
                suggestions=["The root element always occupies one stack frame"],
            )
        if not isinstance(self.quote_style, QuoteStyle):
            raise ConfigValidationError(
                "quote_style must be a QuoteStyle", field_name="quote_style"
            )
        if not isinstance(self.close_tag_match, CloseTagMatch):
            raise ConfigValidationError(
                "close_tag_match must be a CloseTagMatch",
                field_name="close_tag_match",
            )
        if not self.encoding:
            raise ConfigValidationError(
                "encoding cannot be empty", field_name="encoding"
            )
        if self.logging_level not in VALID_LOGGING_LEVELS:
            raise ConfigValidationError(
                f"logging_level must be one of {VALID_LOGGING_LEVELS}",
                field_name="logging_level",
            )

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Configuration fields to override

        Returns:
            New ParserConfig instance with overrides applied

        Example:
            >>> config = ParserConfig()
            >>> config.override(stack_capacity=16).stack_capacity
            16
        """
        return replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format.

        Returns:
            Dictionary representation of the configuration, enums by name
        """
        result: Dict[str, Any] = {}
        for field_name in self.__dataclass_fields__:
            value = getattr(self, field_name)
            if isinstance(value, Enum):
                value = value.name
            result[field_name] = value
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string.

        Args:
            indent: JSON indentation level

        Returns:
            JSON string representation
        """
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so typos in configuration files surface
        instead of being silently ignored.

        Args:
            data: Dictionary containing configuration data

        Returns:
            ParserConfig instance created from dictionary
        """
        field_values: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in cls.__dataclass_fields__:
                raise ConfigValidationError(
                    f"Unknown configuration field: {key}",
                    field_name=key,
                    suggestions=sorted(cls.__dataclass_fields__),
                )
            if key == "quote_style" and isinstance(value, str):
                value = _enum_from_name(QuoteStyle, value, key)
            elif key == "close_tag_match" and isinstance(value, str):
                value = _enum_from_name(CloseTagMatch, value, key)
            field_values[key] = value

        return cls(**field_values)

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string.

        Args:
            json_str: JSON string containing configuration data

        Returns:
            ParserConfig instance created from JSON
        """
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def default(cls) -> "ParserConfig":
        """Create the default configuration."""
        return cls(name="default")

    @classmethod
    def legacy(cls) -> "ParserConfig":
        """Create configuration reproducing prefix close-tag matching."""
        return cls(
            close_tag_match=CloseTagMatch.PREFIX,
            name="legacy",
            description="Closing tags match any open element name they prefix",
        )

    @classmethod
    def single_quoted(cls) -> "ParserConfig":
        """Create configuration for documents quoting attributes with '."""
        return cls(
            quote_style=QuoteStyle.SINGLE,
            name="single_quoted",
            description="Attribute values delimited by single quotes",
        )


def _enum_from_name(enum_class: Any, value: str, field_name: str) -> Any:
    """Look up an enum member by (case-insensitive) name."""
    try:
        return enum_class[value.upper()]
    except KeyError as e:
        raise ConfigValidationError(
            f"{field_name} must be one of {[member.name for member in enum_class]}",
            field_name=field_name,
        ) from e
