"""Result objects, failure reasons and diagnostic types for bounded XML parsing.

Every way a parse attempt can fail is named by a ``FailureReason``. Internally
failures travel as ``ParseError`` exceptions; the public API collapses them
into a single success/failure signal plus diagnostics.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()      # Debug-level information
    INFO = auto()       # Informational messages
    WARNING = auto()    # Warnings about potential issues
    ERROR = auto()      # Error conditions
    CRITICAL = auto()   # Errors that aborted the parse


class FailureReason(Enum):
    """Reasons a parse attempt can fail."""

    MISSING_LEADING_DELIMITER = auto()   # Input does not start with '<'
    TOKEN_TOO_LONG = auto()              # Pending token exceeded max_token_length
    UNEXPECTED_END_OF_INPUT = auto()     # Input ended before the terminal state
    UNBALANCED_STACK = auto()            # Frames other than the root remained
    STACK_OVERFLOW = auto()              # Push beyond stack capacity
    STACK_UNDERFLOW = auto()             # Pop or peek on an empty stack
    STACK_CORRUPTED = auto()             # Popped frame differs from the peeked one
    FRAME_MISMATCH = auto()              # Top frame is not of the expected kind
    CLOSE_TAG_MISMATCH = auto()          # Closing tag does not match the open element
    ATTRIBUTE_VALUE_REASSIGNED = auto()  # Attribute value set twice
    EMPTY_NAME = auto()                  # Element or attribute name is empty
    INPUT_ERROR = auto()                 # Input could not be read or decoded


class ParseError(Exception):
    """Raised inside the parser when the current attempt must be aborted."""

    def __init__(
        self,
        reason: FailureReason,
        message: str,
        position: Optional[int] = None
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message
        self.position = position

    def __str__(self) -> str:
        if self.position is None:
            return f"{self.reason.name}: {self.message}"
        return f"{self.reason.name} at offset {self.position}: {self.message}"


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    position: Optional[Dict[str, int]] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        """Convert diagnostic to dictionary representation."""
        result: Dict[str, Any] = {
            "severity": self.severity.name,
            "message": self.message,
            "component": self.component,
        }
        if self.position is not None:
            result["position"] = dict(self.position)
        if self.details:
            result["details"] = dict(self.details)
        return result


@dataclass
class PerformanceMetrics:
    """Performance metrics for a single parse attempt."""

    processing_time_ms: float = 0.0
    characters_processed: int = 0
    transitions_taken: int = 0
    max_stack_depth: int = 0

    @property
    def characters_per_second(self) -> float:
        """Calculate characters processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.characters_processed * 1000.0) / self.processing_time_ms

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary representation."""
        return {
            "processing_time_ms": self.processing_time_ms,
            "characters_processed": self.characters_processed,
            "transitions_taken": self.transitions_taken,
            "max_stack_depth": self.max_stack_depth,
        }
