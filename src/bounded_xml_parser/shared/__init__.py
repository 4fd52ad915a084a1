"""Shared utilities for bounded XML parsing.

This module provides the configuration object, result and failure types, and
logging helpers used across the tokenization, tree and API layers.
"""

from .config import (
    CloseTagMatch,
    ConfigError,
    ConfigValidationError,
    ParserConfig,
    QuoteStyle,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    FailureReason,
    ParseError,
    PerformanceMetrics,
)

__all__ = [
    "CloseTagMatch",
    "ConfigError",
    "ConfigValidationError",
    "ParserConfig",
    "QuoteStyle",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "FailureReason",
    "ParseError",
    "PerformanceMetrics",
]
