"""Correlation-aware logging for bounded XML parsing.

Records emitted by the parser, adapters and CLI carry the emitting component
and the caller's correlation ID as ``extra`` fields, so a single parse can be
followed through the log.
"""

import logging
from typing import Any, Dict, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class CorrelationLogger:
    """Wraps a stdlib logger and stamps every record with parse context."""

    def __init__(
        self,
        name: str,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None
    ) -> None:
        self.logger = logging.getLogger(name)
        self.correlation_id = correlation_id
        self.component = component or name.rsplit(".", 1)[-1]

    def _get_extra(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Merge caller fields over the component and correlation fields."""
        context: Dict[str, Any] = {
            "component": self.component,
            "correlation_id": self.correlation_id,
        }
        context.update(extra or {})
        return context

    def _log(self, level: int, message: str, extra: Optional[Dict[str, Any]]) -> None:
        if self.logger.isEnabledFor(level):
            self.logger.log(level, message, extra=self._get_extra(extra))

    def is_enabled_for(self, level: int) -> bool:
        """Check whether a record at ``level`` would be emitted.

        Used to skip building expensive ``extra`` payloads.
        """
        return self.logger.isEnabledFor(level)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log at DEBUG."""
        self._log(logging.DEBUG, message, extra)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log at INFO."""
        self._log(logging.INFO, message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log at WARNING."""
        self._log(logging.WARNING, message, extra)


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None
) -> CorrelationLogger:
    """Return a CorrelationLogger for ``name`` (typically ``__name__``)."""
    return CorrelationLogger(name, correlation_id, component)


def configure_logging(level: str = "INFO") -> None:
    """Send records at ``level`` and above to stderr.

    Args:
        level: Logging level name, one of DEBUG, INFO, WARNING, ERROR, CRITICAL
    """
    logging.basicConfig(level=getattr(logging, level), format=LOG_FORMAT)
