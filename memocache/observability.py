"""
memocache - Logging Setup

Structured JSON logging for the memocache logger hierarchy. Modules log via
``logging.getLogger(__name__)`` with structured fields in ``extra``; this
module only decides how those records are rendered.
"""

import json
import logging
from datetime import UTC, datetime

from .config import LogLevel, get_settings

ROOT_LOGGER = "memocache"

# LogRecord attributes that are not user-supplied extra fields
_RESERVED_ATTRS = frozenset(
    (
        "args",
        "msg",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "name",
        "message",
    )
)


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Add any extra fields from record.__dict__
        for key, value in record.__dict__.items():
            if key not in log_data and not key.startswith("_") and key not in _RESERVED_ATTRS:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def configure_logging(level: LogLevel | str | None = None) -> logging.Logger:
    """
    Install a JSON handler on the memocache logger.

    Calling it again replaces the handler instead of adding a second one.

    Args:
        level: Log level name (default: MEMOCACHE_LOG_LEVEL from settings)

    Returns:
        The configured memocache logger
    """
    if level is None:
        level = get_settings().log_level

    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    logger.setLevel(level.value if isinstance(level, LogLevel) else level.upper())
    return logger
