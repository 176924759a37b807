"""Structured logging configuration for Neusicgen.

Provides key=value formatted logs with playback session context and
timing fields.
"""

import logging
import sys
from typing import Any

from server.config import get_config

# Extra attributes copied into the log line when present on a record
CONTEXT_FIELDS = ("session_id", "note_index", "latency_ms", "note_count")


class StructuredFormatter(logging.Formatter):
    """Key=value structured log formatter with playback context."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as key=value pairs.

        Args:
            record: Log record to format

        Returns:
            Structured log string
        """
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for name in CONTEXT_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        pairs = [f"{k}={v}" for k, v in log_data.items()]
        return " ".join(pairs)


def setup_logging() -> None:
    """Configure structured logging for the application.

    Sets up handlers, formatters, and log levels based on configuration.
    """
    config = get_config()
    level = getattr(logging, config.log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(StructuredFormatter(datefmt="%Y-%m-%dT%H:%M:%S"))
    root_logger.addHandler(console_handler)

    # Set library log levels
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("fastapi").setLevel(logging.INFO)

    # Neusicgen module logging
    logging.getLogger("server").setLevel(level)
    logging.getLogger("composition").setLevel(level)

