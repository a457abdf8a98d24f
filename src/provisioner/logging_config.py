"""Structured logging setup.

Modules log through logging.getLogger(__name__) and attach context with
extra={...}. setup_logging() installs a single stdout handler that renders
those records as JSON lines (production) or plain text (local use).
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime

from .config import Config

# Attributes every LogRecord carries; anything else came in through extra=
_RESERVED_RECORD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    }
)


class JsonFormatter(logging.Formatter):
    """Format logs as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_ATTRS:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(level: int | str = logging.INFO, json_format: bool = True) -> None:
    """Configure root logging with one stdout handler.

    Calling it again replaces the handler installed by the previous call.

    Args:
        level: Root log level.
        json_format: Emit JSON lines instead of plain text.
    """
    handler = logging.StreamHandler(sys.stdout)
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    handler.set_name("provisioner")

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if existing.get_name() == "provisioner":
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Reduce noise from the HTTP stack
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def setup_logging_from_config(config: Config) -> None:
    """Configure logging from a validated Config."""
    setup_logging(level=config.log_level.upper(), json_format=config.log_format == "json")
