"""
Structured logging configuration.

JSON lines on stdout for the API service; a plain text format for local runs
and the command-line import tool. Fields passed through ``extra=`` (source
file, datacenter, pass counters) are carried by both formats.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED_RECORD_KEYS = frozenset((
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "taskName", "message", "asctime",
))


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_RECORD_KEYS and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        log_entry.update(_extra_fields(record))
        return json.dumps(log_entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable formatter; extras are appended as key=value pairs."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = _extra_fields(record)
        if not extras:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in extras.items())
        head, sep, tail = line.partition("\n")
        return f"{head} | {pairs}{sep}{tail}"


def setup_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """
    Configure root logging once for the process.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: 'json' or 'text'
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level.upper())

    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level.upper())
    handler.setFormatter(JSONFormatter() if log_format.lower() == "json" else TextFormatter())
    root_logger.addHandler(handler)

    # Third-party chatter
    for noisy in ("uvicorn.access", "sqlalchemy.engine", "multipart", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)
