"""Structured logging for the address API.

Log records are emitted to stdout, either as plain text or as one JSON
object per line. Structured fields are passed with
``extra={"context": {...}}`` and are redacted before they are written.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional, TextIO

REDACTED = "[REDACTED]"

SENSITIVE_KEYS = (
    "password",
    "secret",
    "token",
    "authorization",
    "apikey",
    "accesskey",
    "privatekey",
    "creditcard",
    "ssn",
)


def is_sensitive_key(key: str) -> bool:
    lowered = str(key).lower().replace("_", "").replace("-", "")
    return any(marker in lowered for marker in SENSITIVE_KEYS)


def redact(data: Any) -> Any:
    """Return a copy of ``data`` with values under sensitive keys replaced."""
    if isinstance(data, dict):
        return {k: REDACTED if is_sensitive_key(k) else redact(v) for k, v in data.items()}
    if isinstance(data, (list, tuple)):
        return [redact(item) for item in data]
    return data


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = getattr(record, "context", None)
        if context:
            log_data["context"] = redact(context)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str, separators=(",", ":"))


class ContextFormatter(logging.Formatter):
    """Plain-text formatter that appends redacted context as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = getattr(record, "context", None)
        if context:
            pairs = " ".join(f"{k}={v}" for k, v in redact(context).items())
            line = f"{line} | {pairs}"
        return line


def setup_logging(level: str = "INFO", format_type: str = "json", stream: Optional[TextIO] = None) -> None:
    """Configure the root logger.

    Parameters
    ----------
    level : str
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    format_type : str
        Format type: "standard" or "json".
    stream : TextIO, optional
        Destination stream; defaults to stdout.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = ContextFormatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.getLogger("user_address_api").setLevel(log_level)

    # Reduce noise from external libraries
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
