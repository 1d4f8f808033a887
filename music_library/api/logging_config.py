"""
Logging setup for the music library service.

Modules log through `logging.getLogger(__name__)`. This module only wires the
root logger once at startup: a single stdout handler, either human-readable
("console") or one JSON object per line ("json"), with the current request id
attached to every record.
"""

from __future__ import annotations

import contextvars
import logging
import sys
import uuid
from typing import Any, Dict, Optional

from pythonjsonlogger.json import JsonFormatter

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")

# LOG_LEVEL takes short names ("warn" not "warning").
_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def get_request_id() -> str:
    return request_id_var.get()


def set_request_id(request_id: Optional[str] = None) -> str:
    """Set the request id for the current context, generating one if not given."""
    if not request_id:
        request_id = uuid.uuid4().hex
    request_id_var.set(request_id)
    return request_id


class RequestIdFilter(logging.Filter):
    """Attach `request_id` to every record passing through the handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()
        return True


class _JsonFormatter(JsonFormatter):
    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        request_id = getattr(record, "request_id", "")
        if request_id:
            log_record["request_id"] = request_id


# PUBLIC_INTERFACE
def configure_logging(level: str = "info", fmt: str = "console") -> None:
    """
    Configure the root logger.

    Args:
        level: one of debug, info, warn, error (unknown values fall back to info).
        fmt: "json" for structured output, anything else for console output.
    """
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    log_level = _LEVELS.get(level.lower(), logging.INFO)
    root.setLevel(log_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.addFilter(RequestIdFilter())

    if fmt == "json":
        formatter: logging.Formatter = _JsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s %(levelname)-7s [%(request_id)s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    handler.setFormatter(formatter)
    root.addHandler(handler)

    # Request logging middleware already covers access lines.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logging.getLogger(__name__).info("logging_configured: level=%s format=%s", level, fmt)
