"""
JSON log output for SubTrack.

Every record becomes one JSON line on stdout:

    {"timestamp": "...Z", "level": "INFO", "channel": "lifecycle",
     "message": "Submission assigned to Dr. Rao",
     "context": {"request_id": "...", "submission_id": "..."},
     "extra": {"previous_faculty_id": null}}

Loggers are named subtrack.<channel>. The channel is the last name segment
and tells apart HTTP traffic, persistence, authorization and submission
state changes.
"""

import logging
import sys
import json
import uuid
from datetime import datetime, timezone
from contextvars import ContextVar

from subtrack.config import get_settings

# Set by the request middleware, read by the formatter
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

CHANNELS = ["http", "db", "auth", "lifecycle"]


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def _channel_of(record: logging.LogRecord) -> str:
    channel = getattr(record, "channel", None)
    if channel:
        return channel
    prefix, _, name = record.name.rpartition(".")
    return name if prefix == "subtrack" else "app"


class StructuredJsonFormatter(logging.Formatter):
    """Render a record as one JSON line, with the current request id in context."""

    def format(self, record: logging.LogRecord) -> str:
        context = {"request_id": request_id_var.get()}
        context.update(getattr(record, "context", None) or {})

        entry = {
            "timestamp": _utc_timestamp(),
            "level": record.levelname,
            "channel": _channel_of(record),
            "message": record.getMessage(),
            "context": context,
            "extra": getattr(record, "extra_data", None) or {},
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level: str = None):
    """
    Route all logging to stdout as JSON at LOG_LEVEL (or `level`).

    Safe to call more than once: the root handler list is replaced, not
    appended to.
    """
    log_level = _level(level or get_settings().log_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredJsonFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    for channel in CHANNELS:
        get_logger(channel).setLevel(log_level)

    return root_logger


def get_logger(channel: str) -> logging.Logger:
    return logging.getLogger(f"subtrack.{channel}")


def log_with_context(logger: logging.Logger, level: str, message: str,
                     context: dict = None, extra_data: dict = None,
                     exc_info: bool = False):
    """
    Log `message` on a channel logger.

    `context` holds identifiers (submission_id, faculty_id, ...) and is
    merged with the request id; `extra_data` holds measurements and
    details (duration_ms, status_code, ...).
    """
    logger.log(
        _level(level),
        message,
        exc_info=exc_info,
        extra={
            "context": context or {},
            "extra_data": extra_data or {},
            "channel": logger.name.rpartition(".")[2],
        },
    )


def generate_request_id() -> str:
    return str(uuid.uuid4())
