"""
Structured logging with JSON formatting and a per-request user id.

Modules log through logging.getLogger(__name__); setup_logging() installs one
stdout handler on the root logger. Wrap work for a user in user_context() to
stamp every record emitted inside it with that user_id.
"""

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

from pythonjsonlogger.json import JsonFormatter

# Context variable for the current user (thread/async safe)
user_id_var: ContextVar[Optional[str]] = ContextVar("user_id", default=None)

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] user=%(user_id)s %(message)s"
JSON_FIELDS = "%(asctime)s %(levelname)s %(name)s %(user_id)s %(message)s"


class UserIdFilter(logging.Filter):
    """Add the current user_id to log records."""

    def filter(self, record):
        if not hasattr(record, "user_id"):
            record.user_id = user_id_var.get() or "none"
        return True


@contextmanager
def user_context(user_id: str) -> Iterator[None]:
    """Bind user_id to log records emitted inside the block."""
    token = user_id_var.set(user_id)
    try:
        yield
    finally:
        user_id_var.reset(token)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Logger:
    """
    Configure the root logger with a single stdout handler.

    fmt is "json" (python-json-logger) or "text". Returns the root logger.
    """
    if fmt == "json":
        formatter: logging.Formatter = JsonFormatter(
            JSON_FIELDS,
            rename_fields={"levelname": "level", "name": "logger", "asctime": "timestamp"},
        )
    else:
        formatter = logging.Formatter(TEXT_FORMAT)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(UserIdFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    return root_logger
