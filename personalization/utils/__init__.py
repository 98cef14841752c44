"""Shared utilities for timestamps and elapsed time."""

from .time import WEEK, ensure_utc, utc_now, weeks_between

__all__ = [
    "WEEK",
    "ensure_utc",
    "utc_now",
    "weeks_between",
]
