"""Timestamp formatting utilities."""

from datetime import datetime


def now() -> str:
    """Return the current local time formatted for directory names (YYYYMMDD_HHMMSS)."""
    return datetime.now().strftime("%Y%m%d_%H%M%S")

