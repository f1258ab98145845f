"""UTC time source for timestamp columns."""

from __future__ import annotations

from datetime import datetime, timezone

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def utc_datetime() -> str:
    """Return the current UTC instant formatted for a DATETIME column."""
    return datetime.now(timezone.utc).strftime(DATETIME_FORMAT)
