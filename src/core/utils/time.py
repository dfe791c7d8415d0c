from __future__ import annotations
from datetime import datetime, timezone


def now_utc() -> datetime:
    """Return timezone-aware UTC datetime.

    Preferred over deprecated/naive utcnow().
    """
    return datetime.now(timezone.utc)


def from_epoch(value: int | float | None) -> datetime:
    """Convert a webhook epoch timestamp to aware UTC; None means now.

    Values above 1e11 are treated as milliseconds.
    """
    if value is None:
        return now_utc()
    seconds = value / 1000 if value > 1e11 else value
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def format_utc(dt: datetime | None = None) -> str:
    """Human readable UTC time for notifications."""
    return (dt or now_utc()).astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
