# src/campus_share/db/time.py
"""Time utilities for database models and signed links."""

import time
from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def epoch_millis() -> int:
    """Return the current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def from_epoch_millis(value: int) -> datetime:
    """Convert epoch milliseconds into an aware UTC datetime."""
    return datetime.fromtimestamp(value / 1000, tz=UTC)
