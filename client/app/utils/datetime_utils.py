"""
Date and time utilities for the client shell.

The shell uses timezone-aware UTC datetimes internally; view keys are
derived from epoch milliseconds.
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        datetime: Current datetime in UTC with tzinfo set to timezone.utc
    """
    return datetime.now(timezone.utc)


def epoch_millis() -> int:
    """Current UTC time as integer milliseconds since the epoch."""
    return int(utcnow().timestamp() * 1000)

