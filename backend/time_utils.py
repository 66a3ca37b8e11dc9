"""
Time utilities for the Task Manager application.

This module provides a single source of truth for time operations,
so every timestamp written by the API comes from the same clock.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Get current UTC time.
    Single source of truth for "now" throughout the application.

    Returns:
        timezone-aware datetime in UTC
    """
    return datetime.now(timezone.utc)


def elapsed_seconds(started_at: datetime) -> float:
    """
    Seconds elapsed since ``started_at``.

    Args:
        started_at: A timezone-aware datetime previously taken from ``utc_now``

    Returns:
        Elapsed wall-clock seconds as a float
    """
    return (utc_now() - started_at).total_seconds()
