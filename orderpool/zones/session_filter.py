"""Session filter — pure function, checks if a bar time falls in a trading window."""

from datetime import datetime

from orderpool.config import DEFAULT_SESSION_WINDOWS


def minute_of_day(time: datetime) -> int:
    """Return ``hour * 60 + minute`` for *time*."""
    return time.hour * 60 + time.minute


def is_in_session(
    time: datetime,
    filter_enabled: bool = True,
    windows: tuple[tuple[int, int], ...] = DEFAULT_SESSION_WINDOWS,
) -> bool:
    """Return True if alerts may fire at *time*.

    Always True when *filter_enabled* is False.  Otherwise True iff the
    bar's minute-of-day lies in one of *windows* (inclusive start,
    exclusive end).  The bar's own wall-clock time is used as-is.

    Args:
        time: Bar timestamp.
        filter_enabled: The "filter by trading hours" toggle.
        windows: ``(start, end)`` minute-of-day pairs.
    """
    if not filter_enabled:
        return True
    minute = minute_of_day(time)
    return any(start <= minute < end for start, end in windows)
