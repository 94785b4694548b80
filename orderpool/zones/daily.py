"""Daily extreme tracking — running high/low of the current day.

A new day is detected by a change in the bar's day-of-week, so two
consecutive bars exactly one week apart count as the same day.
"""

from datetime import datetime
from typing import Optional

from orderpool.zones.models import BarData, DailyExtreme, DailyLevelEvent


def day_key(time: datetime) -> int:
    """Return the day-of-week (Monday = 0) used to detect day changes."""
    return time.weekday()


class DailyExtremeTracker:
    """Tracks the current day's high and low."""

    def __init__(self) -> None:
        self._extreme: Optional[DailyExtreme] = None

    # ── Mutation ─────────────────────────────────────────────────────────

    def update(self, bar: BarData) -> list[DailyLevelEvent]:
        """Fold *bar* into the daily extremes and return the resulting events.

        On a day change the extremes reset to the bar's own high/low.
        Otherwise a higher high and a lower low each produce an event.
        """
        key = day_key(bar.time)
        current = self._extreme

        if current is None or current.day_key != key:
            self._extreme = DailyExtreme(high=bar.high, low=bar.low, day_key=key)
            return [
                DailyLevelEvent("reset", bar.high, bar.low, bar.index, previous=current)
            ]

        events: list[DailyLevelEvent] = []
        high, low = current.high, current.low
        if bar.high > high:
            high = bar.high
            events.append(DailyLevelEvent("high_extended", high, low, bar.index))
        if bar.low < low:
            low = bar.low
            events.append(DailyLevelEvent("low_extended", high, low, bar.index))
        if events:
            self._extreme = DailyExtreme(high=high, low=low, day_key=key)
        return events

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def extreme(self) -> Optional[DailyExtreme]:
        """Current extremes, or ``None`` before the first bar."""
        return self._extreme
