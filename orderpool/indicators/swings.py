"""Swing pivot detection — confirms a local high/low one bar after it prints."""

from collections import deque
from dataclasses import dataclass
from typing import Optional

from orderpool.zones.models import BarData


SWING_WINDOW = 15


@dataclass(frozen=True)
class SwingResult:
    """Pivots confirmed on the latest bar (the pivot bar is the one before)."""

    swing_high: Optional[BarData] = None
    swing_low: Optional[BarData] = None


class SwingDetector:
    """Streaming swing-high / swing-low detector.

    A swing high is confirmed on bar *i* when bar *i − 1* was the highest
    high of its own trailing *window* bars and bar *i*'s high sits below the
    trailing maximum as of bar *i*.  Lows mirror this.  Nothing is reported
    until the trailing window is full.

    Args:
        window: Trailing window length, inclusive of the current bar.
    """

    def __init__(self, window: int = SWING_WINDOW) -> None:
        self._window = window
        self._bars: deque[BarData] = deque(maxlen=window)
        self._prev_bar: Optional[BarData] = None
        self._prev_max: Optional[float] = None
        self._prev_min: Optional[float] = None

    def update(self, bar: BarData) -> SwingResult:
        """Push *bar* and return any swing confirmed on it."""
        self._bars.append(bar)

        rolling_max: Optional[float] = None
        rolling_min: Optional[float] = None
        if len(self._bars) == self._window:
            rolling_max = max(b.high for b in self._bars)
            rolling_min = min(b.low for b in self._bars)

        swing_high = None
        swing_low = None
        prev = self._prev_bar
        if prev is not None and rolling_max is not None and self._prev_max is not None:
            if self._prev_max == prev.high and bar.high < rolling_max:
                swing_high = prev
        if prev is not None and rolling_min is not None and self._prev_min is not None:
            if self._prev_min == prev.low and bar.low > rolling_min:
                swing_low = prev

        self._prev_bar = bar
        self._prev_max = rolling_max
        self._prev_min = rolling_min
        return SwingResult(swing_high=swing_high, swing_low=swing_low)
