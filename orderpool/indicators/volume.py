"""Volume normalisation — maps raw bar volume onto a bounded 0–10 score.

The score compares a smoothed volume against the 99th percentile of its
own recent history:

    vol       = SMA(volume, 10) / 10
    reference = P99(last 1000 vol samples)      (nearest-rank)
    score     = min(vol / reference × 5, 10)

Zone creation on bar *i* consumes the score computed through bar *i − 1*;
``lagged_score`` is that delayed read.
"""

from collections import deque
from typing import Optional

import numpy as np


SMA_PERIOD = 10
HISTORY_SIZE = 1000
PERCENTILE = 99
SCORE_SCALE = 5.0
SCORE_CAP = 10.0


def nearest_rank_percentile(samples, pct: int = PERCENTILE) -> float:
    """Return the nearest-rank *pct*-th percentile of *samples*.

    Rank is ``ceil(pct / 100 × n)`` (1-based) on the ascending order.
    Returns ``0.0`` for an empty input.
    """
    arr = np.asarray(samples, dtype=float)
    n = arr.size
    if n == 0:
        return 0.0
    # Integer ceil keeps the rank exact for every window size.
    rank = max(1, (pct * n + 99) // 100)
    return float(np.partition(arr, rank - 1)[rank - 1])


class VolumeNormalizer:
    """Rolling volume-strength scorer.

    Args:
        sma_period: Bars averaged into each ``vol`` sample.
        history_size: Number of ``vol`` samples the percentile looks back over.
    """

    def __init__(
        self,
        sma_period: int = SMA_PERIOD,
        history_size: int = HISTORY_SIZE,
    ) -> None:
        self._sma_period = sma_period
        self._volumes: deque[float] = deque(maxlen=sma_period)
        self._samples: deque[float] = deque(maxlen=history_size)
        self._current: float = 0.0
        self._previous: float = 0.0

    # ── Mutation ─────────────────────────────────────────────────────────

    def update(self, volume: float) -> float:
        """Feed one bar's volume and return the score as of this bar."""
        self._previous = self._current
        self._volumes.append(float(volume))

        # SMA is undefined until the first full period.
        if len(self._volumes) < self._sma_period:
            self._current = 0.0
            return self._current

        vol = sum(self._volumes) / self._sma_period / 10.0
        self._samples.append(vol)
        reference = nearest_rank_percentile(self._samples)
        if reference <= 0.0:
            self._current = 0.0
        else:
            self._current = min(vol / reference * SCORE_SCALE, SCORE_CAP)
        return self._current

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def score(self) -> float:
        """Score computed from data through the latest bar."""
        return self._current

    @property
    def lagged_score(self) -> float:
        """Score computed from data through the bar before the latest one."""
        return self._previous

    @property
    def reference(self) -> Optional[float]:
        """Current P99 reference, or ``None`` before the first sample."""
        if not self._samples:
            return None
        return nearest_rank_percentile(self._samples)

    @property
    def sample_count(self) -> int:
        return len(self._samples)
