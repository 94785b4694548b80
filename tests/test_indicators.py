"""Deterministic tests for volume normalisation and swing detection."""

from datetime import datetime, timedelta

import pytest

from orderpool.indicators.swings import SwingDetector
from orderpool.indicators.volume import VolumeNormalizer, nearest_rank_percentile
from orderpool.zones.models import BarData


_T0 = datetime(2025, 3, 3, 14, 0)


def _make_bar(i: int, h: float, l: float, c: float | None = None, vol: float = 1000) -> BarData:
    close = c if c is not None else (h + l) / 2
    return BarData(
        index=i, time=_T0 + timedelta(minutes=5 * i),
        open=close, high=h, low=l, close=close, volume=vol,
    )


# ── Percentile ───────────────────────────────────────────────────────────


class TestNearestRankPercentile:
    def test_empty_window_is_zero(self):
        assert nearest_rank_percentile([]) == 0.0

    def test_single_sample(self):
        assert nearest_rank_percentile([42.0]) == 42.0

    def test_hundred_samples_takes_rank_99(self):
        assert nearest_rank_percentile(list(range(1, 101))) == 99.0

    def test_two_hundred_samples_takes_rank_198(self):
        values = list(range(200, 0, -1))  # order must not matter
        assert nearest_rank_percentile(values) == 198.0

    def test_small_window_is_the_maximum(self):
        assert nearest_rank_percentile([3.0, 9.0, 1.0]) == 9.0


# ── Volume normaliser ────────────────────────────────────────────────────


class TestVolumeNormalizer:
    def test_zero_until_sma_period_is_full(self):
        norm = VolumeNormalizer()
        for _ in range(9):
            assert norm.update(1000) == 0.0
        assert norm.sample_count == 0
        assert norm.reference is None

    def test_constant_volume_scores_five(self):
        norm = VolumeNormalizer()
        for _ in range(30):
            norm.update(1000)
        assert norm.score == pytest.approx(5.0)
        assert norm.reference == pytest.approx(100.0)

    def test_zero_volume_scores_zero(self):
        norm = VolumeNormalizer()
        for _ in range(20):
            norm.update(0)
        assert norm.score == 0.0

    def test_spike_is_capped_at_ten(self):
        """Beyond 100 samples P99 is no longer the maximum, so a spike can exceed 5."""
        norm = VolumeNormalizer()
        for _ in range(110):
            norm.update(1000)
        score = norm.update(100_000)
        assert score == 10.0

    def test_spike_exact_score(self):
        """(9×1000 + 6000) / 100 = 150 against a reference of 100 → 7.5."""
        norm = VolumeNormalizer()
        for _ in range(120):
            norm.update(1000)
        assert norm.update(6000) == pytest.approx(7.5)

    def test_lagged_score_is_previous_bar(self):
        norm = VolumeNormalizer()
        for _ in range(120):
            norm.update(1000)
        norm.update(6000)
        norm.update(1000)
        assert norm.lagged_score == pytest.approx(7.5)
        assert norm.score != pytest.approx(7.5)

    def test_history_is_bounded(self):
        norm = VolumeNormalizer(history_size=50)
        for _ in range(200):
            norm.update(1000)
        assert norm.sample_count == 50


# ── Swing detector ───────────────────────────────────────────────────────


def _rising_then_peak() -> list[BarData]:
    """15 bars of rising highs, a peak bar, then a pull-back bar."""
    bars = [_make_bar(i, 100 + i, 90 + i) for i in range(15)]
    bars.append(_make_bar(15, 120, 110))
    bars.append(_make_bar(16, 118, 109))
    return bars


def _falling_then_trough() -> list[BarData]:
    bars = [_make_bar(i, 100 - i, 90 - i) for i in range(15)]
    bars.append(_make_bar(15, 80, 70))
    bars.append(_make_bar(16, 82, 71))
    return bars


class TestSwingDetector:
    def test_swing_high_confirmed_one_bar_later(self):
        det = SwingDetector()
        results = [det.update(b) for b in _rising_then_peak()]

        assert all(r.swing_high is None for r in results[:16])
        assert results[16].swing_high is not None
        assert results[16].swing_high.index == 15
        assert results[16].swing_high.high == 120

    def test_swing_low_confirmed_one_bar_later(self):
        det = SwingDetector()
        results = [det.update(b) for b in _falling_then_trough()]

        assert all(r.swing_low is None for r in results[:16])
        assert results[16].swing_low is not None
        assert results[16].swing_low.index == 15
        assert all(r.swing_high is None for r in results)

    def test_no_swing_before_window_is_full(self):
        det = SwingDetector()
        bars = [_make_bar(0, 100, 90), _make_bar(1, 110, 100), _make_bar(2, 105, 95)]
        results = [det.update(b) for b in bars]
        assert all(r.swing_high is None and r.swing_low is None for r in results)

    def test_new_high_does_not_confirm(self):
        """A bar that keeps climbing past the previous peak confirms nothing."""
        det = SwingDetector()
        bars = [_make_bar(i, 100 + i, 90 + i) for i in range(20)]
        results = [det.update(b) for b in bars]
        assert all(r.swing_high is None for r in results)

    def test_flat_highs_do_not_confirm(self):
        det = SwingDetector()
        bars = [_make_bar(i, 100, 90 + i * 0.1) for i in range(30)]
        results = [det.update(b) for b in bars]
        assert all(r.swing_high is None for r in results)
