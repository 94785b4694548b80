"""End-to-end tests for the liquidity engine.

The scenario fixture builds a long, quiet history so the volume percentile
has more than 100 samples, then prints one high-volume pivot bar.
"""

import random
from datetime import datetime, timedelta

import pytest

from orderpool.alerts.sinks import LoggingAlertSink
from orderpool.config import Config
from orderpool.engine import LiquidityEngine
from orderpool.render import ZoneBoard
from orderpool.replay import run_replay
from orderpool.zones.models import BarData, LiquidityClass, Side


_T0 = datetime(2025, 3, 3, 0, 0)  # Monday


def _make_bar(i: int, o: float, h: float, l: float, c: float, vol: float = 1000) -> BarData:
    return BarData(
        index=i, time=_T0 + timedelta(minutes=5 * i),
        open=o, high=h, low=l, close=c, volume=vol,
    )


PIVOT = 130


def _scenario_bars() -> list[BarData]:
    """Quiet history, a 6000-volume pivot (H=100, L=95), then confirm/enter/break.

    Highs are flat and lows drift up so the history forms no swings.
    The pivot's score is (9×1000 + 6000) / 100 = 150 against a P99 of 100,
    i.e. 7.5.
    """
    bars = [
        _make_bar(i, 88, 90, 80 + i * 0.01, 88)
        for i in range(PIVOT)
    ]
    bars.append(_make_bar(PIVOT, 96, 100, 95, 97, vol=6000))
    bars.append(_make_bar(PIVOT + 1, 97, 98, 94, 96))        # confirms swing high
    bars.append(_make_bar(PIVOT + 2, 96, 101.5, 99, 101))    # closes inside zone
    bars.append(_make_bar(PIVOT + 3, 101, 103.5, 100.5, 103))  # breaks top
    return bars


_SCENARIO_CFG = Config(med_threshold=5.0, high_threshold=7.0, alert_on_high=True)


def _random_bars(n: int = 600, seed: int = 7) -> list[BarData]:
    rng = random.Random(seed)
    bars = []
    price = 100.0
    for i in range(n):
        o = price
        c = o + rng.uniform(-1.5, 1.5)
        h = max(o, c) + rng.uniform(0, 1.0)
        l = min(o, c) - rng.uniform(0, 1.0)
        vol = rng.choice([rng.randint(200, 2000), rng.randint(5000, 20000)])
        bars.append(
            BarData(index=i, time=_T0 + timedelta(minutes=30 * i),
                    open=o, high=h, low=l, close=c, volume=vol)
        )
        price = c
    return bars


class TestScenario:
    def test_zone_created_on_confirmation(self):
        engine = LiquidityEngine(_SCENARIO_CFG)
        bars = _scenario_bars()
        for bar in bars[: PIVOT + 1]:
            assert engine.update(bar).zones_created == ()

        result = engine.update(bars[PIVOT + 1])

        assert len(result.zones_created) == 1
        created = result.zones_created[0]
        zone = created.zone
        assert created.score == pytest.approx(7.5)
        assert zone.side is Side.RESISTANCE
        assert zone.top == pytest.approx(102.5)
        assert zone.bottom == pytest.approx(100)
        assert zone.liquidity_class is LiquidityClass.HIGH
        assert zone.liquidity_level == 7.0
        assert zone.created_index == PIVOT
        assert result.price_in_zone[Side.RESISTANCE] is False
        assert engine.zones(Side.RESISTANCE) == [zone]

    def test_enter_then_break_and_leave(self):
        sink = LoggingAlertSink()
        engine = LiquidityEngine(_SCENARIO_CFG, alerts=sink, ticker="ES")
        results = [engine.update(b) for b in _scenario_bars()]

        enter_bar = results[PIVOT + 2]
        assert enter_bar.price_in_zone[Side.RESISTANCE] is True
        assert enter_bar.zone_level[Side.RESISTANCE] == 7.0
        assert [e.kind for e in enter_bar.state_events] == ["enter"]
        assert enter_bar.alerts == ("Price Entered Order Pool",)

        break_bar = results[PIVOT + 3]
        assert [c.reason for c in break_bar.zones_closed] == ["broken"]
        assert break_bar.price_in_zone[Side.RESISTANCE] is False
        assert engine.zones(Side.RESISTANCE) == []
        leave = break_bar.state_events[0]
        assert leave.kind == "leave"
        assert leave.level == 7.0
        assert break_bar.alerts == (
            "Price Left Resistance Zone",
            "Price Left Order Pool",
        )

        assert [title for title, _ in sink.history] == [
            "Price Entered Order Pool",
            "Price Left Resistance Zone",
            "Price Left Order Pool",
        ]
        assert sink.history[0][1] == "ES: price entered an order pool at 101"

    def test_no_alerts_when_high_alerts_disabled(self):
        cfg = Config(med_threshold=5.0, high_threshold=7.0, alert_on_high=False)
        engine = LiquidityEngine(cfg)
        results = [engine.update(b) for b in _scenario_bars()]

        assert results[PIVOT + 2].price_in_zone[Side.RESISTANCE] is True
        assert all(r.alerts == () for r in results)

    def test_session_filter_blocks_alerts(self):
        cfg = Config(filter_by_trading_hours=True)
        engine = LiquidityEngine(cfg)
        results = [engine.update(b) for b in _scenario_bars()]
        # Scenario runs from midnight to ~11:00, outside both windows.
        assert all(not r.session_active for r in results)
        assert all(r.state_events == () for r in results)

    def test_render_sink_receives_records(self):
        board = ZoneBoard(_SCENARIO_CFG)
        engine = LiquidityEngine(_SCENARIO_CFG, render=board)
        bars = _scenario_bars()
        for bar in bars[: PIVOT + 3]:
            engine.update(bar)

        assert len(board.zones) == 1
        assert board.zones[0].top == pytest.approx(102.5)
        assert board.daily_lines["high"].price == 101.5

        engine.update(bars[PIVOT + 3])
        assert board.zones == []
        assert board.closed[0].end_index == PIVOT + 3

    def test_daily_levels_can_be_disabled(self):
        cfg = Config(show_daily_levels=False)
        engine = LiquidityEngine(cfg)
        results = [engine.update(b) for b in _scenario_bars()]
        assert all(r.daily_events == () for r in results)
        assert engine.daily_extreme is None


class TestEngineGuards:
    def test_rejects_non_increasing_index(self):
        engine = LiquidityEngine()
        engine.update(_make_bar(5, 1, 2, 0.5, 1))
        with pytest.raises(ValueError, match="must increase"):
            engine.update(_make_bar(5, 1, 2, 0.5, 1))

    def test_rejects_inverted_bar(self):
        engine = LiquidityEngine()
        with pytest.raises(ValueError, match="below low"):
            engine.update(_make_bar(0, 1, 0.5, 2, 1))


class TestProperties:
    def test_replay_is_deterministic(self):
        cfg = Config(show_low_liquidity_zones=True, max_zones=5)
        bars = _random_bars()
        assert run_replay(bars, cfg) == run_replay(bars, cfg)

    def test_broken_zones_never_survive(self):
        engine = LiquidityEngine(Config(show_low_liquidity_zones=True))
        for bar in _random_bars():
            engine.update(bar)
            for zone in engine.zones(Side.RESISTANCE):
                assert not bar.high > zone.top
            for zone in engine.zones(Side.SUPPORT):
                assert not bar.low < zone.bottom

    def test_at_most_one_eviction_per_bar(self):
        engine = LiquidityEngine(Config(show_low_liquidity_zones=True, max_zones=1))
        evictions = 0
        previous = 0
        for bar in _random_bars(1200, seed=11):
            result = engine.update(bar)
            evicted = [c for c in result.zones_closed if c.reason == "evicted"]
            assert len(evicted) <= 1
            evictions += len(evicted)
            created = len(result.zones_created)
            assert engine.zone_count <= previous + created
            previous = engine.zone_count
        assert evictions > 0

    def test_zones_listed_oldest_first(self):
        engine = LiquidityEngine(Config(show_low_liquidity_zones=True))
        for bar in _random_bars():
            engine.update(bar)
        indices = [z.created_index for z in engine.zones()]
        assert indices == sorted(indices)
        assert all(z.top > z.bottom and z.active for z in engine.zones())
