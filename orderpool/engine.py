"""OrderPool — liquidity zone engine (per-bar orchestration).

Wires volume scoring, swing detection, zone registries, the global cap,
the enter/leave state machines and the daily tracker into a single
``update(bar)`` call.  One engine instance serves one instrument/timeframe.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from orderpool.alerts.conditions import ALERT_CONDITIONS, evaluate_alerts, render_message
from orderpool.alerts.sinks import AlertSink
from orderpool.config import Config
from orderpool.indicators.swings import SwingDetector
from orderpool.indicators.volume import VolumeNormalizer
from orderpool.render import RenderSink
from orderpool.zones.capper import GlobalZoneCapper
from orderpool.zones.daily import DailyExtremeTracker
from orderpool.zones.factory import build_zone
from orderpool.zones.models import (
    BarData,
    DailyExtreme,
    DailyLevelEvent,
    Side,
    Zone,
    ZoneClosed,
    ZoneCreated,
    ZoneStateEvent,
)
from orderpool.zones.registry import ZoneRegistry
from orderpool.zones.session_filter import is_in_session
from orderpool.zones.state_machine import AlertGate, ZoneStateMachine

logger = logging.getLogger("orderpool")


@dataclass(frozen=True)
class BarResult:
    """Everything one bar produced."""

    bar_index: int
    zones_created: tuple[ZoneCreated, ...] = ()
    zones_closed: tuple[ZoneClosed, ...] = ()
    state_events: tuple[ZoneStateEvent, ...] = ()
    daily_events: tuple[DailyLevelEvent, ...] = ()
    alerts: tuple[str, ...] = ()
    price_in_zone: dict[Side, bool] = field(default_factory=dict)
    zone_level: dict[Side, float] = field(default_factory=dict)
    session_active: bool = True


class LiquidityEngine:
    """Streaming liquidity-zone engine.

    Args:
        config: Thresholds, toggles and cap.
        render: Optional renderer receiving zone and daily-level records.
        alerts: Optional sink receiving fired alerts.
        ticker: Symbol substituted into alert messages; defaults to
            ``config.ticker``.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        render: Optional[RenderSink] = None,
        alerts: Optional[AlertSink] = None,
        ticker: Optional[str] = None,
    ) -> None:
        self._config = config or Config()
        self._render = render
        self._alerts = alerts
        self._ticker = ticker or self._config.ticker

        gate = AlertGate(
            med_threshold=self._config.med_threshold,
            high_threshold=self._config.high_threshold,
            alert_on_medium=self._config.alert_on_medium,
            alert_on_high=self._config.alert_on_high,
        )
        self._volume = VolumeNormalizer()
        self._swings = SwingDetector()
        self._registries: dict[Side, ZoneRegistry] = {
            Side.RESISTANCE: ZoneRegistry(Side.RESISTANCE),
            Side.SUPPORT: ZoneRegistry(Side.SUPPORT),
        }
        self._machines: dict[Side, ZoneStateMachine] = {
            Side.RESISTANCE: ZoneStateMachine(Side.RESISTANCE, gate),
            Side.SUPPORT: ZoneStateMachine(Side.SUPPORT, gate),
        }
        self._capper = GlobalZoneCapper(self._config.max_zones)
        self._daily = DailyExtremeTracker()
        self._last_index: Optional[int] = None

    # ── Per-bar update ───────────────────────────────────────────────────

    def update(self, bar: BarData) -> BarResult:
        """Process one fully-formed bar.

        Raises ``ValueError`` if the bar index does not increase or the
        bar's high is below its low.  Collaborators are notified only after
        all engine state for the bar has been updated.
        """
        if self._last_index is not None and bar.index <= self._last_index:
            raise ValueError(
                f"Bar index must increase: got {bar.index} after {self._last_index}"
            )
        if bar.high < bar.low:
            raise ValueError(f"Bar {bar.index} has high {bar.high} below low {bar.low}")
        self._last_index = bar.index

        # 1. Volume score; zones consume the previous bar's value
        self._volume.update(bar.volume)
        score = self._volume.lagged_score

        # 2. Swing confirmation → zone creation
        swings = self._swings.update(bar)
        created: list[ZoneCreated] = []
        for side, pivot in (
            (Side.RESISTANCE, swings.swing_high),
            (Side.SUPPORT, swings.swing_low),
        ):
            if pivot is None:
                continue
            event = build_zone(side, pivot, score, self._config)
            if event is None:
                continue
            self._registries[side].add(event.zone)
            created.append(event)
            logger.debug(
                "Created %s zone [%.5f, %.5f] class=%s score=%.2f at bar %d",
                side.value, event.zone.bottom, event.zone.top,
                event.zone.liquidity_class.value, score, bar.index,
            )

        # 3. Breakage + containment per side
        closed: list[ZoneClosed] = []
        in_zone: dict[Side, bool] = {}
        levels: dict[Side, float] = {}
        for side, registry in self._registries.items():
            outcome = registry.update(bar)
            closed.extend(outcome.closed)
            in_zone[side] = outcome.price_in_zone
            levels[side] = outcome.zone_level

        # 4. Global cap, one eviction at most
        evicted = self._capper.enforce(self._registries.values(), bar.index)
        if evicted is not None:
            closed.append(evicted)

        # 5. Enter / leave transitions
        session_active = is_in_session(
            bar.time,
            self._config.filter_by_trading_hours,
            self._config.session_windows,
        )
        state_events: list[ZoneStateEvent] = []
        for side, machine in self._machines.items():
            event = machine.update(
                in_zone[side], levels[side], session_active, bar.index, bar.close,
            )
            if event is not None:
                state_events.append(event)

        fired = tuple(
            title for title, hit in evaluate_alerts(state_events).items() if hit
        )

        # 6. Daily extremes
        daily_events: list[DailyLevelEvent] = []
        if self._config.show_daily_levels:
            daily_events = self._daily.update(bar)

        result = BarResult(
            bar_index=bar.index,
            zones_created=tuple(created),
            zones_closed=tuple(closed),
            state_events=tuple(state_events),
            daily_events=tuple(daily_events),
            alerts=fired,
            price_in_zone=in_zone,
            zone_level=levels,
            session_active=session_active,
        )
        self._dispatch(result, bar)
        return result

    def _dispatch(self, result: BarResult, bar: BarData) -> None:
        """Hand one bar's records to the collaborators."""
        if self._render is not None:
            for created in result.zones_created:
                self._render.zone_created(created)
            for closed in result.zones_closed:
                self._render.zone_closed(closed)
            for daily in result.daily_events:
                self._render.daily_level(daily)

        for condition in ALERT_CONDITIONS:
            if condition.title not in result.alerts:
                continue
            message = render_message(condition.message, self._ticker, bar.close)
            logger.info("Bar %d: %s", bar.index, message)
            if self._alerts is not None:
                self._alerts.alert(condition.title, message)

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def config(self) -> Config:
        return self._config

    def zones(self, side: Optional[Side] = None) -> list[Zone]:
        """Active zones in creation order; both sides when *side* is None."""
        if side is not None:
            return list(self._registries[side].zones)
        merged = [z for r in self._registries.values() for z in r.zones]
        return sorted(merged, key=lambda z: z.created_index)

    @property
    def zone_count(self) -> int:
        """Combined active zone count across both sides."""
        return sum(len(r) for r in self._registries.values())

    @property
    def daily_extreme(self) -> Optional[DailyExtreme]:
        return self._daily.extreme

    @property
    def volume_score(self) -> float:
        """Normalised volume score as of the latest bar."""
        return self._volume.score

    def is_in_zone(self, side: Side) -> bool:
        return self._machines[side].is_in_zone
