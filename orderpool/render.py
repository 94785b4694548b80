"""Rendering interface and an in-memory reference board.

The engine never holds drawing handles.  It emits passive value records to
a ``RenderSink``; ``ZoneBoard`` keeps the picture those records describe.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from orderpool.config import Config
from orderpool.zones.models import (
    DailyLevelEvent,
    LiquidityClass,
    Side,
    Zone,
    ZoneClosed,
    ZoneCreated,
    ZoneStyle,
)


@runtime_checkable
class RenderSink(Protocol):
    """Interface for whatever draws zones and daily levels."""

    def zone_created(self, event: ZoneCreated) -> None:
        ...

    def zone_closed(self, event: ZoneClosed) -> None:
        ...

    def daily_level(self, event: DailyLevelEvent) -> None:
        ...


@dataclass
class ZoneRecord:
    """One drawn zone.  ``end_index`` is ``None`` while the zone is live."""

    side: Side
    top: float
    bottom: float
    created_index: int
    liquidity_class: LiquidityClass
    style: ZoneStyle
    end_index: Optional[int] = None


@dataclass
class DailyLine:
    """One drawn daily high or low line."""

    price: float
    start_index: int
    color: str
    width: int
    style: str


class ZoneBoard:
    """In-memory renderer holding the current zone boxes and daily lines.

    Args:
        config: Supplies the daily-line styling, passed through untouched.
    """

    def __init__(self, config: Config | None = None) -> None:
        config = config or Config()
        self._line_color = config.daily_line_color
        self._line_width = config.daily_line_width
        self._line_style = config.daily_line_style
        self._live: list[tuple[Zone, ZoneRecord]] = []
        self.closed: list[ZoneRecord] = []
        self.daily_lines: dict[str, DailyLine] = {}

    # ── RenderSink ───────────────────────────────────────────────────────

    def zone_created(self, event: ZoneCreated) -> None:
        zone = event.zone
        record = ZoneRecord(
            side=zone.side,
            top=zone.top,
            bottom=zone.bottom,
            created_index=zone.created_index,
            liquidity_class=zone.liquidity_class,
            style=event.style,
        )
        self._live.append((zone, record))

    def zone_closed(self, event: ZoneClosed) -> None:
        live_zone = dataclasses.replace(event.zone, active=True)
        for pos, (zone, record) in enumerate(self._live):
            if zone == live_zone:
                record.end_index = event.end_index
                self.closed.append(record)
                del self._live[pos]
                return

    def daily_level(self, event: DailyLevelEvent) -> None:
        if event.kind == "reset":
            # Nothing to delete on the very first bar.
            self.daily_lines.pop("high", None)
            self.daily_lines.pop("low", None)
            self.daily_lines["high"] = self._line(event.high, event.bar_index)
            self.daily_lines["low"] = self._line(event.low, event.bar_index)
        elif event.kind == "high_extended":
            self._move("high", event.high, event.bar_index)
        elif event.kind == "low_extended":
            self._move("low", event.low, event.bar_index)

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def zones(self) -> list[ZoneRecord]:
        """Live zone records in creation order."""
        return [record for _, record in self._live]

    # ── Helpers ──────────────────────────────────────────────────────────

    def _line(self, price: float, start_index: int) -> DailyLine:
        return DailyLine(
            price=price,
            start_index=start_index,
            color=self._line_color,
            width=self._line_width,
            style=self._line_style,
        )

    def _move(self, name: str, price: float, bar_index: int) -> None:
        line = self.daily_lines.get(name)
        if line is None:
            self.daily_lines[name] = self._line(price, bar_index)
        else:
            line.price = price
