"""Zone data models — typed value records passed between engine components."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class Side(str, Enum):
    """Which side of price a zone sits on."""

    RESISTANCE = "resistance"
    SUPPORT = "support"


class LiquidityClass(str, Enum):
    """Strength bucket of a zone's normalised volume score."""

    LOW = "low"
    MED = "med"
    HIGH = "high"


@dataclass(frozen=True)
class BarData:
    """A single OHLCV bar as fed to the engine."""

    index: int
    time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True)
class Zone:
    """A liquidity zone.  Geometry is fixed at creation."""

    side: Side
    top: float
    bottom: float
    created_index: int
    liquidity_level: float
    liquidity_class: LiquidityClass
    active: bool = True

    def contains(self, price: float) -> bool:
        """Return True if *price* lies within ``[bottom, top]``."""
        return self.bottom <= price <= self.top

    def is_broken_by(self, bar: BarData) -> bool:
        """Return True if *bar* trades through the zone's far boundary."""
        if self.side is Side.RESISTANCE:
            return bar.high > self.top
        return bar.low < self.bottom


@dataclass(frozen=True)
class ZoneStyle:
    """Cosmetic attributes handed to the renderer; never read by the engine."""

    opacity: float  # 0.0 (transparent) .. 1.0 (solid)
    text_size: str  # "small", "normal" or "large"


# ── Events ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ZoneCreated:
    """A new zone entered its side's registry."""

    zone: Zone
    score: float
    style: ZoneStyle


@dataclass(frozen=True)
class ZoneClosed:
    """A zone left its registry, either broken or evicted by the cap."""

    zone: Zone  # carries ``active=False``
    end_index: int
    reason: str  # "broken" or "evicted"


@dataclass(frozen=True)
class ZoneStateEvent:
    """An enter / active / leave transition for one side."""

    kind: str  # "enter", "active" or "leave"
    side: Side
    level: float
    bar_index: int
    close: float


@dataclass(frozen=True)
class DailyExtreme:
    """The running high/low of the current day."""

    high: float
    low: float
    day_key: int


@dataclass(frozen=True)
class DailyLevelEvent:
    """A change to the daily extremes.

    ``kind`` is ``"reset"``, ``"high_extended"`` or ``"low_extended"``.
    ``high`` and ``low`` always hold the extremes after the change.
    """

    kind: str
    high: float
    low: float
    bar_index: int
    previous: Optional[DailyExtreme] = None
