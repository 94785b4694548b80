"""Zone registry — the ordered set of active zones on one side of price."""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Optional

from orderpool.zones.models import BarData, Side, Zone, ZoneClosed

logger = logging.getLogger("orderpool.zones")


@dataclass(frozen=True)
class RegistryUpdate:
    """Result of one ``ZoneRegistry.update`` call."""

    price_in_zone: bool
    zone_level: float
    closed: tuple[ZoneClosed, ...] = ()


class ZoneRegistry:
    """Owns the active zones of one side, oldest first.

    Zones are only ever appended, dropped when broken, or evicted by the
    global cap.  A removed zone is never kept around as a dead record.

    Args:
        side: The side every zone in this registry belongs to.
    """

    def __init__(self, side: Side) -> None:
        self._side = side
        self._zones: list[Zone] = []
        self._last_index: Optional[int] = None

    # ── Mutation ─────────────────────────────────────────────────────────

    def add(self, zone: Zone) -> None:
        """Append a freshly created zone."""
        if zone.side is not self._side:
            raise ValueError(
                f"{zone.side.value} zone cannot join the {self._side.value} registry"
            )
        self._zones.append(zone)

    def update(self, bar: BarData) -> RegistryUpdate:
        """Run breakage and containment checks for *bar*.

        1. Zones whose far boundary *bar* trades through are marked broken.
        2. Every unbroken zone containing ``bar.close`` counts as in-zone;
           the strongest overlapping zone sets the level.
        3. Broken zones are dropped in a single stable pass.
        """
        self._last_index = bar.index

        broken: set[int] = set()
        price_in_zone = False
        zone_level = 0.0
        for pos, zone in enumerate(self._zones):
            if zone.is_broken_by(bar):
                broken.add(pos)
                continue
            if zone.contains(bar.close):
                price_in_zone = True
                zone_level = max(zone_level, zone.liquidity_level)

        closed: list[ZoneClosed] = []
        if broken:
            kept: list[Zone] = []
            for pos, zone in enumerate(self._zones):
                if pos in broken:
                    closed.append(self._close(zone, bar.index, "broken"))
                else:
                    kept.append(zone)
            self._zones = kept

        return RegistryUpdate(
            price_in_zone=price_in_zone,
            zone_level=zone_level,
            closed=tuple(closed),
        )

    def evict_oldest(self, end_index: int) -> Optional[ZoneClosed]:
        """Remove the oldest zone; ``None`` if the registry is empty."""
        if not self._zones:
            return None
        zone = self._zones[0]
        self._zones = self._zones[1:]
        return self._close(zone, end_index, "evicted")

    def _close(self, zone: Zone, end_index: int, reason: str) -> ZoneClosed:
        logger.debug(
            "%s zone [%.5f, %.5f] from bar %d %s at bar %d",
            zone.side.value, zone.bottom, zone.top, zone.created_index, reason, end_index,
        )
        return ZoneClosed(
            zone=dataclasses.replace(zone, active=False),
            end_index=end_index,
            reason=reason,
        )

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def side(self) -> Side:
        return self._side

    @property
    def zones(self) -> tuple[Zone, ...]:
        """Active zones in creation order."""
        return tuple(self._zones)

    @property
    def oldest(self) -> Optional[Zone]:
        """The earliest-created active zone, if any."""
        return self._zones[0] if self._zones else None

    @property
    def extent_index(self) -> Optional[int]:
        """Bar index every active zone currently extends to."""
        return self._last_index

    def __len__(self) -> int:
        return len(self._zones)
