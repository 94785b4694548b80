"""Global zone cap — bounds the combined zone count across both registries.

At most one zone is evicted per bar, so a registry set that is several
zones over the cap drains back towards it one bar at a time.
"""

from typing import Iterable, Optional

from orderpool.zones.models import ZoneClosed
from orderpool.zones.registry import ZoneRegistry


class GlobalZoneCapper:
    """Evicts the oldest active zone when the combined count exceeds *max_zones*.

    Args:
        max_zones: Combined zone limit across every registry.
    """

    def __init__(self, max_zones: int) -> None:
        if max_zones < 1:
            raise ValueError(f"max_zones must be at least 1, got {max_zones}")
        self._max_zones = max_zones

    @property
    def max_zones(self) -> int:
        return self._max_zones

    def enforce(self, registries: Iterable[ZoneRegistry], bar_index: int) -> Optional[ZoneClosed]:
        """Evict at most one zone; return its close event or ``None``.

        Ties on ``created_index`` go to the registry listed first.
        """
        registries = list(registries)
        if sum(len(r) for r in registries) <= self._max_zones:
            return None

        target: Optional[ZoneRegistry] = None
        for registry in registries:
            oldest = registry.oldest
            if oldest is None:
                continue
            if target is None or oldest.created_index < target.oldest.created_index:
                target = registry

        return target.evict_oldest(bar_index)
