"""Zone state machine — inside/outside tracking with gated enter/leave events."""

from dataclasses import dataclass
from typing import Optional

from orderpool.zones.models import Side, ZoneStateEvent


@dataclass(frozen=True)
class AlertGate:
    """Decides whether a zone level is strong enough to alert on."""

    med_threshold: float
    high_threshold: float
    alert_on_medium: bool
    alert_on_high: bool

    def allows(self, level: float) -> bool:
        if level >= self.high_threshold:
            return self.alert_on_high
        if self.med_threshold <= level < self.high_threshold:
            return self.alert_on_medium
        return False


class ZoneStateMachine:
    """Tracks whether price is inside any zone of one side.

    ``stored_level`` is the zone level seen on the most recent in-zone bar;
    a leave event reports that value, not the maximum over the visit.

    Args:
        side: The side this machine follows.
        gate: Strength gate applied to every emitted event.
    """

    def __init__(self, side: Side, gate: AlertGate) -> None:
        self._side = side
        self._gate = gate
        self._was_in_zone: bool = False
        self._is_in_zone: bool = False
        self._stored_level: float = 0.0

    def update(
        self,
        price_in_zone: bool,
        zone_level: float,
        session_active: bool,
        bar_index: int,
        close: float,
    ) -> Optional[ZoneStateEvent]:
        """Advance one bar and return the event it produced, if any."""
        self._is_in_zone = price_in_zone
        event: Optional[ZoneStateEvent] = None

        if price_in_zone:
            kind = "active" if self._was_in_zone else "enter"
            self._stored_level = zone_level
            if session_active and self._gate.allows(zone_level):
                event = ZoneStateEvent(kind, self._side, zone_level, bar_index, close)
        elif self._was_in_zone:
            if session_active and self._gate.allows(self._stored_level):
                event = ZoneStateEvent("leave", self._side, self._stored_level, bar_index, close)

        self._was_in_zone = price_in_zone
        return event

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def side(self) -> Side:
        return self._side

    @property
    def is_in_zone(self) -> bool:
        return self._is_in_zone

    @property
    def stored_level(self) -> float:
        return self._stored_level
