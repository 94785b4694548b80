"""Alert conditions — the four named per-bar booleans exposed to alert routing.

Titles are matched by name downstream and must not change.
"""

from dataclasses import dataclass
from typing import Iterable

from orderpool.zones.models import Side, ZoneStateEvent


@dataclass(frozen=True)
class AlertCondition:
    """A named alert with a message template.

    Templates may contain ``{{ticker}}`` and ``{{close}}`` placeholders.
    """

    title: str
    message: str


PRICE_ENTERED_ORDER_POOL = AlertCondition(
    title="Price Entered Order Pool",
    message="{{ticker}}: price entered an order pool at {{close}}",
)
PRICE_LEFT_RESISTANCE_ZONE = AlertCondition(
    title="Price Left Resistance Zone",
    message="{{ticker}}: price left a resistance zone at {{close}}",
)
PRICE_LEFT_SUPPORT_ZONE = AlertCondition(
    title="Price Left Support Zone",
    message="{{ticker}}: price left a support zone at {{close}}",
)
PRICE_LEFT_ORDER_POOL = AlertCondition(
    title="Price Left Order Pool",
    message="{{ticker}}: price left an order pool at {{close}}",
)

ALERT_CONDITIONS: tuple[AlertCondition, ...] = (
    PRICE_ENTERED_ORDER_POOL,
    PRICE_LEFT_RESISTANCE_ZONE,
    PRICE_LEFT_SUPPORT_ZONE,
    PRICE_LEFT_ORDER_POOL,
)


def render_message(template: str, ticker: str, close: float) -> str:
    """Substitute ``{{ticker}}`` and ``{{close}}`` in *template*."""
    return template.replace("{{ticker}}", ticker).replace("{{close}}", f"{close:g}")


def evaluate_alerts(events: Iterable[ZoneStateEvent]) -> dict[str, bool]:
    """Evaluate every alert condition against one bar's state events.

    Returns a dict keyed by title, in ``ALERT_CONDITIONS`` order.
    """
    entered = left_resistance = left_support = False
    for event in events:
        if event.kind == "enter":
            entered = True
        elif event.kind == "leave":
            if event.side is Side.RESISTANCE:
                left_resistance = True
            else:
                left_support = True

    return {
        PRICE_ENTERED_ORDER_POOL.title: entered,
        PRICE_LEFT_RESISTANCE_ZONE.title: left_resistance,
        PRICE_LEFT_SUPPORT_ZONE.title: left_support,
        PRICE_LEFT_ORDER_POOL.title: left_resistance or left_support,
    }
