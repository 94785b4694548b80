"""Zone factory — turns a confirmed swing pivot into a liquidity zone. Pure functions."""

import logging
from typing import Optional

from orderpool.config import Config
from orderpool.zones.models import BarData, LiquidityClass, Side, Zone, ZoneCreated, ZoneStyle

logger = logging.getLogger("orderpool.zones")

LOW_LIQUIDITY_LEVEL = 1.0

_TEXT_SIZES = {
    LiquidityClass.LOW: "small",
    LiquidityClass.MED: "normal",
    LiquidityClass.HIGH: "large",
}


def classify_liquidity(score: float, med_threshold: float, high_threshold: float) -> LiquidityClass:
    """Bucket *score*; a score equal to a threshold falls in the upper bucket."""
    if score >= high_threshold:
        return LiquidityClass.HIGH
    if score >= med_threshold:
        return LiquidityClass.MED
    return LiquidityClass.LOW


def liquidity_level(score: float, med_threshold: float, high_threshold: float) -> float:
    """Return the level a zone reports: the threshold it cleared, or 1.0."""
    if score >= high_threshold:
        return high_threshold
    if score >= med_threshold:
        return med_threshold
    return LOW_LIQUIDITY_LEVEL


def zone_style(score: float, liquidity_class: LiquidityClass) -> ZoneStyle:
    """Derive cosmetic attributes from the volume score.

    Opacity rises linearly from 0.1 at score 0 to 0.9 at score 10.
    """
    clipped = max(0.0, min(10.0, score))
    return ZoneStyle(
        opacity=round(0.1 + 0.08 * clipped, 4),
        text_size=_TEXT_SIZES[liquidity_class],
    )


def build_zone(side: Side, pivot: BarData, score: float, config: Config) -> Optional[ZoneCreated]:
    """Build a zone from a swing pivot bar, or return ``None`` to skip it.

    Resistance zones sit on top of the pivot high, support zones hang below
    the pivot low; both are half the pivot bar's range tall.

    Args:
        side: Which registry the zone is destined for.
        pivot: The swing bar itself (one bar before confirmation).
        score: The lagged normalised volume score.
        config: Thresholds and the low-liquidity display toggle.

    Returns:
        A ``ZoneCreated`` event carrying the new zone, or ``None`` when the
        score is below the medium threshold and low-liquidity zones are
        hidden, or when the pivot bar has no range.
    """
    if score < config.med_threshold and not config.show_low_liquidity_zones:
        return None

    half_range = (pivot.high - pivot.low) / 2
    if half_range <= 0:
        logger.debug("Skipping %s zone at bar %d: pivot has no range", side.value, pivot.index)
        return None

    if side is Side.RESISTANCE:
        top, bottom = pivot.high + half_range, pivot.high
    else:
        top, bottom = pivot.low, pivot.low - half_range

    cls = classify_liquidity(score, config.med_threshold, config.high_threshold)
    zone = Zone(
        side=side,
        top=top,
        bottom=bottom,
        created_index=pivot.index,
        liquidity_level=liquidity_level(score, config.med_threshold, config.high_threshold),
        liquidity_class=cls,
    )
    return ZoneCreated(zone=zone, score=score, style=zone_style(score, cls))
