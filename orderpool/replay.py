"""Replay — runs a recorded bar series through a fresh engine.

Loads OHLCV bars from CSV, feeds them chronologically, and collects every
emitted record into plain dicts suitable for JSON output.
"""

import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from orderpool.alerts.sinks import LoggingAlertSink
from orderpool.config import Config
from orderpool.engine import LiquidityEngine
from orderpool.render import ZoneBoard
from orderpool.zones.models import BarData, Zone

logger = logging.getLogger("orderpool.replay")

REQUIRED_COLUMNS = ("time", "open", "high", "low", "close")


def bars_from_frame(df: pd.DataFrame, tz: Optional[str] = None) -> list[BarData]:
    """Convert an OHLCV DataFrame into ``BarData`` records.

    Rows are sorted by time (stable) and numbered from 0.  A missing
    ``volume`` column is treated as zero volume.  When *tz* is given,
    timestamps are parsed as UTC and converted to that zone so session
    and day boundaries follow the exchange clock.

    Raises ``ValueError`` if a required column is missing.
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required column(s): {', '.join(missing)}")

    df = df.copy()
    if tz:
        df["time"] = pd.to_datetime(df["time"], utc=True).dt.tz_convert(tz)
    elif not pd.api.types.is_datetime64_any_dtype(df["time"]):
        df["time"] = pd.to_datetime(df["time"])
    if "volume" not in df.columns:
        df["volume"] = 0.0
    df["volume"] = df["volume"].fillna(0.0)

    df = df.sort_values("time", kind="mergesort").reset_index(drop=True)

    return [
        BarData(
            index=i,
            time=row.time.to_pydatetime(),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(row.volume),
        )
        for i, row in enumerate(df.itertuples(index=False))
    ]


def load_bars_csv(path: str | Path, tz: Optional[str] = None) -> list[BarData]:
    """Read ``time,open,high,low,close[,volume]`` rows from *path*."""
    df = pd.read_csv(path)
    bars = bars_from_frame(df, tz=tz)
    logger.info("Loaded %d bars from %s", len(bars), path)
    return bars


def _zone_dict(zone: Zone) -> dict:
    return {
        "side": zone.side.value,
        "top": zone.top,
        "bottom": zone.bottom,
        "created_index": zone.created_index,
        "liquidity_level": zone.liquidity_level,
        "liquidity_class": zone.liquidity_class.value,
        "active": zone.active,
    }


def run_replay(
    bars: list[BarData],
    config: Optional[Config] = None,
    ticker: Optional[str] = None,
) -> dict:
    """Replay *bars* through a freshly built engine.

    Returns:
        Dict with ``bars`` (count), ``alerts``, ``state_events``,
        ``zone_events``, ``daily_events`` and ``final_zones``.  Identical
        input always produces an identical dict.
    """
    config = config or Config()
    board = ZoneBoard(config)
    sink = LoggingAlertSink()
    engine = LiquidityEngine(config, render=board, alerts=sink, ticker=ticker)

    alerts: list[dict] = []
    state_events: list[dict] = []
    zone_events: list[dict] = []
    daily_events: list[dict] = []

    for bar in bars:
        result = engine.update(bar)
        for created in result.zones_created:
            zone_events.append(
                {"event": "created", "bar_index": bar.index, "score": created.score,
                 **_zone_dict(created.zone)}
            )
        for closed in result.zones_closed:
            zone_events.append(
                {"event": closed.reason, "bar_index": closed.end_index,
                 **_zone_dict(closed.zone)}
            )
        for ev in result.state_events:
            state_events.append(
                {"kind": ev.kind, "side": ev.side.value, "level": ev.level,
                 "bar_index": ev.bar_index, "close": ev.close}
            )
        for ev in result.daily_events:
            daily_events.append(
                {"kind": ev.kind, "high": ev.high, "low": ev.low, "bar_index": ev.bar_index}
            )
        for title in result.alerts:
            alerts.append(
                {"title": title, "bar_index": bar.index, "time": bar.time.isoformat()}
            )

    logger.info(
        "Replay complete: %d bars, %d zones created, %d alerts, %d zones active",
        len(bars),
        sum(1 for e in zone_events if e["event"] == "created"),
        len(alerts),
        engine.zone_count,
    )

    return {
        "bars": len(bars),
        "alerts": alerts,
        "state_events": state_events,
        "zone_events": zone_events,
        "daily_events": daily_events,
        "final_zones": [_zone_dict(z) for z in engine.zones()],
    }
