"""OrderPool — engine configuration.

Loads .env variables into a typed config object.
Validates values on construction so the engine never sees a bad threshold.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


# Minute-of-day windows [start, end).  13:45–17:00 and 19:00–23:00.
DEFAULT_SESSION_WINDOWS: tuple[tuple[int, int], ...] = (
    (13 * 60 + 45, 17 * 60),
    (19 * 60, 23 * 60),
)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Config:
    """Typed engine configuration.

    Threshold values are normalised volume scores on the 0–10 scale.
    The ``daily_line_*`` fields are cosmetic and passed to the renderer
    untouched.
    """

    filter_by_trading_hours: bool = False
    session_windows: tuple[tuple[int, int], ...] = DEFAULT_SESSION_WINDOWS
    max_zones: int = 125
    show_low_liquidity_zones: bool = False
    alert_on_medium: bool = True
    alert_on_high: bool = True
    med_threshold: float = 5.0
    high_threshold: float = 7.0
    show_daily_levels: bool = True
    daily_line_color: str = "#2962FF"
    daily_line_width: int = 1
    daily_line_style: str = "dashed"  # "solid", "dashed" or "dotted"
    ticker: str = "UNKNOWN"
    bar_timezone: Optional[str] = None
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        for name in ("med_threshold", "high_threshold"):
            value = getattr(self, name)
            if not 1.0 <= value <= 10.0:
                raise ValueError(f"{name} must be within [1, 10], got {value}")
        if self.max_zones < 1:
            raise ValueError(f"max_zones must be at least 1, got {self.max_zones}")
        if self.daily_line_width < 1:
            raise ValueError(
                f"daily_line_width must be at least 1, got {self.daily_line_width}"
            )
        if self.daily_line_style not in ("solid", "dashed", "dotted"):
            raise ValueError(f"Unknown daily_line_style '{self.daily_line_style}'")
        for start, end in self.session_windows:
            if not 0 <= start < end <= 24 * 60:
                raise ValueError(f"Invalid session window {start}-{end}")


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got '{raw}'")


def _parse_minute(name: str, text: str) -> int:
    try:
        hour, minute = text.strip().split(":")
        h, m = int(hour), int(minute)
    except ValueError:
        raise ValueError(f"{name}: expected HH:MM, got '{text}'") from None
    if not (0 <= h <= 24 and 0 <= m < 60) or (h == 24 and m != 0):
        raise ValueError(f"{name}: time out of range '{text}'")
    return h * 60 + m


def parse_session_window(name: str, raw: str) -> tuple[int, int]:
    """Parse ``"HH:MM-HH:MM"`` into a ``(start, end)`` minute-of-day pair."""
    if "-" not in raw:
        raise ValueError(f"{name}: expected HH:MM-HH:MM, got '{raw}'")
    start_text, end_text = raw.split("-", 1)
    start = _parse_minute(name, start_text)
    end = _parse_minute(name, end_text)
    if start >= end:
        raise ValueError(f"{name}: window start must be before end, got '{raw}'")
    return start, end


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    return _parse_bool(name, raw)


def _env_number(name: str, default, cast):
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a {cast.__name__}, got '{raw}'") from None


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from ``ORDERPOOL_*`` environment variables.

    Every variable is optional.  Raises ``ValueError`` with a message naming
    the offending variable when a value cannot be parsed or is out of range.
    """
    load_dotenv(dotenv_path=env_path)

    windows = DEFAULT_SESSION_WINDOWS
    first = os.environ.get("ORDERPOOL_SESSION_1")
    second = os.environ.get("ORDERPOOL_SESSION_2")
    if first or second:
        windows = (
            parse_session_window("ORDERPOOL_SESSION_1", first)
            if first else DEFAULT_SESSION_WINDOWS[0],
            parse_session_window("ORDERPOOL_SESSION_2", second)
            if second else DEFAULT_SESSION_WINDOWS[1],
        )

    return Config(
        filter_by_trading_hours=_env_bool("ORDERPOOL_FILTER_BY_TRADING_HOURS", False),
        session_windows=windows,
        max_zones=_env_number("ORDERPOOL_MAX_ZONES", 125, int),
        show_low_liquidity_zones=_env_bool("ORDERPOOL_SHOW_LOW_LIQUIDITY", False),
        alert_on_medium=_env_bool("ORDERPOOL_ALERT_ON_MEDIUM", True),
        alert_on_high=_env_bool("ORDERPOOL_ALERT_ON_HIGH", True),
        med_threshold=_env_number("ORDERPOOL_MED_THRESHOLD", 5.0, float),
        high_threshold=_env_number("ORDERPOOL_HIGH_THRESHOLD", 7.0, float),
        show_daily_levels=_env_bool("ORDERPOOL_SHOW_DAILY_LEVELS", True),
        daily_line_color=os.environ.get("ORDERPOOL_DAILY_LINE_COLOR", "#2962FF"),
        daily_line_width=_env_number("ORDERPOOL_DAILY_LINE_WIDTH", 1, int),
        daily_line_style=os.environ.get("ORDERPOOL_DAILY_LINE_STYLE", "dashed"),
        ticker=os.environ.get("ORDERPOOL_TICKER", "UNKNOWN"),
        bar_timezone=os.environ.get("ORDERPOOL_BAR_TIMEZONE") or None,
        log_level=os.environ.get("ORDERPOOL_LOG_LEVEL", "INFO"),
    )
