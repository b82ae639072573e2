"""
Time-Window Resolver — maps a named lookback window to an absolute cutoff.

Pure and deterministic: the current instant is always passed in, never read
from a global clock here.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from audience_engine.models.query import TimeWindow

# Lookback length per bounded window. allTime and customRange carry no bound.
WINDOW_DAYS: Dict[str, int] = {
    TimeWindow.LAST_7_DAYS.value: 7,
    TimeWindow.LAST_30_DAYS.value: 30,
    TimeWindow.LAST_90_DAYS.value: 90,
    TimeWindow.LAST_YEAR.value: 365,
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def is_bounded_window(window: str) -> bool:
    return _window_key(window) in WINDOW_DAYS


def resolve_time_window(window: str, now: datetime) -> Optional[datetime]:
    """
    Resolve ``window`` to the earliest instant still inside it.

    Returns None for windows with no lower bound: allTime, customRange
    (declared but never given a range) and anything unrecognised.
    """
    days = WINDOW_DAYS.get(_window_key(window))
    if days is None:
        return None
    return as_utc(now) - timedelta(days=days)


def _window_key(window) -> str:
    if isinstance(window, TimeWindow):
        return window.value
    return str(window)
