"""Tests for the Time-Window Resolver."""

from datetime import datetime, timedelta, timezone

import pytest

from audience_engine.models.query import TimeWindow
from audience_engine.time_window.resolver import resolve_time_window

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


class TestResolveTimeWindow:
    @pytest.mark.parametrize(
        "window,days",
        [("last7days", 7), ("last30days", 30), ("last90days", 90), ("lastYear", 365)],
    )
    def test_bounded_windows(self, window, days):
        assert resolve_time_window(window, NOW) == NOW - timedelta(days=days)

    def test_accepts_enum(self):
        assert resolve_time_window(TimeWindow.LAST_7_DAYS, NOW) == NOW - timedelta(days=7)

    def test_all_time_has_no_bound(self):
        assert resolve_time_window("allTime", NOW) is None

    def test_custom_range_is_unbounded(self):
        assert resolve_time_window(TimeWindow.CUSTOM_RANGE, NOW) is None

    def test_unknown_window_is_unbounded(self):
        assert resolve_time_window("lastDecade", NOW) is None

    def test_naive_now_treated_as_utc(self):
        naive = datetime(2026, 1, 15, 12, 0)
        assert resolve_time_window("last7days", naive) == NOW - timedelta(days=7)

    def test_deterministic(self):
        assert resolve_time_window("last30days", NOW) == resolve_time_window("last30days", NOW)
