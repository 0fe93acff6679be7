"""Tests for ytd_collector.core.clock module."""

from datetime import date, datetime, timedelta, timezone

import pytest

from ytd_collector.core.clock import (
    FixedClock,
    SystemClock,
    current_year,
    most_recent_weekday,
    run_timestamp,
    today,
)


class TestClocks:
    """Tests for SystemClock and FixedClock."""

    def test_system_clock_is_utc(self):
        assert SystemClock().now().utcoffset() == timedelta(0)

    def test_fixed_clock(self, fixed_clock):
        assert today(fixed_clock) == date(2026, 2, 21)
        assert current_year(fixed_clock) == 2026

    def test_naive_instant_is_treated_as_utc(self):
        clock = FixedClock(datetime(2026, 1, 1, 12, 0))
        assert clock.now().tzinfo is timezone.utc


class TestMostRecentWeekday:
    """Tests for most_recent_weekday()."""

    @pytest.mark.parametrize("day,expected", [
        (date(2026, 2, 19), date(2026, 2, 19)),  # Thursday itself
        (date(2026, 2, 21), date(2026, 2, 19)),
        (date(2026, 2, 18), date(2026, 2, 12)),
        (date(2026, 1, 2), date(2026, 1, 1)),
        (date(2025, 1, 1), date(2024, 12, 26)),  # across a year boundary
    ])
    def test_thursdays(self, day, expected):
        assert most_recent_weekday(day, 3) == expected


class TestRunTimestamp:
    """Tests for run_timestamp()."""

    def test_millisecond_precision_with_z(self, fixed_clock):
        assert run_timestamp(fixed_clock) == "2026-02-21T15:30:00.000Z"

    def test_converts_offsets_to_utc(self):
        eastern = timezone(timedelta(hours=-5))
        clock = FixedClock(datetime(2026, 2, 21, 10, 30, 0, 123456, tzinfo=eastern))
        assert run_timestamp(clock) == "2026-02-21T15:30:00.123Z"
