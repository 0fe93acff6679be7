"""Injected as-of clock.

Every date computation an adapter makes (which weekly report to request,
which years to ask the vision oracle about) goes through a Clock so tests can
pin the instant. The clock is never used to fill in a missing as-of date.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


@dataclass(frozen=True)
class FixedClock:
    """A clock pinned to one instant (tests, replays)."""

    instant: datetime

    def now(self) -> datetime:
        if self.instant.tzinfo is None:
            return self.instant.replace(tzinfo=timezone.utc)
        return self.instant


def today(clock: Clock) -> date:
    return clock.now().date()


def current_year(clock: Clock) -> int:
    return clock.now().year


def most_recent_weekday(day: date, weekday: int) -> date:
    """Return the latest date on or before ``day`` falling on ``weekday``.

    ``weekday`` follows date.weekday(): Monday is 0, Thursday is 3.

    Examples:
        >>> most_recent_weekday(date(2026, 2, 19), 3)   # a Thursday
        datetime.date(2026, 2, 19)
        >>> most_recent_weekday(date(2026, 2, 22), 3)   # the Sunday after
        datetime.date(2026, 2, 19)
    """
    return day - timedelta(days=(day.weekday() - weekday) % 7)


def run_timestamp(clock: Clock) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    instant = clock.now().astimezone(timezone.utc)
    return instant.isoformat(timespec="milliseconds").replace("+00:00", "Z")
