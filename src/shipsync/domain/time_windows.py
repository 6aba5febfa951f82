"""Business-day arithmetic for scheduling carrier pickups."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo

PICKUP_WINDOW_START = time(8, 59, 59)
PICKUP_WINDOW_END = time(16, 59, 59)

_SATURDAY = 5
_SUNDAY = 6


class Clock(Protocol):
    def __call__(self) -> datetime: ...


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class PickupWindow:
    """A pickup window on one local business day, expressed in UTC."""

    day: date
    start: datetime
    end: datetime


def next_business_day(today: date) -> date:
    """Return tomorrow, or the following Monday when tomorrow is a weekend day."""

    tomorrow = today + timedelta(days=1)
    if tomorrow.weekday() == _SATURDAY:
        return tomorrow + timedelta(days=2)
    if tomorrow.weekday() == _SUNDAY:
        return tomorrow + timedelta(days=1)
    return tomorrow


def next_pickup_window(
    *,
    timezone: str,
    clock: Clock = utcnow,
    start: time = PICKUP_WINDOW_START,
    end: time = PICKUP_WINDOW_END,
) -> PickupWindow:
    """Compute the next business day's pickup window in ``timezone``."""

    zone = ZoneInfo(timezone)
    now = clock()
    if now.tzinfo is None:
        raise ValueError("Clock must return timezone-aware datetimes")
    day = next_business_day(now.astimezone(zone).date())
    return PickupWindow(
        day=day,
        start=datetime.combine(day, start, tzinfo=zone).astimezone(UTC),
        end=datetime.combine(day, end, tzinfo=zone).astimezone(UTC),
    )
