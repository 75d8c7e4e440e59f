"""Clock, timezone and epoch-millisecond helpers."""

from __future__ import annotations

import time
from datetime import UTC, date, datetime, timedelta, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def to_utc(dt: datetime) -> datetime:
    """Convert datetime to timezone-aware UTC, assuming UTC for naive values."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_millis(dt: datetime) -> int:
    """Return epoch milliseconds for an aware datetime."""
    if dt.tzinfo is None:
        raise ValueError("dt must be timezone-aware.")
    delta = dt.astimezone(UTC) - datetime(1970, 1, 1, tzinfo=UTC)
    return delta // timedelta(milliseconds=1)


def from_millis(millis: int) -> datetime:
    """Return the UTC datetime for epoch milliseconds."""
    return datetime(1970, 1, 1, tzinfo=UTC) + timedelta(milliseconds=millis)


def resolve_timezone(name: str | None) -> tzinfo:
    """Resolve an IANA timezone name, falling back to the system local zone."""
    if not name:
        return local_timezone()
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"unknown timezone: {name}") from exc


def local_timezone() -> tzinfo:
    """Return the current system local timezone, re-reading TZ settings."""
    if hasattr(time, "tzset"):
        time.tzset()
    local = datetime.now().astimezone().tzinfo
    assert local is not None
    return local


def local_day(now: datetime, tz: tzinfo) -> date:
    """Return the calendar day containing `now` in timezone `tz`."""
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware.")
    return now.astimezone(tz).date()


def adjacent_days(now: datetime, tz: tzinfo) -> tuple[date, date, date]:
    """Return (yesterday, today, tomorrow) around `now` in timezone `tz`."""
    today = local_day(now, tz)
    return today - timedelta(days=1), today, today + timedelta(days=1)


class Clock(Protocol):
    """Source of the current instant and the timezone it should be read in."""

    def now(self) -> datetime:
        """Return the current time as an aware datetime."""

    def timezone(self) -> tzinfo:
        """Return the timezone calendar days are evaluated in."""


class SystemClock(Clock):
    """Wall clock, optionally pinned to a named timezone.

    The timezone is looked up on every call so a system timezone change is
    observed by the next evaluation.
    """

    def __init__(self, timezone_name: str | None = None) -> None:
        self._timezone_name = timezone_name

    def now(self) -> datetime:
        return datetime.now(UTC)

    def timezone(self) -> tzinfo:
        return resolve_timezone(self._timezone_name)
