"""Core data contracts for the twilight tracker."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from twilight_tracker.time.clock import from_millis, to_millis, to_utc


class Trigger(StrEnum):
    """Events that cause the twilight state to be re-evaluated."""

    STARTUP = "startup"
    LOCATION_CHANGED = "location_changed"
    TIME_CHANGED = "time_changed"
    ALARM = "alarm"


@dataclass(frozen=True, slots=True)
class Location:
    """One best-effort location fix from a location source."""

    latitude: float
    longitude: float
    accuracy: float | None = None
    timestamp: datetime | None = None
    provider: str = "unknown"

    def __post_init__(self) -> None:
        """Validate WGS84 coordinate bounds."""
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError("latitude must be within [-90, 90].")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError("longitude must be within [-180, 180].")

    def is_null_island(self) -> bool:
        """Return True for the (0.0, 0.0) fix providers report on failure."""
        return self.latitude == 0.0 and self.longitude == 0.0


@dataclass(frozen=True, slots=True)
class TwilightState:
    """Day/night boundaries around one evaluation instant.

    All four instants are epoch milliseconds. Two states are equal only when
    every boundary matches, so a new day with the same day/night flag still
    compares unequal.
    """

    sunrise_millis: int
    sunset_millis: int
    previous_sunset_millis: int
    next_sunrise_millis: int

    def __post_init__(self) -> None:
        """Validate boundary ordering."""
        if not (
            self.previous_sunset_millis
            < self.sunrise_millis
            < self.sunset_millis
            < self.next_sunrise_millis
        ):
            raise ValueError(
                "twilight boundaries must satisfy "
                "previous_sunset < sunrise < sunset < next_sunrise."
            )

    @property
    def sunrise(self) -> datetime:
        return from_millis(self.sunrise_millis)

    @property
    def sunset(self) -> datetime:
        return from_millis(self.sunset_millis)

    @property
    def previous_sunset(self) -> datetime:
        return from_millis(self.previous_sunset_millis)

    @property
    def next_sunrise(self) -> datetime:
        return from_millis(self.next_sunrise_millis)

    def is_night(self, now: datetime) -> bool:
        """Return True unless `now` lies between today's sunrise and sunset."""
        now_millis = to_millis(to_utc(now))
        return not self.sunrise_millis <= now_millis < self.sunset_millis

    def next_transition(self, now: datetime) -> datetime:
        """Return the nearest upcoming sunrise or sunset after `now`."""
        now_millis = to_millis(to_utc(now))
        if now_millis < self.sunrise_millis:
            return self.sunrise
        if now_millis < self.sunset_millis:
            return self.sunset
        return self.next_sunrise

    def to_dict(self, now: datetime | None = None) -> dict[str, Any]:
        """Serialize boundaries to a JSON-compatible dictionary."""
        payload: dict[str, Any] = {
            "sunrise_millis": self.sunrise_millis,
            "sunset_millis": self.sunset_millis,
            "previous_sunset_millis": self.previous_sunset_millis,
            "next_sunrise_millis": self.next_sunrise_millis,
            "sunrise_utc": self.sunrise.isoformat(),
            "sunset_utc": self.sunset.isoformat(),
            "previous_sunset_utc": self.previous_sunset.isoformat(),
            "next_sunrise_utc": self.next_sunrise.isoformat(),
        }
        if now is not None:
            payload["is_night"] = self.is_night(now)
            payload["next_transition_utc"] = self.next_transition(now).isoformat()
        return payload
