"""Official sunrise/sunset lookups backed by the astral library."""

from __future__ import annotations

import logging
from datetime import date, datetime, tzinfo
from typing import Protocol

from astral import Observer
from astral.sun import sunrise, sunset

from twilight_tracker.contracts import Location

logger = logging.getLogger(__name__)


class TwilightCalculationError(RuntimeError):
    """Raised when the sun does not rise or set on a day at a location."""


class TwilightCalculator(Protocol):
    """Interface for per-day official sunrise/sunset instants."""

    def sunrise_for(self, location: Location, day: date, tz: tzinfo) -> datetime:
        """Return official sunrise for the local calendar day `day` in `tz`."""

    def sunset_for(self, location: Location, day: date, tz: tzinfo) -> datetime:
        """Return official sunset for the local calendar day `day` in `tz`."""


class AstralTwilightCalculator(TwilightCalculator):
    """Calculator using astral's refraction-corrected 90.833 degree zenith."""

    def sunrise_for(self, location: Location, day: date, tz: tzinfo) -> datetime:
        try:
            return sunrise(_observer(location), date=day, tzinfo=tz)
        except ValueError as exc:
            logger.warning(
                "No sunrise on %s at lat=%.4f lon=%.4f: %s",
                day.isoformat(),
                location.latitude,
                location.longitude,
                exc,
            )
            raise TwilightCalculationError(f"no sunrise on {day.isoformat()}") from exc

    def sunset_for(self, location: Location, day: date, tz: tzinfo) -> datetime:
        try:
            return sunset(_observer(location), date=day, tzinfo=tz)
        except ValueError as exc:
            logger.warning(
                "No sunset on %s at lat=%.4f lon=%.4f: %s",
                day.isoformat(),
                location.latitude,
                location.longitude,
                exc,
            )
            raise TwilightCalculationError(f"no sunset on {day.isoformat()}") from exc


def _observer(location: Location) -> Observer:
    return Observer(latitude=location.latitude, longitude=location.longitude)
