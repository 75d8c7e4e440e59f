"""Evaluate twilight boundaries for a location around an instant."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, tzinfo

from twilight_tracker.astro.solar import TwilightCalculationError, TwilightCalculator
from twilight_tracker.contracts import Location, TwilightState
from twilight_tracker.time.clock import adjacent_days, to_millis

logger = logging.getLogger(__name__)


class StateEvaluator:
    """Combine a location and an instant into a :class:`TwilightState`.

    Yesterday, today and tomorrow are always derived from the calendar day
    containing `now` in the supplied timezone; nothing is carried over from
    earlier evaluations.
    """

    def __init__(self, calculator: TwilightCalculator) -> None:
        self._calculator = calculator

    def evaluate(
        self, location: Location | None, now: datetime, tz: tzinfo
    ) -> TwilightState | None:
        """Return the twilight state, or None when no location is known.

        Raises:
            TwilightCalculationError: If the sun does not rise or set on one of
                the three days, or the boundaries come back out of order.
        """
        if location is None:
            return None
        if now.tzinfo is None:
            raise ValueError("now must be timezone-aware.")

        yesterday, today, tomorrow = adjacent_days(now, tz)
        calc = self._calculator

        # Boundaries follow today's sunrise, not its calendar date. Far from
        # the location's own zone a local day holds the previous solar day's sunset.
        sunrise = calc.sunrise_for(location, today, tz)
        same_day_sunset = calc.sunset_for(location, today, tz)
        if same_day_sunset > sunrise:
            sunset = same_day_sunset
            previous_sunset = calc.sunset_for(location, yesterday, tz)
        else:
            sunset = calc.sunset_for(location, tomorrow, tz)
            previous_sunset = same_day_sunset
        next_sunrise = calc.sunrise_for(location, tomorrow, tz)
        if next_sunrise <= sunset:
            next_sunrise = calc.sunrise_for(location, tomorrow + timedelta(days=1), tz)

        try:
            state = TwilightState(
                sunrise_millis=to_millis(sunrise),
                sunset_millis=to_millis(sunset),
                previous_sunset_millis=to_millis(previous_sunset),
                next_sunrise_millis=to_millis(next_sunrise),
            )
        except ValueError as exc:
            # Near the polar circles consecutive days can still disagree.
            raise TwilightCalculationError(
                f"inconsistent twilight boundaries for {today.isoformat()}"
            ) from exc

        logger.debug("Evaluated %s for %s at %s", state, today.isoformat(), now.isoformat())
        return state
