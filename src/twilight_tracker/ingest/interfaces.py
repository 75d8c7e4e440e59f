"""Collaborator interfaces for location fixes and exact wake-ups."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from twilight_tracker.contracts import Location

LocationCallback = Callable[[Location], None]


class LocationSource(Protocol):
    """Interface for best-effort device location fixes."""

    def get_last_known_location(self) -> Location | None:
        """Return the most recent fix, or None when none is available."""

    def request_updates(self, callback: LocationCallback) -> None:
        """Deliver every future fix to `callback`."""

    def request_single_update(self, callback: LocationCallback) -> None:
        """Deliver the next fix to `callback` once."""


class AlarmScheduler(Protocol):
    """Interface for one pending exact wake-up per owner."""

    def schedule_exact(self, at: datetime, on_fire: Callable[[], None]) -> None:
        """Schedule `on_fire` at `at`, replacing any pending wake-up."""

    def cancel(self) -> None:
        """Drop the pending wake-up, if any."""
