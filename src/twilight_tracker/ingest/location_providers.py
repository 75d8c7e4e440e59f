"""Location sources for fixed installs and externally pushed fixes."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from threading import Lock

from twilight_tracker.contracts import Location
from twilight_tracker.ingest.interfaces import LocationCallback, LocationSource

logger = logging.getLogger(__name__)


class StaticLocationSource(LocationSource):
    """Source that always reports one configured location."""

    def __init__(self, latitude: float, longitude: float) -> None:
        self._location = Location(
            latitude=latitude,
            longitude=longitude,
            accuracy=0.0,
            timestamp=datetime.now(UTC),
            provider="static",
        )

    def get_last_known_location(self) -> Location | None:
        return self._location

    def request_updates(self, callback: LocationCallback) -> None:
        # A fixed location never moves; the last known fix is all there is.
        return None

    def request_single_update(self, callback: LocationCallback) -> None:
        callback(self._location)


class PushLocationSource(LocationSource):
    """Source fed by :meth:`push`, e.g. from the HTTP API or a GPS daemon."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._last: Location | None = None
        self._subscribers: list[LocationCallback] = []
        self._single_shot: list[LocationCallback] = []

    def get_last_known_location(self) -> Location | None:
        with self._lock:
            return self._last

    def request_updates(self, callback: LocationCallback) -> None:
        with self._lock:
            self._subscribers.append(callback)

    def request_single_update(self, callback: LocationCallback) -> None:
        with self._lock:
            self._single_shot.append(callback)

    def push(self, location: Location) -> None:
        """Record `location` and deliver it to subscribers outside the lock."""
        with self._lock:
            self._last = location
            callbacks = list(self._subscribers)
            callbacks.extend(cb for cb in self._single_shot if cb not in callbacks)
            self._single_shot = []
        logger.debug("Pushing fix from %s to %d callbacks", location.provider, len(callbacks))
        for callback in callbacks:
            callback(location)
