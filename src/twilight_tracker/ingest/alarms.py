"""Exact wake-up alarms backed by :class:`threading.Timer`."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from threading import Lock, Timer

from twilight_tracker.ingest.interfaces import AlarmScheduler
from twilight_tracker.time.clock import to_utc

logger = logging.getLogger(__name__)


class TimerAlarmScheduler(AlarmScheduler):
    """Holds at most one pending daemon timer; scheduling replaces it."""

    def __init__(self, now: Callable[[], datetime] | None = None) -> None:
        self._now = now or (lambda: datetime.now(UTC))
        self._lock = Lock()
        self._timer: Timer | None = None
        self._timer_id: object | None = None
        self._pending_at: datetime | None = None

    @property
    def pending_at(self) -> datetime | None:
        """Instant of the pending wake-up, or None."""
        with self._lock:
            return self._pending_at

    def schedule_exact(self, at: datetime, on_fire: Callable[[], None]) -> None:
        """Arm a timer for `at`; a pending timer for the same instant is kept."""
        at_utc = to_utc(at)
        with self._lock:
            if self._timer is not None and self._pending_at == at_utc:
                return
            self._cancel_locked()
            delay = max(0.0, (at_utc - self._now()).total_seconds())
            timer_id = object()
            timer = Timer(delay, self._fire, args=(timer_id, on_fire))
            timer.daemon = True
            self._timer = timer
            self._timer_id = timer_id
            self._pending_at = at_utc
            timer.start()
        logger.info("Scheduled wake-up at %s (in %.0fs)", at_utc.isoformat(), delay)

    def cancel(self) -> None:
        with self._lock:
            self._cancel_locked()

    def _cancel_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        self._pending_at = None

    def _fire(self, timer_id: object, on_fire: Callable[[], None]) -> None:
        with self._lock:
            if self._timer is None or self._timer_id is not timer_id:
                return
            self._timer = None
            self._pending_at = None
        logger.info("Wake-up alarm fired")
        on_fire()
