"""Trigger-driven twilight state scheduler.

Location fixes, clock/timezone changes, wake-up alarms and start-up all land
on one trigger queue. A single loop drains it, re-evaluates the twilight
state, publishes it to listeners only when a boundary changed, and arms one
exact wake-up at the next sunrise or sunset.
"""

from __future__ import annotations

import logging
from queue import Empty, Queue
from threading import Lock, RLock, Thread

from twilight_tracker.astro.solar import TwilightCalculationError
from twilight_tracker.contracts import Location, Trigger, TwilightState
from twilight_tracker.ingest.interfaces import AlarmScheduler, LocationSource
from twilight_tracker.state.evaluator import StateEvaluator
from twilight_tracker.state.listeners import ListenerRegistry
from twilight_tracker.state.settings_store import SettingsMirror
from twilight_tracker.time.clock import Clock

logger = logging.getLogger(__name__)

_STOP = None


class UpdateScheduler:
    """Owns the cached location and last state and decides when to re-evaluate."""

    def __init__(
        self,
        evaluator: StateEvaluator,
        location_source: LocationSource,
        alarms: AlarmScheduler,
        clock: Clock,
        settings: SettingsMirror | None = None,
    ) -> None:
        self._evaluator = evaluator
        self._location_source = location_source
        self._alarms = alarms
        self._clock = clock
        self._settings = settings

        # Guards the cached location together with the registry's map and state.
        self._lock = RLock()
        self.registry = ListenerRegistry(lock=self._lock)
        self._last_location: Location | None = None

        # Keeps evaluate/publish/reschedule runs from interleaving.
        self._evaluation_lock = Lock()
        self._triggers: Queue[Trigger | None] = Queue()
        self._thread: Thread | None = None

    @property
    def last_known_location(self) -> Location | None:
        with self._lock:
            return self._last_location

    @property
    def last_twilight_state(self) -> TwilightState | None:
        return self.registry.current_state()

    def start(self) -> None:
        """Subscribe to location updates, queue the start-up evaluation and run the loop."""
        if self._thread is not None:
            raise RuntimeError("scheduler already started")
        logger.info("Starting twilight scheduler")

        self._location_source.request_updates(self.on_location_changed)
        if self._location_source.get_last_known_location() is None:
            self._location_source.request_single_update(self.on_location_changed)

        self.submit(Trigger.STARTUP)
        self._thread = Thread(target=self._run_loop, name="twilight-scheduler", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop the loop thread and drop the pending wake-up."""
        thread = self._thread
        if thread is not None:
            self._triggers.put(_STOP)
            thread.join(timeout)
            self._thread = None
        self._alarms.cancel()

    def submit(self, trigger: Trigger) -> None:
        """Queue one re-evaluation request."""
        self._triggers.put(trigger)

    def on_location_changed(self, location: Location | None) -> None:
        """Cache a new fix and queue a re-evaluation; (0, 0) fixes are dropped."""
        if location is None or location.is_null_island():
            logger.warning("Ignoring empty location fix: %s", location)
            return
        logger.info(
            "Location changed: provider=%s accuracy=%s time=%s",
            location.provider,
            location.accuracy,
            location.timestamp.isoformat() if location.timestamp else None,
        )
        with self._lock:
            self._last_location = location
        self.submit(Trigger.LOCATION_CHANGED)

    def on_time_changed(self) -> None:
        """Queue a re-evaluation after a wall clock or timezone change."""
        self.submit(Trigger.TIME_CHANGED)

    def on_alarm(self) -> None:
        """Queue a re-evaluation when the scheduled wake-up fires."""
        self.submit(Trigger.ALARM)

    def run_pending(self) -> int:
        """Process queued triggers on the calling thread; returns how many ran."""
        processed = 0
        while True:
            try:
                trigger = self._triggers.get_nowait()
            except Empty:
                return processed
            if trigger is _STOP:
                return processed
            self._process(trigger)
            processed += 1

    def evaluate_and_publish(self, trigger: Trigger | None = None) -> TwilightState | None:
        """Re-evaluate now, notify listeners on change and reschedule the wake-up.

        Returns the freshly evaluated state, or None when no location is known
        or the sun does not rise or set around today at the location.
        """
        source = trigger if trigger is not None else "direct call"
        with self._evaluation_lock:
            location = self._resolve_location()
            now = self._clock.now()
            try:
                state = self._evaluator.evaluate(location, now, self._clock.timezone())
            except TwilightCalculationError as exc:
                logger.warning("Twilight evaluation failed on %s: %s", source, exc)
                return None

            logger.debug("Evaluation on %s produced %s", source, state)
            if self.registry.publish_if_changed(state):
                logger.info("Twilight state changed on %s: %s", source, state)
                if state is not None:
                    self._mirror_is_night(state.is_night(now))

            if state is not None:
                self._alarms.schedule_exact(state.next_transition(now), self.on_alarm)
            return state

    def _resolve_location(self) -> Location | None:
        with self._lock:
            cached = self._last_location
        if cached is not None:
            return cached
        fallback = self._location_source.get_last_known_location()
        if fallback is None or fallback.is_null_island():
            return None
        return fallback

    def _mirror_is_night(self, is_night: bool) -> None:
        if self._settings is None:
            return
        try:
            self._settings.set_is_night(is_night)
        except Exception:
            logger.exception("Failed to mirror is-night flag to settings")

    def _process(self, trigger: Trigger) -> None:
        try:
            self.evaluate_and_publish(trigger)
        except Exception:
            logger.exception("Unhandled error while processing trigger %s", trigger)

    def _run_loop(self) -> None:
        while True:
            trigger = self._triggers.get()
            if trigger is _STOP:
                logger.info("Twilight scheduler stopped")
                return
            self._process(trigger)
