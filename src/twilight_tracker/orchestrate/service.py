"""Twilight service wiring and the public listener surface."""

from __future__ import annotations

import logging
from threading import Lock

from twilight_tracker.astro.solar import AstralTwilightCalculator, TwilightCalculator
from twilight_tracker.config import ServiceConfig
from twilight_tracker.contracts import Location, TwilightState
from twilight_tracker.ingest.alarms import TimerAlarmScheduler
from twilight_tracker.ingest.factory import create_location_source, create_settings_mirror
from twilight_tracker.ingest.interfaces import AlarmScheduler, LocationSource
from twilight_tracker.ingest.location_providers import PushLocationSource
from twilight_tracker.orchestrate.scheduler import UpdateScheduler
from twilight_tracker.state.evaluator import StateEvaluator
from twilight_tracker.state.listeners import (
    DeliveryContext,
    ExecutorDeliveryContext,
    TwilightListener,
)
from twilight_tracker.state.settings_store import SettingsMirror
from twilight_tracker.time.clock import Clock, SystemClock

logger = logging.getLogger(__name__)


class TwilightService:
    """Answers "is it night, and when does that change next?" for consumers."""

    def __init__(
        self,
        location_source: LocationSource,
        settings: SettingsMirror | None = None,
        clock: Clock | None = None,
        alarms: AlarmScheduler | None = None,
        calculator: TwilightCalculator | None = None,
    ) -> None:
        self.location_source = location_source
        self.settings = settings
        self.clock = clock or SystemClock()
        self.scheduler = UpdateScheduler(
            evaluator=StateEvaluator(calculator or AstralTwilightCalculator()),
            location_source=location_source,
            alarms=alarms or TimerAlarmScheduler(now=self.clock.now),
            clock=self.clock,
            settings=settings,
        )
        self._context_lock = Lock()
        self._default_context: ExecutorDeliveryContext | None = None

    @classmethod
    def from_config(cls, config: ServiceConfig) -> "TwilightService":
        """Build a service and its collaborators from configuration."""
        return cls(
            location_source=create_location_source(config),
            settings=create_settings_mirror(config),
            clock=SystemClock(config.timezone_name),
        )

    def start(self) -> None:
        self.scheduler.start()

    def stop(self) -> None:
        self.scheduler.stop()
        with self._context_lock:
            if self._default_context is not None:
                self._default_context.shutdown(wait=False)
                self._default_context = None

    def register_listener(
        self, listener: TwilightListener, context: DeliveryContext | None = None
    ) -> None:
        """Register `listener`; without a context it shares one background worker."""
        if context is None:
            with self._context_lock:
                if self._default_context is None:
                    self._default_context = ExecutorDeliveryContext()
                context = self._default_context
        self.scheduler.registry.register(listener, context)

    def unregister_listener(self, listener: TwilightListener) -> None:
        self.scheduler.registry.unregister(listener)

    def get_last_twilight_state(self) -> TwilightState | None:
        return self.scheduler.last_twilight_state

    def report_location(self, location: Location) -> None:
        """Feed an externally obtained fix in through the location-changed trigger."""
        if isinstance(self.location_source, PushLocationSource):
            self.location_source.push(location)
        else:
            self.scheduler.on_location_changed(location)

    def report_time_changed(self) -> None:
        self.scheduler.on_time_changed()
