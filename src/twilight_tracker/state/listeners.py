"""Thread-safe listener registry with per-listener delivery contexts."""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from threading import RLock
from typing import Protocol

from twilight_tracker.contracts import TwilightState

logger = logging.getLogger(__name__)


class TwilightListener(Protocol):
    """Callback interface for twilight state changes."""

    def on_twilight_state_changed(self, state: TwilightState | None) -> None:
        """Handle a newly published twilight state."""


class DeliveryContext(Protocol):
    """Execution context a listener's callbacks are posted to."""

    def post(self, task: Callable[[], None]) -> None:
        """Queue `task` for execution without running it on the caller's thread."""


class ExecutorDeliveryContext(DeliveryContext):
    """Single-worker executor; tasks run one at a time in posting order."""

    def __init__(self, name: str = "twilight-listener") -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)

    def post(self, task: Callable[[], None]) -> None:
        self._executor.submit(task)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting tasks, optionally waiting for queued ones."""
        self._executor.shutdown(wait=wait)


class ListenerRegistry:
    """Listeners plus the last published state, guarded by one lock.

    The lock may be shared with the owning scheduler so that the listener map,
    the last state and the scheduler's cached location sit in one
    mutual-exclusion domain.
    """

    def __init__(self, lock: RLock | None = None) -> None:
        self._lock = lock if lock is not None else RLock()
        self._listeners: dict[TwilightListener, DeliveryContext] = {}
        self._last_state: TwilightState | None = None

    def register(self, listener: TwilightListener, context: DeliveryContext) -> None:
        """Add `listener` or replace the context it is bound to."""
        with self._lock:
            self._listeners[listener] = context

    def unregister(self, listener: TwilightListener) -> None:
        """Remove `listener`; unknown listeners are ignored."""
        with self._lock:
            self._listeners.pop(listener, None)

    def current_state(self) -> TwilightState | None:
        """Return the last published state."""
        with self._lock:
            return self._last_state

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)

    def publish_if_changed(self, state: TwilightState | None) -> bool:
        """Replace the last state and notify listeners when `state` differs.

        Returns:
            True when the state changed and a notification was posted.
        """
        with self._lock:
            if self._last_state == state:
                return False
            self._last_state = state
            self.notify_all(state)
            return True

    def notify_all(self, state: TwilightState | None) -> None:
        """Post `state` to every listener registered at this moment."""
        with self._lock:
            targets = list(self._listeners.items())
            for listener, context in targets:
                try:
                    context.post(self._delivery(listener, context, state))
                except Exception:
                    logger.exception("Could not post twilight state to %r", listener)

    def _delivery(
        self,
        listener: TwilightListener,
        context: DeliveryContext,
        state: TwilightState | None,
    ) -> Callable[[], None]:
        def deliver() -> None:
            with self._lock:
                if self._listeners.get(listener) is not context:
                    return
            try:
                listener.on_twilight_state_changed(state)
            except Exception:
                logger.exception("Twilight listener %r failed", listener)

        return deliver
