"""Tests for the listener registry and delivery contexts."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field

from twilight_tracker.contracts import TwilightState
from twilight_tracker.state.listeners import ExecutorDeliveryContext, ListenerRegistry


def _state(offset: int = 0) -> TwilightState:
    return TwilightState(
        sunrise_millis=1_000 + offset,
        sunset_millis=2_000 + offset,
        previous_sunset_millis=500 + offset,
        next_sunrise_millis=3_000 + offset,
    )


@dataclass
class _QueuedContext:
    """Holds posted tasks until the test runs them, like a paused event loop."""

    tasks: list[Callable[[], None]] = field(default_factory=list)

    def post(self, task: Callable[[], None]) -> None:
        self.tasks.append(task)

    def run_all(self) -> None:
        tasks, self.tasks = self.tasks, []
        for task in tasks:
            task()


class _RecordingListener:
    def __init__(self) -> None:
        self.received: list[TwilightState | None] = []

    def on_twilight_state_changed(self, state: TwilightState | None) -> None:
        self.received.append(state)


class _FailingListener:
    def on_twilight_state_changed(self, state: TwilightState | None) -> None:
        raise RuntimeError("listener exploded")


def test_publish_if_changed_skips_equal_states() -> None:
    registry = ListenerRegistry()
    context = _QueuedContext()
    listener = _RecordingListener()
    registry.register(listener, context)

    assert registry.publish_if_changed(_state()) is True
    assert registry.publish_if_changed(_state()) is False
    context.run_all()

    assert listener.received == [_state()]
    assert registry.current_state() == _state()


def test_publish_if_changed_reports_present_to_absent() -> None:
    registry = ListenerRegistry()
    context = _QueuedContext()
    listener = _RecordingListener()
    registry.register(listener, context)

    assert registry.publish_if_changed(None) is False
    assert registry.publish_if_changed(_state()) is True
    assert registry.publish_if_changed(None) is True
    context.run_all()

    assert listener.received == [_state(), None]


def test_delivery_is_posted_not_run_inline() -> None:
    registry = ListenerRegistry()
    context = _QueuedContext()
    listener = _RecordingListener()
    registry.register(listener, context)

    registry.publish_if_changed(_state())

    assert listener.received == []
    assert len(context.tasks) == 1


def test_unregistered_listener_gets_nothing_while_others_do() -> None:
    registry = ListenerRegistry()
    context = _QueuedContext()
    kept = _RecordingListener()
    removed = _RecordingListener()
    registry.register(kept, context)
    registry.register(removed, context)

    registry.unregister(removed)
    registry.publish_if_changed(_state())
    context.run_all()

    assert kept.received == [_state()]
    assert removed.received == []


def test_listener_removed_before_dispatch_is_skipped() -> None:
    registry = ListenerRegistry()
    context = _QueuedContext()
    listener = _RecordingListener()
    registry.register(listener, context)

    registry.publish_if_changed(_state())
    registry.unregister(listener)
    context.run_all()

    assert listener.received == []


def test_listener_added_after_publish_misses_it_but_gets_the_next() -> None:
    registry = ListenerRegistry()
    context = _QueuedContext()
    early = _RecordingListener()
    late = _RecordingListener()
    registry.register(early, context)

    registry.publish_if_changed(_state())
    registry.register(late, context)
    registry.publish_if_changed(_state(offset=86_400_000))
    context.run_all()

    assert early.received == [_state(), _state(offset=86_400_000)]
    assert late.received == [_state(offset=86_400_000)]


def test_unregister_unknown_listener_is_noop_and_register_replaces() -> None:
    registry = ListenerRegistry()
    first = _QueuedContext()
    second = _QueuedContext()
    listener = _RecordingListener()

    registry.unregister(listener)
    registry.register(listener, first)
    registry.register(listener, second)
    registry.publish_if_changed(_state())

    assert len(registry) == 1
    assert first.tasks == []
    second.run_all()
    assert listener.received == [_state()]


def test_failing_listener_does_not_block_others() -> None:
    registry = ListenerRegistry()
    context = _QueuedContext()
    healthy = _RecordingListener()
    registry.register(_FailingListener(), context)
    registry.register(healthy, context)

    registry.publish_if_changed(_state())
    context.run_all()

    assert healthy.received == [_state()]


def test_executor_context_preserves_publish_order_per_listener() -> None:
    registry = ListenerRegistry()
    context = ExecutorDeliveryContext()
    listener = _RecordingListener()
    registry.register(listener, context)
    delivered_on: list[str] = []

    class _ThreadRecorder:
        def on_twilight_state_changed(self, state: TwilightState | None) -> None:
            delivered_on.append(threading.current_thread().name)

    registry.register(_ThreadRecorder(), context)
    expected = [_state(offset=i * 10) for i in range(20)]
    for state in expected:
        registry.publish_if_changed(state)
    context.shutdown(wait=True)

    assert listener.received == expected
    assert delivered_on
    assert threading.current_thread().name not in delivered_on


def test_closed_context_does_not_stop_fan_out(caplog) -> None:
    registry = ListenerRegistry()
    closed = ExecutorDeliveryContext()
    closed.shutdown(wait=True)
    context = _QueuedContext()
    stranded = _RecordingListener()
    healthy = _RecordingListener()
    registry.register(stranded, closed)
    registry.register(healthy, context)

    assert registry.publish_if_changed(_state()) is True
    context.run_all()

    assert stranded.received == []
    assert healthy.received == [_state()]
    assert registry.current_state() == _state()
    assert "Could not post twilight state" in caplog.text
