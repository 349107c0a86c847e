"""Unit tests for EventBus."""
from __future__ import annotations

import logging

import pytest

from desk_signal import EventBus


def test_subscribe_and_publish():
    """Subscribe callback, publish payload, callback receives it immediately."""
    bus = EventBus()
    received = []

    bus.subscribe("test_channel", received.append)
    bus.publish("test_channel", {"value": 42})

    assert received == [{"value": 42}]


def test_publish_without_subscribers():
    """Publish on a channel nobody listens to is a no-op (no error)."""
    bus = EventBus()
    bus.publish("no_subscribers", 123)  # Should not raise
    assert bus.channels() == []


def test_publish_default_payload_is_none():
    """Publish without payload passes None."""
    bus = EventBus()
    received = []

    bus.subscribe("ping", received.append)
    bus.publish("ping")

    assert received == [None]


def test_two_subscribers_called_once_in_order():
    """Two subscribers on "x", one publish, both invoked once in registration order."""
    bus = EventBus()
    order = []

    bus.subscribe("x", lambda payload: order.append(("first", payload)))
    bus.subscribe("x", lambda payload: order.append(("second", payload)))

    bus.publish("x", 7)

    assert order == [("first", 7), ("second", 7)]


def test_handler_registration_order():
    """Verify callbacks are called in exact registration order."""
    bus = EventBus()
    order = []

    bus.subscribe("event", lambda _: order.append(1))
    bus.subscribe("event", lambda _: order.append(2))
    bus.subscribe("event", lambda _: order.append(3))

    bus.publish("event")

    assert order == [1, 2, 3]


def test_channels_are_isolated():
    """Different channel names route to different callbacks."""
    bus = EventBus()
    alpha = []
    beta = []

    bus.subscribe("alpha", alpha.append)
    bus.subscribe("beta", beta.append)

    bus.publish("alpha", 1)
    bus.publish("beta", 2)

    assert alpha == [1]
    assert beta == [2]


def test_same_callback_twice_invoked_twice():
    """Subscribing the same callback twice results in two calls per publish."""
    bus = EventBus()
    received = []

    bus.subscribe("test", received.append)
    bus.subscribe("test", received.append)
    bus.publish("test", "payload")

    assert received == ["payload", "payload"]
    assert bus.subscriber_count("test") == 2


def test_publish_is_synchronous():
    """All callbacks have run by the time publish returns."""
    bus = EventBus()
    done = []

    bus.subscribe("sync", lambda _: done.append(True))
    bus.publish("sync")

    assert done == [True]


def test_clear_removes_everything():
    """clear() then publish on a previously subscribed channel invokes nothing."""
    bus = EventBus()
    received = []

    bus.subscribe("a", received.append)
    bus.subscribe("b", received.append)
    bus.clear()

    bus.publish("a", 1)
    bus.publish("b", 2)

    assert received == []
    assert bus.channels() == []
    assert bus.subscriber_count("a") == 0


def test_subscribe_after_clear():
    """The bus is usable again after clear()."""
    bus = EventBus()
    received = []

    bus.subscribe("a", lambda _: received.append("old"))
    bus.clear()
    bus.subscribe("a", lambda _: received.append("new"))
    bus.publish("a")

    assert received == ["new"]


def test_subscribe_non_callable_raises():
    bus = EventBus()
    with pytest.raises(TypeError):
        bus.subscribe("a", "not a callback")  # type: ignore[arg-type]


class TestFailureIsolation:
    """A raising subscriber must not break the fan-out."""

    def test_later_subscriber_still_invoked(self):
        """Subscriber raises, later-registered subscriber runs in the same publish."""
        bus = EventBus()
        received = []

        def broken(payload):
            raise RuntimeError("boom")

        bus.subscribe("x", broken)
        bus.subscribe("x", received.append)

        bus.publish("x", "hello")  # Should not raise

        assert received == ["hello"]

    def test_failure_is_logged(self, caplog):
        bus = EventBus()

        def broken(payload):
            raise RuntimeError("boom")

        bus.subscribe("x", broken)
        with caplog.at_level(logging.ERROR, logger="desk_signal.bus"):
            bus.publish("x")

        assert any("channel 'x'" in r.getMessage() for r in caplog.records)
        assert caplog.records[-1].exc_info is not None

    def test_error_hook_receives_failure(self):
        bus = EventBus()
        failures = []
        exc = ValueError("bad payload")

        def broken(payload):
            raise exc

        bus.on_error(lambda channel, callback, error: failures.append((channel, callback, error)))
        bus.subscribe("x", broken)
        bus.publish("x")

        assert failures == [("x", broken, exc)]

    def test_failing_error_hook_does_not_abort_dispatch(self):
        bus = EventBus()
        received = []

        def broken(payload):
            raise RuntimeError("boom")

        def broken_hook(channel, callback, error):
            raise RuntimeError("hook boom")

        bus.on_error(broken_hook)
        bus.subscribe("x", broken)
        bus.subscribe("x", received.append)
        bus.publish("x", 1)

        assert received == [1]

    def test_error_hooks_survive_clear(self):
        bus = EventBus()
        failures = []

        def broken(payload):
            raise RuntimeError("boom")

        bus.on_error(lambda channel, callback, error: failures.append(channel))
        bus.clear()
        bus.subscribe("y", broken)
        bus.publish("y")

        assert failures == ["y"]


class TestDispatchSnapshot:
    """Mutation during dispatch is resolved against a snapshot."""

    def test_subscribe_during_publish_deferred(self):
        """Callback subscribed during dispatch does not receive that publish."""
        bus = EventBus()
        received = []

        def late(payload):
            received.append(("late", payload))

        def registering(payload):
            received.append(("registering", payload))
            bus.subscribe("event", late)

        bus.subscribe("event", registering)

        bus.publish("event", 1)
        assert received == [("registering", 1)]

        bus.publish("event", 2)
        assert received == [("registering", 1), ("registering", 2), ("late", 2)]

    def test_clear_during_publish_finishes_snapshot(self):
        """clear() inside a callback lets the current publish finish."""
        bus = EventBus()
        received = []

        def clearing(payload):
            received.append("clearing")
            bus.clear()

        bus.subscribe("event", clearing)
        bus.subscribe("event", lambda _: received.append("second"))

        bus.publish("event")
        assert received == ["clearing", "second"]

        bus.publish("event")
        assert received == ["clearing", "second"]

    def test_nested_publish_runs_immediately(self):
        """Publishing from a callback dispatches synchronously, no queuing."""
        bus = EventBus()
        order = []

        def outer(payload):
            order.append("outer-start")
            bus.publish("inner", None)
            order.append("outer-end")

        bus.subscribe("outer", outer)
        bus.subscribe("inner", lambda _: order.append("inner"))

        bus.publish("outer")

        assert order == ["outer-start", "inner", "outer-end"]


def test_channels_lists_in_creation_order():
    bus = EventBus()
    bus.subscribe("b", print)
    bus.subscribe("a", print)
    bus.subscribe("b", print)

    assert bus.channels() == ["b", "a"]
    assert bus.subscriber_count("b") == 2
    assert bus.subscriber_count("missing") == 0
