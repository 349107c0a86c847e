"""In-memory pub/sub event bus with synchronous, snapshot-based dispatch."""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable

logger = logging.getLogger(__name__)

_Callback = Callable[[Any], None]
_ErrorHook = Callable[[str, _Callback, Exception], None]


class EventBus:
    """Channel-keyed registry of subscriber callbacks.

    Subscriber lists are append-only until ``clear()``. ``publish`` invokes
    every subscriber of the channel once, in registration order, on the
    calling thread. A subscriber that raises is logged and reported to the
    error hooks; the remaining subscribers still run.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[_Callback]] = {}
        self._error_hooks: list[_ErrorHook] = []
        self._lock = threading.RLock()

    def subscribe(self, channel: str, callback: _Callback) -> None:
        if not callable(callback):
            raise TypeError("subscriber callback must be callable")
        with self._lock:
            self._subscribers.setdefault(channel, []).append(callback)

    def publish(self, channel: str, payload: Any = None) -> None:
        with self._lock:
            callbacks = self._subscribers.get(channel)
            if not callbacks:
                return
            # Subscribers added during dispatch wait for the next publish.
            snapshot = list(callbacks)
        for callback in snapshot:
            try:
                callback(payload)
            except Exception as exc:
                logger.exception("Subscriber %r on channel %r failed", callback, channel)
                self._report(channel, callback, exc)

    def clear(self) -> None:
        with self._lock:
            self._subscribers.clear()

    def channels(self) -> list[str]:
        with self._lock:
            return list(self._subscribers)

    def subscriber_count(self, channel: str) -> int:
        with self._lock:
            return len(self._subscribers.get(channel, ()))

    def on_error(self, hook: _ErrorHook) -> None:
        """Register ``hook(channel, callback, exc)`` for failing subscribers."""
        self._error_hooks.append(hook)

    def _report(self, channel: str, callback: _Callback, exc: Exception) -> None:
        for hook in list(self._error_hooks):
            try:
                hook(channel, callback, exc)
            except Exception:
                logger.exception("Error hook %r failed", hook)
