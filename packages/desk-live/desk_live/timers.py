"""Recurring timer drivers for the live feed.

Two drivers share the Timer protocol: ThreadTimer paces real time on a
background thread, ManualTimer advances virtual time on demand for
deterministic tests and simulations.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

_EPSILON = 1e-9


class Timer(Protocol):
    """Recurring timer armed once per connection."""

    @property
    def active(self) -> bool: ...

    def start(self, interval: float, callback: Callable[[], None]) -> None:
        """Fire ``callback`` every ``interval`` seconds until cancelled."""
        ...

    def cancel(self) -> None:
        """Stop firing. Safe to call when not started."""
        ...


class ManualTimer:
    """Timer driven by explicit ``advance()`` calls."""

    def __init__(self) -> None:
        self._interval = 0.0
        self._callback: Callable[[], None] | None = None
        self._elapsed = 0.0
        self._due = 0
        self.fired = 0

    @property
    def active(self) -> bool:
        return self._callback is not None

    def start(self, interval: float, callback: Callable[[], None]) -> None:
        if self._callback is not None:
            raise RuntimeError("timer already started")
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._interval = interval
        self._callback = callback
        self._elapsed = 0.0
        self._due = 0

    def cancel(self) -> None:
        self._callback = None
        self._elapsed = 0.0
        self._due = 0

    def advance(self, seconds: float) -> int:
        """Move virtual time forward, firing once per interval crossed.

        Returns the number of firings. Stops early if the callback cancels
        the timer.
        """
        if self._callback is None:
            return 0
        self._elapsed += seconds
        count = 0
        # Firing times are multiples of the interval since start(); the
        # tolerance absorbs float error in the running total.
        while (
            self._callback is not None
            and (self._due + 1) * self._interval <= self._elapsed + _EPSILON
        ):
            self._due += 1
            callback = self._callback
            self.fired += 1
            count += 1
            callback()
        return count


class ThreadTimer:
    """Timer running on a daemon thread.

    Firings are serialized on the timer thread. A firing that overruns one or
    more intervals drops the missed firings instead of running them back to
    back. ``cancel()`` interrupts a pending wait immediately and waits for an
    in-flight firing to finish, unless called from that firing.
    """

    def __init__(self, name: str = "desk-live-timer") -> None:
        self._name = name
        self._thread: threading.Thread | None = None
        self._stop = threading.Event()

    @property
    def active(self) -> bool:
        return self._thread is not None and not self._stop.is_set()

    def start(self, interval: float, callback: Callable[[], None]) -> None:
        if self._thread is not None:
            raise RuntimeError("timer already started")
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            args=(interval, callback, self._stop),
            name=self._name,
            daemon=True,
        )
        self._thread.start()

    def cancel(self) -> None:
        thread = self._thread
        if thread is None:
            return
        self._stop.set()
        self._thread = None
        if thread is not threading.current_thread():
            thread.join()

    @staticmethod
    def _run(interval: float, callback: Callable[[], None], stop: threading.Event) -> None:
        next_fire = time.monotonic() + interval
        while not stop.wait(max(0.0, next_fire - time.monotonic())):
            try:
                callback()
            except Exception:
                logger.exception("Timer callback failed")
            next_fire += interval
            now = time.monotonic()
            if next_fire <= now:
                missed = int((now - next_fire) // interval) + 1
                next_fire += missed * interval
                logger.debug("Timer overran, dropped %d firing(s)", missed)
