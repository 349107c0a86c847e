"""LiveFeed - connect/disconnect lifecycle around the simulator and bus."""
from __future__ import annotations

import logging
import os
import random
import threading
from typing import Any, Callable, Literal, overload

from desk_signal import EventBus

from desk_live.config import LiveFeedConfig
from desk_live.provider import TrainingStateProvider
from desk_live.simulator import LiveUpdateSimulator
from desk_live.timers import ThreadTimer, Timer
from desk_live.types import (
    AlreadyConnectedError,
    Channel,
    ConnectionState,
    HeatmapDelta,
    KpiDelta,
    SlaBreachTicket,
    TickResult,
)

logger = logging.getLogger(__name__)


class LiveFeed:
    """Simulated real-time update feed for the dashboard.

    Create one per application (or per test) and hand it to the consumers
    that need it. ``connect()`` arms the recurring timer; every firing runs
    one simulator tick that publishes on the bus. ``disconnect()`` cancels the
    timer and clears every subscription.

    Args:
        provider: Training-state source, queried once per tick.
        config: Feed configuration, defaults to ``LiveFeedConfig()``.
        bus: Event bus to publish on, a fresh one by default.
        timer: Timer driver, a ``ThreadTimer`` by default.
        seed: Seed for the feed's random source. Drawn from ``os.urandom``
            when None.
    """

    def __init__(
        self,
        provider: TrainingStateProvider,
        config: LiveFeedConfig | None = None,
        *,
        bus: EventBus | None = None,
        timer: Timer | None = None,
        seed: int | None = None,
    ) -> None:
        self.config: LiveFeedConfig = config if config is not None else LiveFeedConfig()
        self._provider = provider
        self._bus = bus if bus is not None else EventBus()
        self._timer: Timer = timer if timer is not None else ThreadTimer()
        self._state = ConnectionState.DISCONNECTED
        self._tick_lock = threading.Lock()
        self._tick_thread: int | None = None

        if seed is None:
            seed = int.from_bytes(os.urandom(8))
        self._seed = seed
        self._rng = random.Random(seed)
        self._simulator = LiveUpdateSimulator(self._bus, self._rng, self.config)

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    @property
    def simulator(self) -> LiveUpdateSimulator:
        return self._simulator

    # --- Lifecycle ---

    def connect(self) -> None:
        if self._state is ConnectionState.CONNECTED:
            raise AlreadyConnectedError("feed is already connected")
        self._timer.start(self.config.interval, self._on_timer)
        self._state = ConnectionState.CONNECTED
        logger.info("Connected, ticking every %.3fs", self.config.interval)

    def disconnect(self) -> None:
        if self._state is ConnectionState.CONNECTED:
            self._timer.cancel()
            self._state = ConnectionState.DISCONNECTED
            logger.info("Disconnected")
        self._bus.clear()

    def __enter__(self) -> LiveFeed:
        self.connect()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.disconnect()

    # --- Subscription ---

    @overload
    def subscribe(
        self, channel: Literal[Channel.KPI_UPDATE], callback: Callable[[KpiDelta], None]
    ) -> None: ...

    @overload
    def subscribe(
        self, channel: Literal[Channel.HEATMAP_UPDATE], callback: Callable[[HeatmapDelta], None]
    ) -> None: ...

    @overload
    def subscribe(
        self, channel: Literal[Channel.NEW_SLA_TICKET], callback: Callable[[SlaBreachTicket], None]
    ) -> None: ...

    @overload
    def subscribe(self, channel: str, callback: Callable[[Any], None]) -> None: ...

    def subscribe(self, channel: str, callback: Callable[[Any], None]) -> None:
        self._bus.subscribe(channel, callback)

    # --- Publishing ---

    def step(self) -> TickResult:
        """Run one simulation pass immediately. Exceptions propagate.

        Waits for a timer tick in progress on another thread to finish.
        Calling it from a subscriber during a tick raises RuntimeError.
        """
        if self._tick_thread == threading.get_ident():
            raise RuntimeError("step() called from within a tick")
        with self._tick_lock:
            return self._run_tick()

    def emit_new_ticket(self, ticket: SlaBreachTicket) -> None:
        self._bus.publish(Channel.NEW_SLA_TICKET, ticket)
        logger.info("Emitted new_sla_ticket %s", ticket.ticket_no)

    def emit_heatmap_update(self, update: HeatmapDelta) -> None:
        self._bus.publish(Channel.HEATMAP_UPDATE, update)
        logger.info("Emitted heatmap_update %s/%s +%d", update.category, update.priority, update.value)

    def _run_tick(self) -> TickResult:
        self._tick_thread = threading.get_ident()
        try:
            return self._simulator.tick(self._provider)
        finally:
            self._tick_thread = None

    def _on_timer(self) -> None:
        if not self._tick_lock.acquire(blocking=False):
            logger.debug("Previous tick still running, firing dropped")
            return
        try:
            self._run_tick()
        except Exception:
            logger.exception("Tick failed, skipped")
        finally:
            self._tick_lock.release()
