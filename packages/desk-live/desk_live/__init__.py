"""desk-live - Simulated live update feed for the help-desk dashboard."""
from __future__ import annotations

from desk_live.config import LiveFeedConfig
from desk_live.connection import LiveFeed
from desk_live.consumers import HeatmapGrid, KpiBoard, SlaFeedEntry, SlaTicketFeed
from desk_live.provider import TrainingStateProvider, TrainingStateStore
from desk_live.sampler import weighted_choice
from desk_live.simulator import LiveUpdateSimulator
from desk_live.timers import ManualTimer, ThreadTimer, Timer
from desk_live.types import (
    AlreadyConnectedError,
    Channel,
    ConnectionState,
    DataDistribution,
    FeedError,
    HeatmapDelta,
    KpiDelta,
    RandomSource,
    SlaBreachTicket,
    TickResult,
    TrainingState,
)

__all__ = [
    "AlreadyConnectedError",
    "Channel",
    "ConnectionState",
    "DataDistribution",
    "FeedError",
    "HeatmapDelta",
    "HeatmapGrid",
    "KpiBoard",
    "KpiDelta",
    "LiveFeed",
    "LiveFeedConfig",
    "LiveUpdateSimulator",
    "ManualTimer",
    "RandomSource",
    "SlaBreachTicket",
    "SlaFeedEntry",
    "SlaTicketFeed",
    "ThreadTimer",
    "TickResult",
    "Timer",
    "TrainingState",
    "TrainingStateProvider",
    "TrainingStateStore",
    "weighted_choice",
]
