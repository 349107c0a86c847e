"""Per-tick synthesis of KPI and heatmap deltas from the training state."""
from __future__ import annotations

import logging
import math

from desk_signal import EventBus

from desk_live.config import LiveFeedConfig
from desk_live.provider import TrainingStateProvider
from desk_live.sampler import pick_index, weighted_choice
from desk_live.types import (
    Channel,
    HeatmapDelta,
    KpiDelta,
    RandomSource,
    TickResult,
    TrainingState,
)

logger = logging.getLogger(__name__)


def _round1(x: float) -> float:
    """Round half up to one decimal place."""
    return math.floor(x * 10 + 0.5) / 10


class LiveUpdateSimulator:
    """Synthesizes one KPI delta and at most one heatmap delta per tick.

    Holds no cumulative state: every tick depends only on the training state
    snapshot passed in and the random source.
    """

    def __init__(
        self,
        bus: EventBus,
        rng: RandomSource,
        config: LiveFeedConfig | None = None,
    ) -> None:
        self._bus = bus
        self._rng = rng
        self.config: LiveFeedConfig = config if config is not None else LiveFeedConfig()

    def tick(self, provider: TrainingStateProvider) -> TickResult:
        """Query ``provider``, compute the deltas and publish them."""
        result = self.compute(provider.get_training_state())

        self._bus.publish(Channel.KPI_UPDATE, result.kpi)
        logger.debug("Published kpi_update %s", result.kpi)

        if result.heatmap is not None:
            self._bus.publish(Channel.HEATMAP_UPDATE, result.heatmap)
            logger.debug("Published heatmap_update %s", result.heatmap)
        elif result.skip_reason == "weights_mismatch":
            # Broken upstream payload rather than an expected idle state.
            logger.warning("Heatmap update skipped: category weights do not match categories")
        else:
            logger.debug("Heatmap update skipped: %s", result.skip_reason)
        return result

    def compute(self, state: TrainingState) -> TickResult:
        kpi = self._kpi_delta(state.is_model_trained)
        heatmap, reason = self._heatmap_delta(state)
        return TickResult(kpi=kpi, heatmap=heatmap, skip_reason=reason)

    def _uniform(self, low: float, high: float) -> float:
        return low + (high - low) * self._rng.random()

    def _kpi_delta(self, trained: bool) -> KpiDelta:
        cfg = self.config
        if trained:
            deflection_base = cfg.trained_deflection_base
            time_base = cfg.trained_resolution_base
        else:
            deflection_base = cfg.untrained_deflection_base
            time_base = cfg.untrained_resolution_base

        deflection = _round1(
            deflection_base + self._uniform(-cfg.deflection_jitter, cfg.deflection_jitter)
        )
        resolution = _round1(
            time_base + self._uniform(-cfg.resolution_jitter, cfg.resolution_jitter)
        )
        return KpiDelta(
            deflection_rate=min(100.0, max(0.0, deflection)),
            avg_time_to_resolution=max(0.0, resolution),
        )

    def _heatmap_delta(self, state: TrainingState) -> tuple[HeatmapDelta | None, str | None]:
        if not state.is_model_trained:
            return None, "model_untrained"
        dist = state.data_distribution
        if dist is None:
            return None, "no_distribution"
        if not dist.categories:
            return None, "no_categories"
        if not dist.priorities:
            return None, "no_priorities"
        if len(dist.categories) != len(dist.category_weights):
            return None, "weights_mismatch"

        category = weighted_choice(dist.categories, dist.category_weights, self._rng)
        priority = dist.priorities[pick_index(self._rng, len(dist.priorities))]
        if category is None:
            return None, "unresolved_sample"
        return HeatmapDelta(category, priority, self.config.heatmap_increment), None
