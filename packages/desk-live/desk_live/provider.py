"""Training-state provider protocol and in-memory implementation."""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from desk_live.types import DataDistribution, TrainingState


@runtime_checkable
class TrainingStateProvider(Protocol):
    """Source of the model training state, queried once per tick.

    Implementations may hit the network; the feed logs and skips a tick
    whose query raises.
    """

    def get_training_state(self) -> TrainingState:
        """Return the current training state snapshot."""
        ...


class TrainingStateStore:
    """In-memory training state, standing in for the dashboard API.

    Conforms to the TrainingStateProvider protocol. Starts untrained with no
    distribution. ``calls`` counts how many snapshots have been served.
    """

    def __init__(self, state: TrainingState | None = None) -> None:
        self._state = state if state is not None else TrainingState(is_model_trained=False)
        self.calls = 0

    def get_training_state(self) -> TrainingState:
        self.calls += 1
        return self._state

    def set_state(self, state: TrainingState) -> None:
        self._state = state

    def train(self, distribution: DataDistribution) -> None:
        """Mark the model trained on ``distribution``."""
        self._state = TrainingState(is_model_trained=True, data_distribution=distribution)

    def reset(self) -> None:
        self._state = TrainingState(is_model_trained=False)
