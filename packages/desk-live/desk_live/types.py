"""Channels, payloads, training-state snapshots and errors for the live feed."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Protocol


class Channel(str, Enum):
    """Documented channels. Members compare equal to their string values."""

    KPI_UPDATE = "kpi_update"
    HEATMAP_UPDATE = "heatmap_update"
    NEW_SLA_TICKET = "new_sla_ticket"


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class FeedError(Exception):
    """Base class for live feed errors."""


class AlreadyConnectedError(FeedError):
    """Raised by connect() while the feed is already connected."""


class RandomSource(Protocol):
    """Anything with ``random() -> float`` in [0, 1). ``random.Random`` qualifies."""

    def random(self) -> float: ...


# --- Payloads ---


@dataclass(frozen=True, slots=True)
class KpiDelta:
    """Latest KPI values, merged by consumers into their own state."""

    deflection_rate: float
    avg_time_to_resolution: float

    def to_dict(self) -> dict[str, float]:
        return {
            "deflectionRate": self.deflection_rate,
            "avgTimeToResolution": self.avg_time_to_resolution,
        }


@dataclass(frozen=True, slots=True)
class HeatmapDelta:
    """Increment the ticket count of one category/priority cell."""

    category: str
    priority: str
    value: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {"category": self.category, "priority": self.priority, "value": self.value}


@dataclass(frozen=True, slots=True)
class SlaBreachTicket:
    """Open ticket at risk of breaching its SLA."""

    ticket_no: str
    priority: str
    time_to_breach: str

    def to_dict(self) -> dict[str, str]:
        return {
            "ticket_no": self.ticket_no,
            "priority": self.priority,
            "timeToBreach": self.time_to_breach,
        }


@dataclass(frozen=True, slots=True)
class TickResult:
    """Outcome of one simulation pass.

    ``heatmap`` is None when the pass emitted no heatmap delta; ``skip_reason``
    then says why.
    """

    kpi: KpiDelta
    heatmap: HeatmapDelta | None = None
    skip_reason: str | None = None


# --- External training state ---


@dataclass(frozen=True, slots=True)
class DataDistribution:
    """Category weights (ticket volume) and the priority labels in use."""

    categories: tuple[str, ...]
    category_weights: tuple[float, ...]
    priorities: tuple[str, ...]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DataDistribution:
        try:
            return cls(
                categories=tuple(data["categories"]),
                category_weights=tuple(data["categoryWeights"]),
                priorities=tuple(data["priorities"]),
            )
        except KeyError as exc:
            raise ValueError(f"dataDistribution is missing {exc.args[0]!r}") from None


@dataclass(frozen=True, slots=True)
class TrainingState:
    is_model_trained: bool
    data_distribution: DataDistribution | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TrainingState:
        """Build from the API's camelCase training-state mapping."""
        if "isModelTrained" not in data:
            raise ValueError("training state is missing 'isModelTrained'")
        trained = data["isModelTrained"]
        if not isinstance(trained, bool):
            raise ValueError(f"'isModelTrained' must be a boolean, got {trained!r}")
        raw = data.get("dataDistribution")
        return cls(
            is_model_trained=trained,
            data_distribution=DataDistribution.from_dict(raw) if raw is not None else None,
        )
