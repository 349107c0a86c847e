"""Live feed configuration dataclass."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LiveFeedConfig:
    """Immutable configuration for the live update feed.

    Attributes:
        interval: Seconds between simulation ticks.
        trained_deflection_base: Deflection rate (%) around which values
            jitter once a model is trained.
        untrained_deflection_base: Deflection rate (%) before training.
        deflection_jitter: Half-width of the uniform deflection noise.
        trained_resolution_base: Average time to resolution once trained.
        untrained_resolution_base: Average time to resolution before training.
        resolution_jitter: Half-width of the uniform resolution noise.
        heatmap_increment: Ticket count added to a heatmap cell per tick.
    """

    interval: float = 5.0
    trained_deflection_base: float = 85.2
    untrained_deflection_base: float = 78.0
    deflection_jitter: float = 0.25
    trained_resolution_base: float = 3.8
    untrained_resolution_base: float = 4.0
    resolution_jitter: float = 0.1
    heatmap_increment: int = 1

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ValueError(f"interval must be > 0, got {self.interval}")
        if self.deflection_jitter < 0:
            raise ValueError(f"deflection_jitter must be >= 0, got {self.deflection_jitter}")
        if self.resolution_jitter < 0:
            raise ValueError(f"resolution_jitter must be >= 0, got {self.resolution_jitter}")
        if self.heatmap_increment < 1:
            raise ValueError(f"heatmap_increment must be >= 1, got {self.heatmap_increment}")
