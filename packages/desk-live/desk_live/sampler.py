"""Weighted random selection over parallel item/weight sequences."""
from __future__ import annotations

from typing import Sequence, TypeVar

from desk_live.types import RandomSource

T = TypeVar("T")


def pick_index(rng: RandomSource, n: int) -> int:
    """Uniform index in [0, n) drawn from ``rng.random()``."""
    return min(int(rng.random() * n), n - 1)


def weighted_choice(
    items: Sequence[T], weights: Sequence[float], rng: RandomSource
) -> T | None:
    """Draw one item with probability proportional to its weight.

    Returns None for empty ``items``. A zero total weight falls back to a
    uniform draw. The scan runs low to high over the cumulative weights; if
    float rounding exhausts it, the last item is returned.
    """
    if len(items) != len(weights):
        raise ValueError(
            f"items and weights differ in length ({len(items)} != {len(weights)})"
        )
    for w in weights:
        if w < 0:
            raise ValueError(f"weights must be >= 0, got {w}")
    if not items:
        return None

    total = sum(weights)
    if total == 0:
        return items[pick_index(rng, len(items))]

    remaining = rng.random() * total
    for item, weight in zip(items, weights):
        if remaining < weight:
            return item
        remaining -= weight
    return items[-1]
