"""
Weighted Random Selection.

Selects items proportionally to their weights, without replacement by
default. After every draw the chosen item leaves the pool and the remaining
weights are re-normalized.
"""

from __future__ import annotations

import math
import random
from collections.abc import Sequence
from typing import TypeVar

from src.core.items import ItemKey
from src.core.models import WeightedCandidate

T = TypeVar("T")

_default_rng = random.Random()


def normalize_weights(candidates: Sequence[WeightedCandidate]) -> list[WeightedCandidate]:
    """
    Scale weights into a probability distribution summing to 1.

    An all-zero pool falls back to a uniform distribution.

    Raises:
        ValueError: a weight is negative, NaN or infinite
    """
    if not candidates:
        return []

    for candidate in candidates:
        if not math.isfinite(candidate.weight) or candidate.weight < 0:
            raise ValueError(f"Invalid weight {candidate.weight!r} for {candidate.item}")

    total = math.fsum(c.weight for c in candidates)
    if total == 0:
        even = 1.0 / len(candidates)
        return [WeightedCandidate(c.item, even) for c in candidates]

    return [WeightedCandidate(c.item, c.weight / total) for c in candidates]


def _draw_index(distribution: Sequence[WeightedCandidate], rng: random.Random) -> int:
    """Index of the first entry whose cumulative probability reaches a uniform draw."""
    draw = rng.random()
    cumulative = 0.0
    for index, candidate in enumerate(distribution):
        cumulative += candidate.weight
        if draw <= cumulative:
            return index
    # Rounding left the cumulative sum a hair under the draw
    return len(distribution) - 1


def weighted_sample(
    candidates: Sequence[WeightedCandidate],
    count: int,
    allow_repeats: bool = False,
    rng: random.Random | None = None,
) -> list[ItemKey]:
    """
    Select items by weight.

    Args:
        candidates: Items with non-negative weights
        count: Number of items wanted
        allow_repeats: Draw with replacement (``count`` draws, duplicates possible)
        rng: Random source (module-level generator if omitted)

    Returns:
        Items in selection order. Without repeats: exactly
        min(count, len(candidates)) distinct items.
    """
    if not candidates or count <= 0:
        return []

    rng = rng or _default_rng
    available = normalize_weights(candidates)

    if allow_repeats:
        return [available[_draw_index(available, rng)].item for _ in range(count)]

    selected: list[ItemKey] = []
    for _ in range(min(count, len(available))):
        index = _draw_index(available, rng)
        selected.append(available.pop(index).item)
        available = normalize_weights(available)

    return selected


def shuffled(items: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """Fisher-Yates shuffled copy of ``items``."""
    result = list(items)
    (rng or _default_rng).shuffle(result)
    return result
