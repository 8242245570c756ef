"""
Adaptive Weight Calculator.

Turns an item's attempt history into a selection weight:
lower success rate = higher weight = more likely to appear.

    unseen item                   -> 1.0 (full coverage before tuning)
    w = 1 - success_rate
    last attempt older than 7d    -> w * 1.2 (surface possible decay)
    difficulty transform          -> relaxed 0.3 + 0.7w | standard w | intensive w^0.7
    floor                         -> max(w, 0.1) (no item is ever starved)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from src.core.models import Difficulty, ItemStatistic, WeightedCandidate, utcnow


@dataclass(frozen=True)
class WeightConfig:
    """Constants of the weighting model."""

    unseen_weight: float = 1.0
    recency_threshold: timedelta = timedelta(days=7)
    recency_boost: float = 1.2
    relaxed_base: float = 0.3
    relaxed_scale: float = 0.7
    intensive_exponent: float = 0.7
    minimum_weight: float = 0.1


DEFAULT_WEIGHT_CONFIG = WeightConfig()


def error_weight(stat: ItemStatistic) -> float:
    """1 - success rate: mastered items near 0, struggling items near 1."""
    return 1.0 - stat.success_rate


def recency_factor(
    stat: ItemStatistic,
    now: datetime,
    config: WeightConfig = DEFAULT_WEIGHT_CONFIG,
) -> float:
    if stat.last_attempt_at is None:
        return 1.0
    if now - stat.last_attempt_at > config.recency_threshold:
        return config.recency_boost
    return 1.0


def apply_difficulty(
    weight: float,
    difficulty: Difficulty,
    config: WeightConfig = DEFAULT_WEIGHT_CONFIG,
) -> float:
    """Reshape a weight for the difficulty tier. Monotonic in ``weight`` for every tier."""
    if difficulty is Difficulty.RELAXED:
        # Compress the spread toward uniform sampling
        return config.relaxed_base + config.relaxed_scale * weight
    if difficulty is Difficulty.INTENSIVE:
        # Exponent < 1 expands small differences, keeps 0 and 1 fixed
        return weight**config.intensive_exponent
    return weight


def calculate_weight(
    stat: ItemStatistic,
    difficulty: Difficulty = Difficulty.STANDARD,
    now: datetime | None = None,
    config: WeightConfig = DEFAULT_WEIGHT_CONFIG,
) -> float:
    """
    Selection weight for one item.

    Args:
        stat: Attempt history of the item
        difficulty: Difficulty tier of the round
        now: Reference time for the recency check (defaults to current UTC time)
        config: Model constants

    Returns:
        Weight >= config.minimum_weight; exactly config.unseen_weight for unseen items
    """
    if stat.total_attempts == 0:
        return config.unseen_weight

    now = now or utcnow()
    weight = error_weight(stat) * recency_factor(stat, now, config)
    weight = apply_difficulty(weight, Difficulty(difficulty), config)
    return max(weight, config.minimum_weight)


def score_candidates(
    stats: Iterable[ItemStatistic],
    difficulty: Difficulty = Difficulty.STANDARD,
    now: datetime | None = None,
    config: WeightConfig = DEFAULT_WEIGHT_CONFIG,
) -> list[WeightedCandidate]:
    """Weight a batch of statistics against one shared reference time."""
    now = now or utcnow()
    return [
        WeightedCandidate(item=stat.item, weight=calculate_weight(stat, difficulty, now, config))
        for stat in stats
    ]
