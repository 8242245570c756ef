"""
Learning: adaptive item selection.

- weights: statistics -> selection weight (error rate, recency, difficulty)
- sampler: weighted random selection without replacement
- progress: read-only progress views and export
"""

from src.learning.progress import (
    export_statistics,
    items_needing_practice,
    overall_success_rate,
    recommended_round_size,
)
from src.learning.sampler import normalize_weights, shuffled, weighted_sample
from src.learning.weights import (
    DEFAULT_WEIGHT_CONFIG,
    WeightConfig,
    calculate_weight,
    score_candidates,
)

__all__ = [
    # Weights
    "WeightConfig",
    "DEFAULT_WEIGHT_CONFIG",
    "calculate_weight",
    "score_candidates",
    # Sampling
    "normalize_weights",
    "weighted_sample",
    "shuffled",
    # Progress
    "overall_success_rate",
    "items_needing_practice",
    "recommended_round_size",
    "export_statistics",
]
