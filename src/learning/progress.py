"""
Progress views over item statistics.

Read-only helpers for progress displays: overall success, items that need
practice, a recommended round size and a JSON export for backup/sharing.
"""

from __future__ import annotations

import json
import math
from collections.abc import Sequence
from datetime import datetime

from src.core.models import ItemStatistic, utcnow


def overall_success_rate(stats: Sequence[ItemStatistic]) -> float:
    """Mean success rate over attempted items (0.0 when nothing was attempted)."""
    attempted = [s for s in stats if s.total_attempts > 0]
    if not attempted:
        return 0.0
    return math.fsum(s.success_rate for s in attempted) / len(attempted)


def items_needing_practice(
    stats: Sequence[ItemStatistic],
    threshold: float = 0.7,
    limit: int = 10,
) -> list[ItemStatistic]:
    """Attempted items below ``threshold``, weakest first."""
    struggling = [s for s in stats if s.total_attempts > 0 and s.success_rate < threshold]
    struggling.sort(key=lambda s: (s.success_rate, s.item))
    return struggling[:limit]


def recommended_round_size(
    average_success_rate: float,
    min_size: int = 10,
    max_size: int = 26,
) -> int:
    """
    Round size suited to current performance.

    Better performance = shorter rounds, worse performance = longer rounds.
    """
    if min_size > max_size:
        raise ValueError(f"min_size {min_size} exceeds max_size {max_size}")
    inverted = 1.0 - average_success_rate
    recommended = min_size + math.floor(inverted * (max_size - min_size))
    return max(min_size, min(max_size, recommended))


def export_statistics(
    profile_id: str,
    game_id: str,
    stats: Sequence[ItemStatistic],
    exported_at: datetime | None = None,
) -> str:
    """Serialize one game's statistics for a profile as indented JSON."""
    return json.dumps(
        {
            "profile_id": profile_id,
            "game_id": game_id,
            "export_date": (exported_at or utcnow()).isoformat(),
            "statistics": [stat.to_dict() for stat in stats],
        },
        indent=2,
    )
