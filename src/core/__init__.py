"""
Core Module - Shared domain models and interfaces.

Components:
- items: ItemKey and item universes (letters, orientation characters)
- models: ItemStatistic, WeightedCandidate, Difficulty, RoundConfiguration
- exceptions: Error taxonomy (StorageUnavailable, InvalidProfile, EmptyCandidatePool)
- log_config: Loguru sink setup

Design Principle:
src/db/, src/learning/ and src/study/ import from src/core/ rather than
redefining shared concepts.
"""

from src.core.exceptions import (
    EmptyCandidatePool,
    InvalidProfile,
    PracticeEngineError,
    StorageUnavailable,
)
from src.core.items import (
    ALL_VARIANTS,
    LETTER_UNIVERSE,
    ORIENTATION_UNIVERSE,
    ItemKey,
    ItemUniverse,
)
from src.core.models import (
    Difficulty,
    ItemStatistic,
    RoundConfiguration,
    WeightedCandidate,
)

__all__ = [
    # Errors
    "PracticeEngineError",
    "StorageUnavailable",
    "InvalidProfile",
    "EmptyCandidatePool",
    # Items
    "ALL_VARIANTS",
    "ItemKey",
    "ItemUniverse",
    "LETTER_UNIVERSE",
    "ORIENTATION_UNIVERSE",
    # Models
    "Difficulty",
    "ItemStatistic",
    "RoundConfiguration",
    "WeightedCandidate",
]
