"""
Domain models for adaptive practice.

- ItemStatistic: per (profile, game, item) attempt counters
- WeightedCandidate: transient item/weight pair used during round generation
- Difficulty and RoundConfiguration: per-round settings supplied by the caller
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.core.items import ALL_VARIANTS, ItemKey


class Difficulty(str, Enum):
    """Difficulty tier controlling how strongly weights favour weak items."""

    RELAXED = "relaxed"  # flatten toward uniform
    STANDARD = "standard"
    INTENSIVE = "intensive"  # amplify bias toward weak items

    @classmethod
    def _missing_(cls, value: object) -> Difficulty | None:
        # Names used by the settings store of the first app release.
        legacy = {"easy": cls.RELAXED, "auto": cls.STANDARD, "hard": cls.INTENSIVE}
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in legacy:
                return legacy[lowered]
            for member in cls:
                if member.value == lowered:
                    return member
        return None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ItemStatistic:
    """
    Attempt history for one item of one game for one learner profile.

    success_rate is always derived from the counts, never stored.
    """

    profile_id: str
    game_id: str
    item: ItemKey
    total_attempts: int = 0
    correct_count: int = 0
    incorrect_count: int = 0
    last_attempt_at: datetime | None = None

    def __post_init__(self) -> None:
        if min(self.total_attempts, self.correct_count, self.incorrect_count) < 0:
            raise ValueError(f"Negative attempt counter for {self.item}")
        if self.correct_count + self.incorrect_count != self.total_attempts:
            raise ValueError(
                f"Counter mismatch for {self.item}: "
                f"{self.correct_count} + {self.incorrect_count} != {self.total_attempts}"
            )

    @property
    def success_rate(self) -> float:
        if self.total_attempts == 0:
            return 0.0
        return self.correct_count / self.total_attempts

    @property
    def is_unseen(self) -> bool:
        return self.total_attempts == 0

    def with_answer(self, was_correct: bool, at: datetime | None = None) -> ItemStatistic:
        """Return the record after one more judged answer."""
        return replace(
            self,
            total_attempts=self.total_attempts + 1,
            correct_count=self.correct_count + (1 if was_correct else 0),
            incorrect_count=self.incorrect_count + (0 if was_correct else 1),
            last_attempt_at=at or utcnow(),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "profile_id": self.profile_id,
            "game_id": self.game_id,
            "item_id": self.item.item_id,
            "symbol": self.item.symbol,
            "variant": self.item.variant,
            "total_attempts": self.total_attempts,
            "correct_count": self.correct_count,
            "incorrect_count": self.incorrect_count,
            "success_rate": self.success_rate,
            "last_attempt_at": self.last_attempt_at.isoformat() if self.last_attempt_at else None,
        }

    @classmethod
    def zero(cls, profile_id: str, game_id: str, item: ItemKey) -> ItemStatistic:
        return cls(profile_id=profile_id, game_id=game_id, item=item)


@dataclass(frozen=True)
class WeightedCandidate:
    """An item paired with its selection weight."""

    item: ItemKey
    weight: float


class RoundConfiguration(BaseModel):
    """Per-round settings, owned and persisted by the settings collaborator."""

    model_config = ConfigDict(frozen=True)

    round_size: int = Field(default=15, ge=1)
    variant_filter: str = ALL_VARIANTS
    difficulty: Difficulty = Difficulty.STANDARD

    @field_validator("variant_filter", mode="before")
    @classmethod
    def _normalize_filter(cls, value: object) -> object:
        if value is None:
            return ALL_VARIANTS
        if isinstance(value, str):
            return value.strip().lower() or ALL_VARIANTS
        return value

    @field_validator("difficulty", mode="before")
    @classmethod
    def _parse_difficulty(cls, value: object) -> object:
        if isinstance(value, str) and not isinstance(value, Difficulty):
            return Difficulty(value)
        return value
