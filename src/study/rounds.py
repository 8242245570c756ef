"""
Round Generation for adaptive practice.

A round is an immutable, ordered list of items plus a small state machine:

    NOT_STARTED -> IN_PROGRESS -> COMPLETE

Two generation modes:
- Bootstrap: one item per symbol (random eligible variant), full coverage,
  used for the first round of a profile or on request
- Adaptive: statistics -> weights -> weighted sample of round_size items

Both shuffle the final list so presentation order carries no hint of weight.
"""

from __future__ import annotations

import random
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from loguru import logger

from src.core.exceptions import EmptyCandidatePool
from src.core.items import ItemKey, ItemUniverse
from src.core.models import ItemStatistic, RoundConfiguration, utcnow
from src.db.statistics_store import StatisticsStore
from src.learning.sampler import shuffled, weighted_sample
from src.learning.weights import DEFAULT_WEIGHT_CONFIG, WeightConfig, score_candidates


class RoundState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class RoundMode(str, Enum):
    BOOTSTRAP = "bootstrap"
    ADAPTIVE = "adaptive"


@dataclass(frozen=True)
class AnsweredItem:
    item: ItemKey
    was_correct: bool


@dataclass(frozen=True)
class RoundSummary:
    """Score card shown when a round ends."""

    total_attempts: int
    correct_count: int
    incorrect_count: int
    success_rate: float
    mode: RoundMode


class PracticeRound:
    """One play session over a fixed list of items."""

    def __init__(
        self,
        profile_id: str,
        game_id: str,
        items: list[ItemKey] | tuple[ItemKey, ...],
        mode: RoundMode,
        config: RoundConfiguration,
    ):
        self.round_id = str(uuid.uuid4())[:8]
        self.profile_id = profile_id
        self.game_id = game_id
        self.items: tuple[ItemKey, ...] = tuple(items)
        self.mode = mode
        self.config = config
        self.state = RoundState.NOT_STARTED
        self.index = 0
        self.score = 0
        self.answers: list[AnsweredItem] = []

    def __repr__(self) -> str:
        return (
            f"<PracticeRound {self.round_id} {self.game_id} {self.mode.value} {self.state.value} "
            f"{self.index}/{len(self.items)}>"
        )

    def __len__(self) -> int:
        return len(self.items)

    @property
    def is_complete(self) -> bool:
        return self.state is RoundState.COMPLETE

    @property
    def current_item(self) -> ItemKey | None:
        """Item awaiting an answer, or None outside IN_PROGRESS."""
        if self.state is not RoundState.IN_PROGRESS:
            return None
        return self.items[self.index]

    @property
    def remaining(self) -> int:
        return len(self.items) - self.index

    def start(self) -> None:
        if self.state is not RoundState.NOT_STARTED:
            raise RuntimeError(f"Round {self.round_id} already {self.state.value}")
        self.state = RoundState.IN_PROGRESS if self.items else RoundState.COMPLETE

    def advance(self, was_correct: bool) -> bool:
        """
        Move past the current item.

        Returns:
            True once the last item has been answered
        """
        if self.state is not RoundState.IN_PROGRESS:
            raise RuntimeError(f"Round {self.round_id} is {self.state.value}, cannot advance")

        self.answers.append(AnsweredItem(self.items[self.index], was_correct))
        if was_correct:
            self.score += 1
        self.index += 1

        if self.index >= len(self.items):
            self.state = RoundState.COMPLETE
        return self.is_complete

    def summary(self) -> RoundSummary:
        total = len(self.answers)
        return RoundSummary(
            total_attempts=total,
            correct_count=self.score,
            incorrect_count=total - self.score,
            success_rate=self.score / total if total else 0.0,
            mode=self.mode,
        )


class RoundGenerator:
    """
    Builds rounds from the statistics store.

    Read-only with respect to statistics.
    """

    def __init__(
        self,
        store: StatisticsStore,
        rng: random.Random | None = None,
        weight_config: WeightConfig = DEFAULT_WEIGHT_CONFIG,
    ):
        self.store = store
        self.rng = rng or random.Random()
        self.weight_config = weight_config

    async def generate(
        self,
        profile_id: str,
        config: RoundConfiguration,
        universe: ItemUniverse,
        bootstrap: bool | None = None,
        now: datetime | None = None,
    ) -> PracticeRound:
        """
        Generate a fresh round.

        Args:
            profile_id: Learner profile
            config: Round size, variant filter and difficulty
            universe: Items the game offers
            bootstrap: Force (True) or suppress (False) bootstrap mode;
                None picks bootstrap while the profile has no recorded attempts
                in this game
            now: Reference time for recency weighting

        Raises:
            EmptyCandidatePool: the variant filter leaves nothing to practice
            StorageUnavailable: statistics could not be read
        """
        stats = await self.store.get_all(profile_id, universe.name)
        if bootstrap is None:
            bootstrap = all(stat.is_unseen for stat in stats)

        if bootstrap:
            items = self.bootstrap_items(config, universe)
            mode = RoundMode.BOOTSTRAP
        else:
            items = self.adaptive_items(profile_id, stats, config, universe, now)
            mode = RoundMode.ADAPTIVE

        practice_round = PracticeRound(profile_id, universe.name, items, mode, config)
        logger.info(
            "Generated {} {} round {} for profile {}: {} items (filter={}, difficulty={})",
            universe.name,
            mode.value,
            practice_round.round_id,
            profile_id,
            len(items),
            config.variant_filter,
            config.difficulty.value,
        )
        return practice_round

    def bootstrap_items(self, config: RoundConfiguration, universe: ItemUniverse) -> list[ItemKey]:
        """One item per eligible symbol with a random eligible variant; ignores round_size."""
        items = []
        for symbol in universe.symbols:
            variants = universe.variants_for(symbol, config.variant_filter)
            if variants:
                items.append(ItemKey(symbol, self.rng.choice(variants)))

        if not items:
            raise EmptyCandidatePool(config.variant_filter)
        return shuffled(items, self.rng)

    def adaptive_items(
        self,
        profile_id: str,
        stats: list[ItemStatistic],
        config: RoundConfiguration,
        universe: ItemUniverse,
        now: datetime | None = None,
    ) -> list[ItemKey]:
        """Weighted sample of round_size eligible items (clamped to the pool), shuffled."""
        eligible = universe.items(config.variant_filter)
        if not eligible:
            raise EmptyCandidatePool(config.variant_filter)

        by_item = {stat.item: stat for stat in stats}
        # Items without a record (universe grew since seeding) count as unseen
        pool = [
            by_item.get(item) or ItemStatistic.zero(profile_id, universe.name, item)
            for item in eligible
        ]

        candidates = score_candidates(pool, config.difficulty, now or utcnow(), self.weight_config)
        selected = weighted_sample(candidates, min(config.round_size, len(candidates)), rng=self.rng)
        return shuffled(selected, self.rng)
