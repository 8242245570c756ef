"""
Practice Engine: the interface the app shell talks to.

Provides high-level operations for the UI:
- Initialize statistics for a learner profile
- Start a round (bootstrap or adaptive)
- Submit judged answers for the active round
- Snapshot, export, reset and delete statistics

Statistics are scoped by the engine's universe name, so several engines (one
per game) can share a single store.
"""

from __future__ import annotations

import random

from loguru import logger

from config import Settings, get_settings
from src.core.items import LETTER_UNIVERSE, ItemUniverse
from src.core.models import ItemStatistic, RoundConfiguration
from src.db.backends import SqlStatisticsBackend
from src.db.database import Database
from src.db.statistics_store import StatisticsStore
from src.learning.progress import export_statistics
from src.learning.weights import DEFAULT_WEIGHT_CONFIG, WeightConfig
from src.study.answer_recorder import AnswerOutcome, AnswerRecorder
from src.study.rounds import PracticeRound, RoundGenerator


class PracticeEngine:
    """
    Adaptive practice for one game (one item universe).

    Holds at most one active round. Starting a round discards the previous
    one; nothing persisted needs rolling back.
    """

    def __init__(
        self,
        store: StatisticsStore,
        universe: ItemUniverse = LETTER_UNIVERSE,
        rng: random.Random | None = None,
        weight_config: WeightConfig = DEFAULT_WEIGHT_CONFIG,
        default_config: RoundConfiguration | None = None,
    ):
        self.store = store
        self.universe = universe
        self.default_config = default_config or RoundConfiguration()
        self.generator = RoundGenerator(store, rng=rng, weight_config=weight_config)
        self.recorder = AnswerRecorder(store)
        self._round: PracticeRound | None = None

    @property
    def game_id(self) -> str:
        return self.universe.name

    @property
    def current_round(self) -> PracticeRound | None:
        return self._round

    async def initialize_for_profile(self, profile_id: str) -> None:
        """Seed zeroed statistics for every item unless this game already has some."""
        await self.store.initialize(profile_id, self.universe)

    async def start_round(
        self,
        profile_id: str,
        config: RoundConfiguration | None = None,
        bootstrap: bool | None = None,
    ) -> PracticeRound:
        """
        Start a new round for ``profile_id``.

        The profile is initialized on first use. Storage failures propagate
        and leave the previous round untouched.
        """
        config = config or self.default_config
        await self.store.initialize(profile_id, self.universe)
        practice_round = await self.generator.generate(
            profile_id, config, self.universe, bootstrap=bootstrap
        )

        if self._round is not None and not self._round.is_complete:
            logger.info("Discarding unfinished round {}", self._round.round_id)

        practice_round.start()
        self._round = practice_round
        return practice_round

    async def submit_answer(self, was_correct: bool) -> AnswerOutcome:
        """Record an answer for the active item. Without an active round nothing happens."""
        if self._round is None:
            return AnswerOutcome(advanced=False, round_complete=False)

        practice_round = self._round
        outcome = await self.recorder.submit(practice_round, was_correct)
        if outcome.round_complete and outcome.advanced:
            summary = practice_round.summary()
            logger.info(
                "Round {} complete: {}/{} correct",
                practice_round.round_id,
                summary.correct_count,
                summary.total_attempts,
            )
        return outcome

    async def get_statistics_snapshot(self, profile_id: str) -> list[ItemStatistic]:
        """All statistics of a profile for this game; empty for an uninitialized profile."""
        return await self.store.get_all(profile_id, self.game_id)

    async def export_statistics(self, profile_id: str) -> str:
        """JSON export of this game's statistics for backup or sharing."""
        stats = await self.store.get_all(profile_id, self.game_id)
        return export_statistics(profile_id, self.game_id, stats)

    async def reset_statistics(self, profile_id: str) -> None:
        """Explicit "reset progress": wipe and reseed zeros for this game only."""
        await self.store.reset(profile_id, self.universe)
        if self._round is not None and self._round.profile_id == profile_id:
            self._round = None

    async def delete_profile(self, profile_id: str) -> int:
        """Cascade a profile deletion to its statistics in every game."""
        removed = await self.store.delete_profile(profile_id)
        if self._round is not None and self._round.profile_id == profile_id:
            self._round = None
        return removed


def create_practice_engine(
    settings: Settings | None = None,
    universe: ItemUniverse = LETTER_UNIVERSE,
    database: Database | None = None,
) -> PracticeEngine:
    """Engine backed by the SQL statistics database configured in settings."""
    settings = settings or get_settings()
    database = database or Database.from_settings(settings)
    store = StatisticsStore(SqlStatisticsBackend(database))
    return PracticeEngine(
        store,
        universe=universe,
        default_config=settings.default_round_configuration(),
    )
