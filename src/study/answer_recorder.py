"""
Answer Recorder: the single write path for judged answers.

Statistics are written first; the round only advances once the write has
succeeded. A failed write leaves the same item active, so a retry neither
skips an item nor records it twice.
"""

from __future__ import annotations

import asyncio
import weakref
from dataclasses import dataclass

from src.core.items import ItemKey
from src.core.models import ItemStatistic
from src.db.statistics_store import StatisticsStore
from src.study.rounds import PracticeRound, RoundState


@dataclass(frozen=True)
class AnswerOutcome:
    """Result of submitting one answer."""

    advanced: bool
    round_complete: bool
    item: ItemKey | None = None
    statistic: ItemStatistic | None = None


class AnswerRecorder:
    """Records answers for the active item of a round and advances it."""

    def __init__(self, store: StatisticsStore):
        self.store = store
        self._round_locks: weakref.WeakKeyDictionary[PracticeRound, asyncio.Lock] = (
            weakref.WeakKeyDictionary()
        )

    def _lock_for(self, practice_round: PracticeRound) -> asyncio.Lock:
        lock = self._round_locks.get(practice_round)
        if lock is None:
            lock = self._round_locks[practice_round] = asyncio.Lock()
        return lock

    async def submit(self, practice_round: PracticeRound, was_correct: bool) -> AnswerOutcome:
        """
        Record ``was_correct`` for the round's current item, then advance.

        Submissions to one round are serialized: two rapid calls answer two
        consecutive items.

        Raises:
            StorageUnavailable: the write failed; the round did not advance
        """
        async with self._lock_for(practice_round):
            if practice_round.state is not RoundState.IN_PROGRESS:
                return AnswerOutcome(advanced=False, round_complete=practice_round.is_complete)

            item = practice_round.current_item
            statistic = await self.store.record_answer(
                practice_round.profile_id, practice_round.game_id, item, was_correct
            )
            complete = practice_round.advance(was_correct)

        return AnswerOutcome(
            advanced=True,
            round_complete=complete,
            item=item,
            statistic=statistic,
        )
