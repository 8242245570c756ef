"""
Unit tests for AnswerRecorder.

Tests:
- Write first, then advance
- Failed writes keep the same item active
- Rapid submissions answer consecutive items
"""

import asyncio

import pytest

from src.core.exceptions import StorageUnavailable
from src.core.items import ItemKey
from src.core.models import RoundConfiguration
from src.study.answer_recorder import AnswerRecorder
from src.study.rounds import PracticeRound, RoundMode, RoundState

GAME = "tiny"


def started_round(symbols="ABC"):
    items = [ItemKey(symbol, "uppercase") for symbol in symbols]
    practice_round = PracticeRound("learner-1", GAME, items, RoundMode.ADAPTIVE, RoundConfiguration())
    practice_round.start()
    return practice_round


class TestSubmit:
    @pytest.mark.asyncio
    async def test_records_then_advances(self, memory_store):
        recorder = AnswerRecorder(memory_store)
        practice_round = started_round()

        outcome = await recorder.submit(practice_round, True)

        assert outcome.advanced is True
        assert outcome.round_complete is False
        assert outcome.item == ItemKey("A", "uppercase")
        assert outcome.statistic.correct_count == 1
        assert practice_round.current_item == ItemKey("B", "uppercase")

    @pytest.mark.asyncio
    async def test_last_answer_completes_round(self, memory_store):
        recorder = AnswerRecorder(memory_store)
        practice_round = started_round("AB")

        await recorder.submit(practice_round, True)
        outcome = await recorder.submit(practice_round, False)

        assert outcome.round_complete is True
        assert practice_round.state is RoundState.COMPLETE
        assert practice_round.score == 1

    @pytest.mark.asyncio
    async def test_submit_after_completion_does_nothing(self, memory_store):
        recorder = AnswerRecorder(memory_store)
        practice_round = started_round("A")
        await recorder.submit(practice_round, True)

        outcome = await recorder.submit(practice_round, True)

        assert outcome.advanced is False
        assert outcome.round_complete is True
        stat = await memory_store.get("learner-1", GAME, ItemKey("A", "uppercase"))
        assert stat.total_attempts == 1

    @pytest.mark.asyncio
    async def test_submit_before_start_does_nothing(self, memory_store):
        recorder = AnswerRecorder(memory_store)
        practice_round = PracticeRound(
            "learner-1", GAME, [ItemKey("A", "uppercase")], RoundMode.ADAPTIVE, RoundConfiguration()
        )

        outcome = await recorder.submit(practice_round, True)

        assert outcome.advanced is False
        assert outcome.round_complete is False


class TestFailedWrites:
    @pytest.mark.asyncio
    async def test_failed_write_keeps_item_active(self, flaky_backend, flaky_store):
        recorder = AnswerRecorder(flaky_store)
        practice_round = started_round()
        flaky_backend.fail_writes = True

        with pytest.raises(StorageUnavailable):
            await recorder.submit(practice_round, True)

        assert practice_round.index == 0
        assert practice_round.current_item == ItemKey("A", "uppercase")
        assert practice_round.score == 0

    @pytest.mark.asyncio
    async def test_retry_records_exactly_once(self, flaky_backend, flaky_store):
        recorder = AnswerRecorder(flaky_store)
        practice_round = started_round()
        flaky_backend.fail_writes = True
        with pytest.raises(StorageUnavailable):
            await recorder.submit(practice_round, False)

        flaky_backend.fail_writes = False
        outcome = await recorder.submit(practice_round, False)

        stat = await flaky_store.get("learner-1", GAME, ItemKey("A", "uppercase"))
        assert outcome.advanced is True
        assert stat.total_attempts == 1
        assert stat.incorrect_count == 1
        assert practice_round.current_item == ItemKey("B", "uppercase")


class TestRapidSubmissions:
    @pytest.mark.asyncio
    async def test_concurrent_submits_answer_consecutive_items(self, memory_store):
        recorder = AnswerRecorder(memory_store)
        practice_round = started_round()

        outcomes = await asyncio.gather(
            recorder.submit(practice_round, True),
            recorder.submit(practice_round, False),
        )

        assert [o.item for o in outcomes] == [ItemKey("A", "uppercase"), ItemKey("B", "uppercase")]
        a = await memory_store.get("learner-1", GAME, ItemKey("A", "uppercase"))
        b = await memory_store.get("learner-1", GAME, ItemKey("B", "uppercase"))
        assert (a.total_attempts, a.correct_count) == (1, 1)
        assert (b.total_attempts, b.incorrect_count) == (1, 1)
        assert practice_round.index == 2

    @pytest.mark.asyncio
    async def test_extra_submits_past_the_end_are_ignored(self, memory_store):
        recorder = AnswerRecorder(memory_store)
        practice_round = started_round("AB")

        outcomes = await asyncio.gather(*(recorder.submit(practice_round, True) for _ in range(4)))

        assert [o.advanced for o in outcomes] == [True, True, False, False]
        assert practice_round.score == 2
