"""
Unit tests for round generation and the round state machine.

Tests:
- Bootstrap rounds: full coverage, variant choice, shuffling
- Adaptive rounds: size, filters, clamping, bias toward weak items
- Failure semantics (empty pool, storage outage)
- NOT_STARTED -> IN_PROGRESS -> COMPLETE transitions
"""

import pytest

from src.core.exceptions import EmptyCandidatePool, StorageUnavailable
from src.core.items import LETTER_UNIVERSE, ORIENTATION_UNIVERSE, ItemKey
from src.core.models import Difficulty, RoundConfiguration
from src.study.rounds import PracticeRound, RoundGenerator, RoundMode, RoundState

LETTERS = LETTER_UNIVERSE.name


@pytest.fixture
def generator(memory_store, rng):
    return RoundGenerator(memory_store, rng=rng)


async def answer_everything(store, profile_id, universe, correct=True):
    for item in universe.items():
        await store.record_answer(profile_id, universe.name, item, correct)


class TestBootstrapRound:
    @pytest.mark.asyncio
    async def test_fresh_profile_gets_full_alphabet(self, generator, memory_store):
        await memory_store.initialize("learner-1", LETTER_UNIVERSE)

        practice_round = await generator.generate("learner-1", RoundConfiguration(), LETTER_UNIVERSE)

        assert practice_round.mode is RoundMode.BOOTSTRAP
        assert len(practice_round.items) == 26
        assert len(set(practice_round.items)) == 26
        assert {item.symbol for item in practice_round.items} == set(LETTER_UNIVERSE.symbols)

    @pytest.mark.asyncio
    async def test_ignores_round_size(self, generator):
        config = RoundConfiguration(round_size=5)

        practice_round = await generator.generate("learner-1", config, LETTER_UNIVERSE)

        assert len(practice_round.items) == 26

    @pytest.mark.asyncio
    async def test_respects_variant_filter(self, generator):
        config = RoundConfiguration(variant_filter="lowercase")

        practice_round = await generator.generate("learner-1", config, LETTER_UNIVERSE)

        assert all(item.variant == "lowercase" for item in practice_round.items)

    @pytest.mark.asyncio
    async def test_both_filter_mixes_variants(self, generator):
        practice_round = await generator.generate("learner-1", RoundConfiguration(), LETTER_UNIVERSE)

        # 26 fair coin flips landing on one side is vanishingly unlikely
        assert {item.variant for item in practice_round.items} == {"uppercase", "lowercase"}

    @pytest.mark.asyncio
    async def test_order_is_shuffled(self, generator):
        practice_round = await generator.generate("learner-1", RoundConfiguration(), LETTER_UNIVERSE)

        assert [item.symbol for item in practice_round.items] != list(LETTER_UNIVERSE.symbols)

    @pytest.mark.asyncio
    async def test_symbols_without_matching_variant_are_skipped(self, generator):
        config = RoundConfiguration(variant_filter="number")

        practice_round = await generator.generate("learner-1", config, ORIENTATION_UNIVERSE)

        assert sorted(item.symbol for item in practice_round.items) == list("0123456789")

    @pytest.mark.asyncio
    async def test_explicit_bootstrap_after_practice(self, generator, memory_store, small_universe):
        await answer_everything(memory_store, "learner-1", small_universe)

        practice_round = await generator.generate(
            "learner-1", RoundConfiguration(), small_universe, bootstrap=True
        )

        assert practice_round.mode is RoundMode.BOOTSTRAP
        assert len(practice_round.items) == 3

    @pytest.mark.asyncio
    async def test_bootstrap_is_decided_per_game(self, generator, memory_store):
        await answer_everything(memory_store, "learner-1", LETTER_UNIVERSE)

        practice_round = await generator.generate(
            "learner-1", RoundConfiguration(), ORIENTATION_UNIVERSE
        )

        assert practice_round.mode is RoundMode.BOOTSTRAP
        assert practice_round.game_id == ORIENTATION_UNIVERSE.name
        assert len(practice_round.items) == 34


class TestAdaptiveRound:
    @pytest.mark.asyncio
    async def test_practiced_profile_gets_adaptive_round(self, generator, memory_store):
        await memory_store.initialize("learner-1", LETTER_UNIVERSE)
        await memory_store.record_answer("learner-1", LETTERS, ItemKey("A", "uppercase"), True)

        practice_round = await generator.generate(
            "learner-1", RoundConfiguration(round_size=10), LETTER_UNIVERSE
        )

        assert practice_round.mode is RoundMode.ADAPTIVE
        assert len(practice_round.items) == 10
        assert len(set(practice_round.items)) == 10
        assert all(item in LETTER_UNIVERSE for item in practice_round.items)

    @pytest.mark.asyncio
    async def test_round_size_clamped_to_pool(self, generator, memory_store):
        await memory_store.record_answer("learner-1", LETTERS, ItemKey("A", "uppercase"), True)
        config = RoundConfiguration(round_size=100, variant_filter="uppercase")

        practice_round = await generator.generate("learner-1", config, LETTER_UNIVERSE)

        assert len(practice_round.items) == 26
        assert all(item.variant == "uppercase" for item in practice_round.items)

    @pytest.mark.asyncio
    async def test_suppressed_bootstrap_on_fresh_profile(self, generator):
        config = RoundConfiguration(round_size=4)

        practice_round = await generator.generate(
            "learner-1", config, LETTER_UNIVERSE, bootstrap=False
        )

        assert practice_round.mode is RoundMode.ADAPTIVE
        assert len(practice_round.items) == 4

    @pytest.mark.asyncio
    async def test_weak_items_appear_more_often(self, generator, memory_store):
        weak = ItemKey("Q", "uppercase")
        strong = ItemKey("E", "uppercase")
        for item in LETTER_UNIVERSE.items():
            for _ in range(10):
                await memory_store.record_answer("learner-1", LETTERS, item, item != weak)
        config = RoundConfiguration(round_size=5, difficulty=Difficulty.INTENSIVE)

        weak_count = strong_count = 0
        for _ in range(200):
            practice_round = await generator.generate("learner-1", config, LETTER_UNIVERSE)
            weak_count += weak in practice_round.items
            strong_count += strong in practice_round.items

        assert weak_count > 3 * strong_count

    @pytest.mark.asyncio
    async def test_does_not_write_statistics(self, flaky_backend, flaky_store, small_universe):
        await flaky_store.record_answer("learner-1", small_universe.name, ItemKey("A", "uppercase"), True)
        writes_before = flaky_backend.writes
        generator = RoundGenerator(flaky_store)

        await generator.generate("learner-1", RoundConfiguration(), small_universe)

        assert flaky_backend.writes == writes_before


class TestFailureSemantics:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("bootstrap", [True, False])
    async def test_empty_pool_is_reported(self, generator, bootstrap):
        config = RoundConfiguration(variant_filter="cursive")

        with pytest.raises(EmptyCandidatePool) as excinfo:
            await generator.generate("learner-1", config, LETTER_UNIVERSE, bootstrap=bootstrap)

        assert excinfo.value.variant_filter == "cursive"

    @pytest.mark.asyncio
    async def test_storage_outage_fails_the_round(self, flaky_backend, flaky_store):
        flaky_backend.fail_reads = True
        generator = RoundGenerator(flaky_store)

        with pytest.raises(StorageUnavailable):
            await generator.generate("learner-1", RoundConfiguration(), LETTER_UNIVERSE)


class TestPracticeRoundStateMachine:
    def make_round(self, count=3):
        items = [ItemKey(symbol, "uppercase") for symbol in "ABCDE"[:count]]
        return PracticeRound("learner-1", "tiny", items, RoundMode.ADAPTIVE, RoundConfiguration())

    def test_starts_not_started(self):
        practice_round = self.make_round()

        assert practice_round.state is RoundState.NOT_STARTED
        assert practice_round.current_item is None

    def test_start_then_advance_to_complete(self):
        practice_round = self.make_round()
        practice_round.start()

        assert practice_round.current_item == ItemKey("A", "uppercase")
        assert practice_round.advance(True) is False
        assert practice_round.advance(False) is False
        assert practice_round.advance(True) is True

        assert practice_round.state is RoundState.COMPLETE
        assert practice_round.score == 2
        assert practice_round.remaining == 0

    def test_cannot_advance_before_start(self):
        with pytest.raises(RuntimeError):
            self.make_round().advance(True)

    def test_complete_is_terminal(self):
        practice_round = self.make_round(count=1)
        practice_round.start()
        practice_round.advance(True)

        with pytest.raises(RuntimeError):
            practice_round.advance(True)
        with pytest.raises(RuntimeError):
            practice_round.start()

    def test_items_are_immutable(self):
        practice_round = self.make_round()

        assert isinstance(practice_round.items, tuple)

    def test_summary(self):
        practice_round = self.make_round(count=4)
        practice_round.start()
        for correct in (True, True, False, True):
            practice_round.advance(correct)

        summary = practice_round.summary()

        assert summary.total_attempts == 4
        assert summary.correct_count == 3
        assert summary.incorrect_count == 1
        assert summary.success_rate == 0.75
        assert summary.mode is RoundMode.ADAPTIVE
