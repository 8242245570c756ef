"""
Statistics Store for adaptive practice.

Owns every ItemStatistic record. Records are scoped by learner profile and
game (the item universe name), so games that share item keys keep separate
progress.

Writes for a profile are funneled through a per-profile asyncio.Lock, which
turns each read-modify-write into a single logical unit: rapid consecutive
answers can suspend at any storage call without losing an increment.
"""

from __future__ import annotations

import asyncio
from datetime import datetime

from loguru import logger

from src.core.exceptions import InvalidProfile
from src.core.items import ItemKey, ItemUniverse
from src.core.models import ItemStatistic, utcnow
from src.db.backends import StatisticsBackend


def validate_profile_id(profile_id: object) -> str:
    """Return the profile id, rejecting anything that cannot scope statistics."""
    if not isinstance(profile_id, str) or not profile_id.strip():
        raise InvalidProfile(profile_id)
    return profile_id


class StatisticsStore:
    """
    Durable (profile, game, item) -> attempt counters.

    Reads take no lock; initialize, record_answer, clear, reset and
    delete_profile are serialized per profile. A profile's lock lives as long
    as the store, so callers queued on it before a delete stay serialized with
    callers arriving after.
    """

    def __init__(self, backend: StatisticsBackend):
        self.backend = backend
        self._write_locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, profile_id: str) -> asyncio.Lock:
        lock = self._write_locks.get(profile_id)
        if lock is None:
            lock = self._write_locks[profile_id] = asyncio.Lock()
        return lock

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_all(self, profile_id: str, game_id: str) -> list[ItemStatistic]:
        """Current snapshot for one game of a profile; empty when nothing is recorded."""
        profile_id = validate_profile_id(profile_id)
        return await self.backend.query_by_profile(profile_id, game_id)

    async def get(self, profile_id: str, game_id: str, item: ItemKey) -> ItemStatistic:
        """Record for one item, zeroed if it has never been stored."""
        profile_id = validate_profile_id(profile_id)
        stat = await self.backend.get(profile_id, game_id, item)
        return stat if stat is not None else ItemStatistic.zero(profile_id, game_id, item)

    async def has_attempts(self, profile_id: str, game_id: str) -> bool:
        """True once any item of the game has been answered by the profile."""
        return any(not stat.is_unseen for stat in await self.get_all(profile_id, game_id))

    # =========================================================================
    # Writes
    # =========================================================================

    async def initialize(self, profile_id: str, universe: ItemUniverse) -> int:
        """
        Seed zeroed records for every item of ``universe``.

        No-op when the profile already has records for that game. Returns the
        number created.
        """
        profile_id = validate_profile_id(profile_id)
        async with self._lock_for(profile_id):
            return await self._seed(profile_id, universe)

    async def _seed(self, profile_id: str, universe: ItemUniverse) -> int:
        existing = await self.backend.query_by_profile(profile_id, universe.name)
        if existing:
            return 0
        stats = [ItemStatistic.zero(profile_id, universe.name, item) for item in universe.items()]
        await self.backend.put_many(stats)
        logger.info(
            "Initialized {} statistics for profile {} ({})",
            len(stats),
            profile_id,
            universe.name,
        )
        return len(stats)

    async def record_answer(
        self,
        profile_id: str,
        game_id: str,
        item: ItemKey,
        was_correct: bool,
        at: datetime | None = None,
    ) -> ItemStatistic:
        """
        Count one judged answer for (profile, game, item).

        Creates the record on first answer. Returns the updated record.
        """
        profile_id = validate_profile_id(profile_id)
        async with self._lock_for(profile_id):
            current = await self.backend.get(profile_id, game_id, item)
            if current is None:
                current = ItemStatistic.zero(profile_id, game_id, item)
            updated = current.with_answer(was_correct, at or utcnow())
            await self.backend.put(updated)

        logger.debug(
            "Recorded {} answer for {} in {} (profile {}): {}/{}",
            "correct" if was_correct else "incorrect",
            item,
            game_id,
            profile_id,
            updated.correct_count,
            updated.total_attempts,
        )
        return updated

    async def clear(self, profile_id: str, game_id: str) -> int:
        """Delete one game's statistics for a profile. Returns the number removed."""
        profile_id = validate_profile_id(profile_id)
        async with self._lock_for(profile_id):
            removed = await self.backend.delete_profile(profile_id, game_id)
        logger.info("Cleared {} {} statistics for profile {}", removed, game_id, profile_id)
        return removed

    async def reset(self, profile_id: str, universe: ItemUniverse) -> None:
        """Clear and reseed zeros for one game as one unit (explicit "reset progress")."""
        profile_id = validate_profile_id(profile_id)
        async with self._lock_for(profile_id):
            removed = await self.backend.delete_profile(profile_id, universe.name)
            await self._seed(profile_id, universe)
        logger.info(
            "Reset {} statistics for profile {} ({} records replaced)",
            universe.name,
            profile_id,
            removed,
        )

    async def delete_profile(self, profile_id: str) -> int:
        """Cascade for a deleted learner profile: remove every game's statistics without reseeding."""
        profile_id = validate_profile_id(profile_id)
        async with self._lock_for(profile_id):
            removed = await self.backend.delete_profile(profile_id)
        logger.info("Deleted profile {} statistics ({} records)", profile_id, removed)
        return removed
