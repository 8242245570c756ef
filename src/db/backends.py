"""
Storage backends for item statistics.

The statistics store needs only four primitives: get, put, query by profile
and delete by profile. Queries and deletes take an optional game id; without
one they span every game of the profile. Any key-value or embedded database
can provide them.

- SqlStatisticsBackend: SQLAlchemy async (SQLite via aiosqlite, PostgreSQL via asyncpg)
- InMemoryStatisticsBackend: process-local dict, for ephemeral sessions and tests
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator, Iterable
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Protocol

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import StorageUnavailable
from src.core.items import ItemKey
from src.core.models import ItemStatistic
from src.db.database import Database
from src.db.models import ItemStatisticRecord


class StatisticsBackend(Protocol):
    """Minimal persistence contract used by StatisticsStore."""

    async def get(self, profile_id: str, game_id: str, item: ItemKey) -> ItemStatistic | None: ...

    async def put(self, stat: ItemStatistic) -> None: ...

    async def put_many(self, stats: Iterable[ItemStatistic]) -> None: ...

    async def query_by_profile(
        self, profile_id: str, game_id: str | None = None
    ) -> list[ItemStatistic]: ...

    async def delete_profile(self, profile_id: str, game_id: str | None = None) -> int: ...


# =============================================================================
# SQLAlchemy
# =============================================================================


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _to_statistic(row: ItemStatisticRecord) -> ItemStatistic:
    return ItemStatistic(
        profile_id=row.profile_id,
        game_id=row.game_id,
        item=ItemKey(row.symbol, row.variant),
        total_attempts=row.total_attempts,
        correct_count=row.correct_count,
        incorrect_count=row.incorrect_count,
        last_attempt_at=_as_utc(row.last_attempt_at),
    )


def _to_values(stat: ItemStatistic) -> dict:
    last_attempt_at = stat.last_attempt_at
    if last_attempt_at is not None and last_attempt_at.tzinfo is not None:
        # SQLite drops the offset on write; store the UTC instant.
        last_attempt_at = last_attempt_at.astimezone(timezone.utc)
    return {
        "profile_id": stat.profile_id,
        "game_id": stat.game_id,
        "symbol": stat.item.symbol,
        "variant": stat.item.variant,
        "total_attempts": stat.total_attempts,
        "correct_count": stat.correct_count,
        "incorrect_count": stat.incorrect_count,
        "last_attempt_at": last_attempt_at,
    }


class SqlStatisticsBackend:
    """
    Statistics persisted in the ``item_statistics`` table.

    Every SQLAlchemy or OS level failure surfaces as StorageUnavailable.
    The schema is brought up to date on first use.
    """

    def __init__(self, database: Database):
        self.database = database
        self._schema_ready = False
        self._schema_lock = asyncio.Lock()

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncGenerator[AsyncSession, None]:
        try:
            await self._ensure_schema()
            async with self.database.session_scope() as session:
                yield session
        except StorageUnavailable:
            raise
        except (SQLAlchemyError, OSError) as e:
            logger.error("Statistics storage failure during {}: {}", operation, e)
            raise StorageUnavailable(operation, str(e)) from e

    async def _ensure_schema(self) -> None:
        if self._schema_ready:
            return
        async with self._schema_lock:
            if not self._schema_ready:
                await self.database.init_db()
                self._schema_ready = True

    def _upsert(self, rows: list[dict]):
        dialect = postgresql if self.database.dialect_name == "postgresql" else sqlite
        stmt = dialect.insert(ItemStatisticRecord).values(rows)
        return stmt.on_conflict_do_update(
            index_elements=["profile_id", "game_id", "symbol", "variant"],
            set_={
                "total_attempts": stmt.excluded.total_attempts,
                "correct_count": stmt.excluded.correct_count,
                "incorrect_count": stmt.excluded.incorrect_count,
                "last_attempt_at": stmt.excluded.last_attempt_at,
            },
        )

    async def get(self, profile_id: str, game_id: str, item: ItemKey) -> ItemStatistic | None:
        async with self._session("get") as session:
            row = await session.scalar(
                select(ItemStatisticRecord).where(
                    ItemStatisticRecord.profile_id == profile_id,
                    ItemStatisticRecord.game_id == game_id,
                    ItemStatisticRecord.symbol == item.symbol,
                    ItemStatisticRecord.variant == item.variant,
                )
            )
            return _to_statistic(row) if row is not None else None

    async def put(self, stat: ItemStatistic) -> None:
        async with self._session("put") as session:
            await session.execute(self._upsert([_to_values(stat)]))

    async def put_many(self, stats: Iterable[ItemStatistic]) -> None:
        rows = [_to_values(stat) for stat in stats]
        if not rows:
            return
        async with self._session("put_many") as session:
            await session.execute(self._upsert(rows))

    async def query_by_profile(
        self, profile_id: str, game_id: str | None = None
    ) -> list[ItemStatistic]:
        stmt = select(ItemStatisticRecord).where(ItemStatisticRecord.profile_id == profile_id)
        if game_id is not None:
            stmt = stmt.where(ItemStatisticRecord.game_id == game_id)
        async with self._session("query_by_profile") as session:
            rows = await session.scalars(stmt.order_by(ItemStatisticRecord.id))
            return [_to_statistic(row) for row in rows]

    async def delete_profile(self, profile_id: str, game_id: str | None = None) -> int:
        stmt = delete(ItemStatisticRecord).where(ItemStatisticRecord.profile_id == profile_id)
        if game_id is not None:
            stmt = stmt.where(ItemStatisticRecord.game_id == game_id)
        async with self._session("delete_profile") as session:
            result = await session.execute(stmt)
            return result.rowcount or 0


# =============================================================================
# In-memory
# =============================================================================


def _in_scope(key: tuple[str, str, ItemKey], profile_id: str, game_id: str | None) -> bool:
    owner, game, _ = key
    return owner == profile_id and (game_id is None or game == game_id)


class InMemoryStatisticsBackend:
    """
    Dict-backed statistics, lost when the process exits.

    Each call yields to the event loop once, as real storage does, so callers
    see the same interleavings they would against a database.
    """

    def __init__(self) -> None:
        self._records: dict[tuple[str, str, ItemKey], ItemStatistic] = {}

    async def get(self, profile_id: str, game_id: str, item: ItemKey) -> ItemStatistic | None:
        await asyncio.sleep(0)
        return self._records.get((profile_id, game_id, item))

    async def put(self, stat: ItemStatistic) -> None:
        await asyncio.sleep(0)
        self._records[(stat.profile_id, stat.game_id, stat.item)] = stat

    async def put_many(self, stats: Iterable[ItemStatistic]) -> None:
        await asyncio.sleep(0)
        for stat in stats:
            self._records[(stat.profile_id, stat.game_id, stat.item)] = stat

    async def query_by_profile(
        self, profile_id: str, game_id: str | None = None
    ) -> list[ItemStatistic]:
        await asyncio.sleep(0)
        return [
            stat
            for key, stat in self._records.items()
            if _in_scope(key, profile_id, game_id)
        ]

    async def delete_profile(self, profile_id: str, game_id: str | None = None) -> int:
        await asyncio.sleep(0)
        doomed = [key for key in self._records if _in_scope(key, profile_id, game_id)]
        for key in doomed:
            del self._records[key]
        return len(doomed)
