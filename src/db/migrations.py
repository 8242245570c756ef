"""
Versioned schema upgrades for the statistics database.

Each migration is a plain function taking a synchronous connection. Applied
versions are recorded in ``schema_version`` so upgrading is idempotent and
only ever moves forward.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from loguru import logger
from sqlalchemy import Connection, func, insert, select, text
from sqlalchemy.ext.asyncio import AsyncEngine

from src.db.models import ItemStatisticRecord, SchemaVersion


@dataclass(frozen=True)
class Migration:
    version: int
    description: str
    apply: Callable[[Connection], None]


def _create_item_statistics(conn: Connection) -> None:
    ItemStatisticRecord.__table__.create(conn, checkfirst=True)


def _add_recency_index(conn: Connection) -> None:
    # Progress views sort a game's items by last attempt.
    conn.execute(
        text(
            "CREATE INDEX IF NOT EXISTS idx_item_statistics_profile_recent "
            "ON item_statistics (profile_id, game_id, last_attempt_at)"
        )
    )


MIGRATIONS: tuple[Migration, ...] = (
    Migration(1, "Create item_statistics", _create_item_statistics),
    Migration(2, "Index item_statistics by profile and last attempt", _add_recency_index),
)

LATEST_VERSION = MIGRATIONS[-1].version


def current_version(conn: Connection) -> int:
    """Highest applied migration version (0 for an empty database)."""
    SchemaVersion.__table__.create(conn, checkfirst=True)
    return conn.execute(select(func.max(SchemaVersion.version))).scalar() or 0


def upgrade_sync(conn: Connection, target: int = LATEST_VERSION) -> int:
    """Apply every pending migration up to ``target``."""
    version = current_version(conn)
    for migration in MIGRATIONS:
        if migration.version <= version or migration.version > target:
            continue
        migration.apply(conn)
        conn.execute(
            insert(SchemaVersion).values(
                version=migration.version,
                description=migration.description,
            )
        )
        version = migration.version
        logger.info("Applied migration {}: {}", migration.version, migration.description)
    return version


async def upgrade(engine: AsyncEngine, target: int = LATEST_VERSION) -> int:
    """Async entry point: upgrade the schema in one transaction."""
    async with engine.begin() as conn:
        return await conn.run_sync(upgrade_sync, target)
