from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from loguru import logger
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from config import Settings, get_settings


def _get_async_url(url: str) -> str:
    """Convert sync database URLs to their async driver (asyncpg / aiosqlite)."""
    if url.startswith(("postgresql+asyncpg://", "sqlite+aiosqlite://")):
        return url
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def _ensure_sqlite_dir(url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return
    database = parsed.database
    if database and database != ":memory:" and not database.startswith("file:"):
        Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)


class Database:
    """Async engine plus session factory for the statistics database."""

    def __init__(self, url: str, echo: bool = False):
        self.url = _get_async_url(url)
        _ensure_sqlite_dir(self.url)
        self.engine: AsyncEngine = create_async_engine(self.url, echo=echo, pool_pre_ping=True)
        self._session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> Database:
        settings = settings or get_settings()
        return cls(settings.database_url, echo=settings.database_echo)

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    async def init_db(self) -> int:
        """Bring the schema up to date. Returns the resulting schema version."""
        from src.db.migrations import upgrade

        version = await upgrade(self.engine)
        logger.info("Statistics database ready at schema version {}", version)
        return version

    @asynccontextmanager
    async def session_scope(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide an async transactional scope around a series of operations."""
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:  # Intentionally broad - rollback on any error before re-raising
                await session.rollback()
                raise

    async def dispose(self) -> None:
        await self.engine.dispose()


# ========================================
# Process-wide default
# ========================================

_database: Database | None = None


def get_database() -> Database:
    """Get or create the database configured by settings (lazy initialization)."""
    global _database
    if _database is None:
        _database = Database.from_settings()
    return _database
