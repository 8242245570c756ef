"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.core.exceptions import StorageUnavailable  # noqa: E402
from src.core.items import ItemUniverse  # noqa: E402
from src.db.backends import InMemoryStatisticsBackend  # noqa: E402
from src.db.statistics_store import StatisticsStore  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (SQLite via aiosqlite)")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture(autouse=True)
def setup_logging():
    """Route loguru output through stderr at DEBUG for the duration of a test."""
    from loguru import logger

    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG",
        format="<level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
    )

    yield

    logger.remove()


class FlakyBackend(InMemoryStatisticsBackend):
    """In-memory backend whose reads or writes can be switched off."""

    def __init__(self):
        super().__init__()
        self.fail_reads = False
        self.fail_writes = False
        self.writes = 0

    async def get(self, profile_id, game_id, item):
        if self.fail_reads:
            raise StorageUnavailable("get", "simulated outage")
        return await super().get(profile_id, game_id, item)

    async def query_by_profile(self, profile_id, game_id=None):
        if self.fail_reads:
            raise StorageUnavailable("query_by_profile", "simulated outage")
        return await super().query_by_profile(profile_id, game_id)

    async def put(self, stat):
        if self.fail_writes:
            raise StorageUnavailable("put", "quota exceeded")
        self.writes += 1
        await super().put(stat)

    async def put_many(self, stats):
        if self.fail_writes:
            raise StorageUnavailable("put_many", "quota exceeded")
        await super().put_many(stats)


@pytest.fixture
def rng():
    """Seeded random source so sampling tests are reproducible."""
    return random.Random(20240601)


@pytest.fixture
def memory_backend():
    return InMemoryStatisticsBackend()


@pytest.fixture
def memory_store(memory_backend):
    return StatisticsStore(memory_backend)


@pytest.fixture
def flaky_backend():
    return FlakyBackend()


@pytest.fixture
def flaky_store(flaky_backend):
    return StatisticsStore(flaky_backend)


@pytest.fixture
def small_universe():
    """Three symbols, two cases each."""
    return ItemUniverse.uniform("tiny", "ABC", ("uppercase", "lowercase"))


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'statistics.db'}"
