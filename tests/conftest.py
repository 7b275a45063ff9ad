"""Shared test fixtures and configuration for seedwise tests."""

import pytest

import seedwise.logger as logger_module
from seedwise.db import SeedwiseDatabase


def pytest_configure(config: pytest.Config) -> None:
    """Initialize logger once for all tests."""
    if getattr(logger_module, "_logger_instance", None) is None:
        logger_module.init_logger("debug")


@pytest.fixture
async def database(tmp_path):
    """Create a SeedwiseDatabase backed by a temporary SQLite file."""
    db = SeedwiseDatabase(f"sqlite+aiosqlite:///{tmp_path / 'seedwise.db'}")
    await db.create_tables()
    yield db
    await db.close()


@pytest.fixture
def anyio_backend() -> str:
    """Run anyio-marked tests on asyncio (aiohttp/aiosqlite are asyncio-only)."""
    return "asyncio"
