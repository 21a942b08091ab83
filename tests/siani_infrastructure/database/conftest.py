"""Fixtures for database infrastructure tests."""
from collections.abc import AsyncIterator

import pytest_asyncio

from siani_infrastructure.database import DatabaseManager


@pytest_asyncio.fixture
async def database() -> AsyncIterator[DatabaseManager]:
    """Fresh in-memory SQLite database with every table created."""
    manager = DatabaseManager("sqlite+aiosqlite:///:memory:")
    await manager.initialize()
    yield manager
    await manager.close()
