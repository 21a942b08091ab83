"""
Shared fixtures for wellness service tests.
"""
from collections.abc import AsyncIterator, Callable, Iterator

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from pydantic import SecretStr

from siani_infrastructure.database import DatabaseManager
from wellness_service.config import ElevenLabsSettings, OpenAISettings
from wellness_service.infrastructure import (
    ElevenLabsClient,
    OpenAIChatClient,
    QueryCache,
    WellnessRepository,
)
from wellness_service.main import create_app

USER_ID = "user-1"


@pytest_asyncio.fixture
async def database() -> AsyncIterator[DatabaseManager]:
    manager = DatabaseManager("sqlite+aiosqlite:///:memory:")
    await manager.initialize()
    yield manager
    await manager.close()


@pytest_asyncio.fixture
async def repository(database: DatabaseManager) -> WellnessRepository:
    repo = WellnessRepository(database)
    await repo.ensure_user(USER_ID)
    return repo


@pytest.fixture
def cache() -> QueryCache:
    return QueryCache(ttl_seconds=60, max_entries=100)


@pytest_asyncio.fixture
async def disabled_llm() -> AsyncIterator[OpenAIChatClient]:
    client = OpenAIChatClient(OpenAISettings(api_key=SecretStr("")))
    yield client
    await client.close()


@pytest_asyncio.fixture
async def disabled_tts() -> AsyncIterator[ElevenLabsClient]:
    client = ElevenLabsClient(ElevenLabsSettings(api_key=SecretStr("")))
    yield client
    await client.close()


@pytest.fixture
def llm_factory() -> Iterator[Callable[[Callable[[httpx.Request], httpx.Response]], OpenAIChatClient]]:
    """Build enabled chat clients backed by a request handler."""

    def build(handler: Callable[[httpx.Request], httpx.Response]) -> OpenAIChatClient:
        return OpenAIChatClient(
            OpenAISettings(api_key=SecretStr("test-key")),
            transport=httpx.MockTransport(handler),
        )

    yield build


@pytest.fixture
def client() -> Iterator[TestClient]:
    with TestClient(create_app()) as test_client:
        yield test_client
