"""Shared test fixtures and configuration."""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest
from support import ALL_TEST_MODELS, FakeMeilisearch, InMemoryStore

from meilibridge.config.settings import Settings
from meilibridge.core.service import SearchService
from meilibridge.engine.client import MeilisearchClient
from meilibridge.engine.credentials import EngineClients
from meilibridge.models.registry import TypeRegistry


@pytest.fixture
def settings() -> Settings:
    """Create a test Settings instance with defaults."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        search={"url": "http://meili.test", "master_key": "master-key"},
    )


@pytest.fixture
def registry() -> TypeRegistry:
    reg = TypeRegistry()
    for model in ALL_TEST_MODELS:
        reg.register(model)
    return reg


@pytest.fixture
def fake_meili() -> FakeMeilisearch:
    return FakeMeilisearch()


@pytest.fixture
async def clients(fake_meili: FakeMeilisearch) -> AsyncIterator[EngineClients]:
    """Admin and search clients talking to ``fake_meili``."""
    transport = httpx.MockTransport(fake_meili)
    pair = EngineClients(
        admin_client=MeilisearchClient("http://meili.test", "admin-key", poll_interval=0.001, transport=transport),
        search_client=MeilisearchClient("http://meili.test", "search-key", poll_interval=0.001, transport=transport),
    )
    yield pair
    await pair.close()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def service(registry: TypeRegistry, clients: EngineClients, store: InMemoryStore) -> SearchService:
    return SearchService(registry, clients, store)
