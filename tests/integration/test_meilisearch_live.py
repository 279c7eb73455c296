"""End-to-end tests against a real Meilisearch instance."""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator
from typing import Any

import pytest
from pydantic import BaseModel
from support import InMemoryStore

from meilibridge.config.settings import Settings
from meilibridge.core.service import SearchService
from meilibridge.models.document import build_indexable_document
from meilibridge.models.registry import TypeRegistry
from meilibridge.models.searchable import SearchConfig

pytestmark = [pytest.mark.integration, pytest.mark.meilisearch]

# One index per run so concurrent runs never share documents
TEST_INDEX = f"meilibridge_test_{uuid.uuid4().hex[:8]}"


class Paper(BaseModel):
    id: str
    title: str
    author: str = ""

    @classmethod
    def search_config(cls) -> SearchConfig:
        return SearchConfig(index_name=TEST_INDEX)

    def to_indexable_document(self) -> dict[str, Any]:
        return build_indexable_document(self)


class Note(Paper):
    @classmethod
    def search_config(cls) -> SearchConfig:
        return SearchConfig(index_name=TEST_INDEX, class_prefixed_search_ids=True)


PAPERS = [
    Paper(id="doc-001", title="Advances in Solar Nowcasting Using Deep Learning", author="Alice Johnson"),
    Paper(id="doc-002", title="Transformer Models for Natural Language Understanding", author="Bob Smith"),
    Paper(id="doc-003", title="Federated Learning for Privacy-Preserving Medical Imaging", author="Carol Zhang"),
]
NOTES = [Note(id="doc-001", title="Reading notes on solar nowcasting")]


@pytest.fixture
async def live_service(meilisearch_ready: str, meilisearch_master_key: str) -> AsyncIterator[SearchService]:
    settings = Settings(
        _env_file=None,  # type: ignore[call-arg]
        search={"url": meilisearch_ready, "master_key": meilisearch_master_key},
    )
    registry = TypeRegistry()
    registry.register(Paper)
    registry.register(Note)
    service = await SearchService.from_settings(settings, registry, InMemoryStore(*PAPERS, *NOTES))
    assert service is not None

    for record in [*PAPERS, *NOTES]:
        await service.indexer.add_to_search(record, wait=True)
    yield service

    await service.indexer.delete_index(Paper, wait=True)
    await service.close()


class TestLiveSearch:
    async def test_hydrated_search(self, live_service: SearchService) -> None:
        result = await live_service.search(Paper, "solar nowcasting")
        assert result["matches"][0] == PAPERS[0]
        assert result["search_result_metadata"]["query"] == "solar nowcasting"

    async def test_class_filter(self, live_service: SearchService) -> None:
        result = await live_service.search(Note, "solar")
        assert result["matches"] == NOTES

    async def test_shared_index_without_class_filter(self, live_service: SearchService) -> None:
        result = await live_service.search(Paper, "solar", filtered_by_class=False)
        assert {type(match) for match in result["matches"]} == {Paper, Note}

    async def test_ids_only(self, live_service: SearchService) -> None:
        result = await live_service.search(Note, "solar", ids_only=True)
        assert result["matches"] == ["doc-001"]

    async def test_configuration_is_stable(self, live_service: SearchService) -> None:
        assert await live_service.attributes.configure_attributes_and_index_if_needed(Paper) == []

    async def test_searchable_documents(self, live_service: SearchService) -> None:
        assert await live_service.searchable_documents(Paper) == 4
