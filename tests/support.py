"""Test doubles: searchable record types, an in-memory store, and a fake Meilisearch."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import BaseModel

from meilibridge.models.document import build_indexable_document, record_key
from meilibridge.models.searchable import SearchConfig

# ── Test record types ─────────────────────────────────────────────────────────


class BasicTestModel(BaseModel):
    id: str
    name: str = ""
    description: str = ""
    age: int = 0

    @classmethod
    def search_config(cls) -> SearchConfig:
        return SearchConfig()

    def to_indexable_document(self) -> dict[str, Any]:
        return build_indexable_document(self)


class RelatedModel(BaseModel):
    id: str
    name: str = ""

    @classmethod
    def search_config(cls) -> SearchConfig:
        return SearchConfig()

    def to_indexable_document(self) -> dict[str, Any]:
        return build_indexable_document(self)


class UnfilterableTestModel(BasicTestModel):
    @classmethod
    def search_config(cls) -> SearchConfig:
        return SearchConfig(unfilterable=True)


class CustomPrimaryKeyModel(BasicTestModel):
    @classmethod
    def search_config(cls) -> SearchConfig:
        return SearchConfig(primary_search_key="name")


class ExtendedTestModel(BasicTestModel):
    @classmethod
    def search_config(cls) -> SearchConfig:
        return SearchConfig(
            class_prefixed_search_ids=True,
            searchable_attributes=["name", "description", "age"],
            filterable_attributes=["name", "age"],
            index_name="general_search",
            search_options={"limit": 2},
            ranking_rules=["exactness", "sort", "attribute", "proximity", "typo", "words"],
        )


class OtherExtendedTestModel(ExtendedTestModel):
    @classmethod
    def search_config(cls) -> SearchConfig:
        return ExtendedTestModel.search_config().model_copy(update={"sortable_attributes": ["name"]})


@dataclass
class MongoNote:
    """Document-store record keyed by ``_id`` rather than ``id``."""

    _id: str
    name: str = ""

    @classmethod
    def search_config(cls) -> SearchConfig:
        return SearchConfig()

    def to_indexable_document(self) -> dict[str, Any]:
        return build_indexable_document(self)


ALL_TEST_MODELS = [
    BasicTestModel,
    RelatedModel,
    UnfilterableTestModel,
    CustomPrimaryKeyModel,
    ExtendedTestModel,
    OtherExtendedTestModel,
]


# ── In-memory primary store ───────────────────────────────────────────────────


class InMemoryStore:
    """Primary store double that records every batched fetch."""

    def __init__(self, *records: Any) -> None:
        self.tables: dict[type, dict[str, Any]] = {}
        self.fetch_calls: list[tuple[type, list[str]]] = []
        self.add(*records)

    def add(self, *records: Any) -> None:
        for record in records:
            model = type(record)
            self.tables.setdefault(model, {})[record_key(record, model.search_config())] = record

    async def fetch_by_primary_keys(self, model: type, keys: list[str]) -> list[Any]:
        self.fetch_calls.append((model, list(keys)))
        table = self.tables.get(model, {})
        # reversed: the store makes no ordering promise
        return [table[key] for key in reversed(keys) if key in table]

    async def iter_records(self, model: type) -> AsyncIterator[Any]:
        for record in list(self.tables.get(model, {}).values()):
            yield record


# ── Fake Meilisearch (httpx.MockTransport handler) ────────────────────────────


class FakeMeilisearch:
    """Minimal in-memory Meilisearch speaking the REST API.

    Every enqueued task succeeds immediately unless ``task_status`` is changed.
    Search responses are canned per index via ``search_responses``.
    """

    def __init__(self) -> None:
        self.indexes: dict[str, dict[str, Any]] = {}
        self.search_responses: dict[str, dict[str, Any]] = {}
        self.requests: list[tuple[str, str, Any]] = []
        self.tasks: dict[int, dict[str, Any]] = {}
        self.task_status = "succeeded"
        self.keys = [
            {"name": "Default Search API Key", "key": "default-search-key"},
            {"name": "Default Admin API Key", "key": "default-admin-key"},
        ]

    def create(self, uid: str, filterable: list[str] | None = None, sortable: list[str] | None = None) -> None:
        self.indexes[uid] = {"filterable": filterable or [], "sortable": sortable or [], "documents": {}}

    def calls(self, method: str, suffix: str = "") -> list[tuple[str, str, Any]]:
        return [r for r in self.requests if r[0] == method and r[1].endswith(suffix)]

    def _task(self, index_uid: str | None, kind: str) -> httpx.Response:
        uid = len(self.tasks)
        self.tasks[uid] = {"uid": uid, "indexUid": index_uid, "type": kind, "status": self.task_status}
        return httpx.Response(202, json={"taskUid": uid, "indexUid": index_uid, "status": "enqueued", "type": kind})

    @staticmethod
    def _not_found(uid: str) -> httpx.Response:
        return httpx.Response(
            404,
            json={"message": f"Index `{uid}` not found.", "code": "index_not_found", "type": "invalid_request"},
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        path = request.url.path
        self.requests.append((request.method, path, body))
        parts = path.strip("/").split("/")

        if parts == ["health"]:
            return httpx.Response(200, json={"status": "available"})
        if parts == ["keys"]:
            return httpx.Response(200, json={"results": self.keys, "offset": 0, "limit": 20, "total": len(self.keys)})
        if parts[0] == "tasks":
            return httpx.Response(200, json=self.tasks[int(parts[1])])
        if parts == ["indexes"] and request.method == "POST":
            self.create(body["uid"])
            return self._task(body["uid"], "indexCreation")

        uid = parts[1]
        if uid not in self.indexes:
            return self._not_found(uid)
        index = self.indexes[uid]
        rest = parts[2:]

        if not rest and request.method == "DELETE":
            del self.indexes[uid]
            return self._task(uid, "indexDeletion")
        if rest == ["search"]:
            return httpx.Response(200, json=self.search_responses.get(uid, {"hits": [], "query": body["q"]}))
        if rest == ["stats"]:
            return httpx.Response(200, json={"numberOfDocuments": len(index["documents"]), "isIndexing": False})
        if rest[0] == "documents":
            pk = request.url.params.get("primaryKey", "id")
            if request.method in ("POST", "PUT"):
                for document in body:
                    index["documents"][document[pk]] = document
                return self._task(uid, "documentAdditionOrUpdate")
            if len(rest) == 2:
                index["documents"].pop(rest[1], None)
            else:
                index["documents"].clear()
            return self._task(uid, "documentDeletion")
        if rest[0] == "settings":
            setting = {"filterable-attributes": "filterable", "sortable-attributes": "sortable"}.get(rest[1], rest[1])
            if request.method == "GET":
                return httpx.Response(200, json=index.get(setting, []))
            index[setting] = body
            return self._task(uid, "settingsUpdate")
        return httpx.Response(404, json={"message": "unknown route", "code": "not_found"})


