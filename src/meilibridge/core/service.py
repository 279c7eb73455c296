"""Search Service — Core orchestrator for the reconciliation pipeline.

A search runs as one awaited call chain:
  1. Query Executor: build options, run the raw query
  2. Hit Normalizer: ordered match descriptors + per-type id groups
  3. Object Hydrator: one primary-store fetch per owning type
  4. Result Assembler: matches + paging metadata

Ids-only searches, and searches without hits, skip hydration entirely.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from meilibridge.core.assembler import SearchResult, assemble_results
from meilibridge.core.attributes import AttributeReconciler
from meilibridge.core.hydrator import ObjectHydrator
from meilibridge.core.indexes import IndexAccessor
from meilibridge.core.indexer import DocumentIndexer
from meilibridge.core.normalizer import normalize_hits
from meilibridge.core.query import QueryExecutor, SearchOptions
from meilibridge.engine.credentials import CredentialResolver, EngineClients
from meilibridge.models.registry import TypeRegistry
from meilibridge.models.store import RecordStore
from meilibridge.observability.logging import search_context

if TYPE_CHECKING:
    from meilibridge.config.settings import Settings

logger = logging.getLogger(__name__)


async def build_clients(settings: Settings) -> EngineClients | None:
    """Resolve engine clients from settings.

    Returns:
        The client pair, or ``None`` when search is disabled.

    Raises:
        ConfigurationError: If search is enabled but no client can be built.
    """
    if not settings.search.enabled:
        logger.info("Search disabled by configuration")
        return None
    return await CredentialResolver(settings.search.to_credentials()).resolve()


class SearchService:
    """Searches registered types and maps hits back to primary-store records.

    Attributes:
        registry: Registered searchable types.
        clients: Admin/search engine clients.
        store: The primary record store.
        indexes: Index accessor.
        attributes: Attribute configuration reconciler.
        executor: Query executor.
        hydrator: Object hydrator.
        indexer: Document write paths.
    """

    def __init__(self, registry: TypeRegistry, clients: EngineClients, store: RecordStore) -> None:
        self.registry = registry
        self.clients = clients
        self.store = store
        self.indexes = IndexAccessor(registry, clients)
        self.attributes = AttributeReconciler(registry, self.indexes)
        self.executor = QueryExecutor(registry, self.indexes)
        self.hydrator = ObjectHydrator(registry, store)
        self.indexer = DocumentIndexer(registry, self.indexes, self.attributes, store)

    @classmethod
    async def from_settings(cls, settings: Settings, registry: TypeRegistry, store: RecordStore) -> SearchService | None:
        """Build a service from settings; ``None`` when search is disabled."""
        clients = await build_clients(settings)
        if clients is None:
            return None
        return cls(registry, clients, store)

    async def close(self) -> None:
        await self.clients.close()

    # ── Search ───────────────────────────────────────────────────────────

    async def raw_search(self, model: type, query: str, options: SearchOptions | None = None) -> dict[str, Any]:
        """Run a query and return the unmodified engine response."""
        return await self.executor.raw_search(model, query, options)

    async def search(
        self,
        model: type,
        query: str,
        options: SearchOptions | None = None,
        *,
        ids_only: bool = False,
        filtered_by_class: bool = True,
        include_metadata: bool = True,
    ) -> SearchResult:
        """Search a type's index and return matches in relevance order.

        Args:
            model: The registered type whose index is searched.
            query: What you're searching for.
            options: Meilisearch search parameters; defaults to the type's
                configured ``search_options``.  Never modified.
            ids_only: Return original ids instead of records.
            filtered_by_class: Restrict hits to ``object_class == model``.
                Disable to search every type sharing the index.
            include_metadata: Add ``search_result_metadata`` (query,
                processingTimeMs, limit, offset, estimatedTotalHits, nbHits).

        Returns:
            ``{"matches": [...], "search_result_metadata": {...}}``

        Raises:
            EngineAPIError: If the engine call fails.
        """
        with search_context(model.__name__, self.indexes.search_index_name(model)):
            return await self._search(model, query, options, ids_only, filtered_by_class, include_metadata)

    async def _search(
        self,
        model: type,
        query: str,
        options: SearchOptions | None,
        ids_only: bool,
        filtered_by_class: bool,
        include_metadata: bool,
    ) -> SearchResult:
        start = time.monotonic()
        config = self.registry.config_for(model)
        built = self.executor.build_search_options(
            model,
            options,
            ids_only=ids_only,
            filtered_by_class=filtered_by_class,
        )
        response = await self.executor.raw_search(model, query, built)
        hits = response.get("hits") or []
        normalized = normalize_hits(hits, config.primary_search_key, config.class_prefixed_search_ids)

        if ids_only or not hits:
            matches: list[Any] = normalized.original_ids
        else:
            hydration = await self.hydrator.hydrate(normalized)
            matches = hydration.records

        logger.info(
            "Search %s for %r: %d hit(s), %d match(es) in %d ms",
            model.__name__,
            query,
            len(hits),
            len(matches),
            int((time.monotonic() - start) * 1000),
        )
        return assemble_results(matches, response, include_metadata)

    # ── Index inspection ─────────────────────────────────────────────────

    async def search_stats(self, model: type) -> dict[str, Any]:
        return await self.indexes.administratable_index(model).get_stats()

    async def searchable_documents(self, model: type) -> int:
        """Number of documents in the type's index."""
        stats = await self.search_stats(model)
        return int(stats.get("numberOfDocuments", 0))
