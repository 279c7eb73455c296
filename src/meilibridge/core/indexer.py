"""Document Indexer — Write paths from the primary store into the engine.

Every document is validated before submission; a document without
``object_class`` never reaches the engine.  Bulk reindexing writes in
batches of ``REINDEX_BATCH_SIZE``; batches are independent, so a failed run
can simply be started again.
"""

from __future__ import annotations

import logging
from typing import Any

from meilibridge.core.attributes import AttributeReconciler
from meilibridge.core.indexes import IndexAccessor
from meilibridge.engine.client import Task
from meilibridge.models.document import IndexableDocument, validate_documents
from meilibridge.models.registry import TypeRegistry
from meilibridge.models.store import RecordStore
from meilibridge.observability.logging import search_context

logger = logging.getLogger(__name__)

# Matches the primary store's natural page size
REINDEX_BATCH_SIZE = 100


class DocumentIndexer:
    """Adds, updates, and removes documents for registered types.

    Args:
        registry: Registered searchable types.
        accessor: Index accessor used to reach the admin index.
        reconciler: Reconciler used to bootstrap indexes before writes.
        store: The primary record store (read for reindexing).
    """

    def __init__(
        self,
        registry: TypeRegistry,
        accessor: IndexAccessor,
        reconciler: AttributeReconciler,
        store: RecordStore,
    ) -> None:
        self.registry = registry
        self.accessor = accessor
        self.reconciler = reconciler
        self.store = store

    # ── Single records ───────────────────────────────────────────────────

    async def add_to_search(self, record: Any, *, wait: bool = False) -> Task:
        """Index one record, creating and configuring its index first if needed."""
        model = type(record)
        with search_context(model.__name__, self.accessor.search_index_name(model)):
            await self.reconciler.configure_attributes_and_index_if_needed(model)
            return await self.add_documents(model, [record.to_indexable_document()], wait=wait)

    async def update_in_search(self, record: Any, *, wait: bool = False) -> Task:
        return await self.update_documents(type(record), [record.to_indexable_document()], wait=wait)

    async def remove_from_search(self, record: Any, *, wait: bool = False) -> Task:
        """Delete one record's document (by its possibly class-prefixed id)."""
        model = type(record)
        pk = self.registry.config_for(model).primary_search_key
        document_id = str(record.to_indexable_document()[pk])
        return await self.accessor.administratable_index(model).delete_document(document_id, wait=wait)

    # ── Documents ────────────────────────────────────────────────────────

    async def add_documents(self, model: type, documents: list[IndexableDocument], *, wait: bool = False) -> Task:
        """Add documents built by ``to_indexable_document``.

        Raises:
            MalformedDocumentError: If a document lacks ``object_class``.
        """
        validate_documents(documents)
        pk = self.registry.config_for(model).primary_search_key
        return await self.accessor.administratable_index(model).add_documents(documents, pk, wait=wait)

    async def update_documents(self, model: type, documents: list[IndexableDocument], *, wait: bool = False) -> Task:
        """Update documents built by ``to_indexable_document``.

        Raises:
            MalformedDocumentError: If a document lacks ``object_class``.
        """
        validate_documents(documents)
        pk = self.registry.config_for(model).primary_search_key
        return await self.accessor.administratable_index(model).update_documents(documents, pk, wait=wait)

    async def delete_all_documents(self, model: type, *, wait: bool = False) -> Task:
        return await self.accessor.administratable_index(model).delete_all_documents(wait=wait)

    async def delete_index(self, model: type, *, wait: bool = False) -> Task:
        """Delete the type's whole index, with every document in it.

        With a shared index this removes the documents of every type using it.
        """
        index = self.accessor.administratable_index(model)
        logger.warning("Deleting search index %s", index.uid)
        task = await index.client.delete_index(index.uid)
        return await index.client.settle(task, wait)

    # ── Bulk ─────────────────────────────────────────────────────────────

    async def add_all_to_search(self, model: type, *, wait: bool = False) -> list[Task]:
        """Index every record of ``model`` in batches.  Returns one task per batch."""
        tasks: list[Task] = []
        batch: list[IndexableDocument] = []
        async for record in self.store.iter_records(model):
            batch.append(record.to_indexable_document())
            if len(batch) == REINDEX_BATCH_SIZE:
                tasks.append(await self.add_documents(model, batch, wait=wait))
                batch = []
        if batch:
            tasks.append(await self.add_documents(model, batch, wait=wait))

        logger.info("Submitted %d batch(es) of %s documents", len(tasks), model.__name__)
        return tasks

    async def reindex(self, model: type, *, wait: bool = False) -> list[Task]:
        """Rebuild the type's documents from the primary store.

        Clears the index (waiting for it), re-adds every record in batches,
        then pushes the index-wide filterable attributes.  Clearing a shared index
        clears the documents of every type using it.
        """
        with search_context(model.__name__, self.accessor.search_index_name(model)):
            await self.delete_all_documents(model, wait=True)
            tasks = await self.add_all_to_search(model, wait=wait)
            tasks.append(await self.reconciler.set_filterable_attributes(model, wait=wait))
        return tasks
