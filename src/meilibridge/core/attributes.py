"""Attribute Configuration Reconciler — Desired vs. reported index settings.

Computes the filterable/sortable attribute sets each type wants, pushes them
to the engine, and bootstraps missing indexes.  Changing filterable or
sortable attributes makes Meilisearch rebuild the index, so
``configure_attributes_and_index_if_needed`` only pushes what has drifted.

Several types may share one index.  The settings pushed to an index are the
union of what every registered type on it wants, so writes of one type never
undo the settings of another.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from meilibridge.core.indexes import IndexAccessor
from meilibridge.engine.client import Task
from meilibridge.engine.exceptions import IndexNotFoundError
from meilibridge.models.document import OBJECT_CLASS
from meilibridge.models.registry import TypeRegistry

logger = logging.getLogger(__name__)

# https://www.meilisearch.com/docs/learn/core_concepts/relevancy#ranking-rules
DEFAULT_RANKING_RULES = ["words", "typo", "proximity", "attribute", "sort", "exactness"]


def _union(attribute_lists: Iterable[list[str]]) -> list[str]:
    merged: list[str] = []
    for attributes in attribute_lists:
        merged.extend(name for name in attributes if name not in merged)
    return merged


class AttributeReconciler:
    """Computes and reconciles per-type index configuration.

    Args:
        registry: Registered searchable types.
        accessor: Index accessor used to reach the admin index.
    """

    def __init__(self, registry: TypeRegistry, accessor: IndexAccessor) -> None:
        self.registry = registry
        self.accessor = accessor

    # ── Desired state ────────────────────────────────────────────────────

    def _restricted(self, model: type, override: list[str] | None, fallback: list[str]) -> list[str]:
        if override is not None:
            searchable = set(self.registry.searchable_attributes(model))
            attributes = [name for name in override if name in searchable]
        else:
            attributes = list(fallback)
        if OBJECT_CLASS not in attributes:
            attributes.append(OBJECT_CLASS)
        return attributes

    def filterable_attributes(self, model: type) -> list[str]:
        """Attributes the type can filter on; always includes ``object_class``.

        The configured override is restricted to searchable attributes.
        Without one, every searchable attribute is filterable unless the type
        is marked unfilterable.
        """
        config = self.registry.config_for(model)
        fallback = [] if config.unfilterable else self.registry.searchable_attributes(model)
        return self._restricted(model, config.filterable_attributes, fallback)

    def sortable_attributes(self, model: type) -> list[str]:
        """Attributes the type can sort on; defaults to the filterable set."""
        config = self.registry.config_for(model)
        return self._restricted(model, config.sortable_attributes, self.filterable_attributes(model))

    def ranking_rules(self, model: type) -> list[str]:
        config = self.registry.config_for(model)
        return list(config.ranking_rules) if config.ranking_rules is not None else list(DEFAULT_RANKING_RULES)

    def types_sharing_index(self, model: type) -> list[type]:
        """``model`` followed by every other registered type using its index."""
        index_name = self.accessor.search_index_name(model)
        sharing = [model]
        for type_name in self.registry.registered_types:
            other = self.registry.resolve(type_name)
            if other is not model and self.accessor.search_index_name(other) == index_name:
                sharing.append(other)
        return sharing

    def index_filterable_attributes(self, model: type) -> list[str]:
        """Filterable attributes of ``model``'s index: the union over the types sharing it."""
        return _union(self.filterable_attributes(m) for m in self.types_sharing_index(model))

    def index_sortable_attributes(self, model: type) -> list[str]:
        """Sortable attributes of ``model``'s index: the union over the types sharing it."""
        return _union(self.sortable_attributes(m) for m in self.types_sharing_index(model))

    # ── Pushing settings ─────────────────────────────────────────────────

    async def set_filterable_attributes(
        self,
        model: type,
        attributes: list[str] | None = None,
        *,
        wait: bool = False,
    ) -> Task:
        """Push filterable attributes (defaults to ``index_filterable_attributes(model)``).

        Returns:
            The engine task, or the finished task when ``wait`` is set.

        Raises:
            TaskFailedError: If ``wait`` is set and the update fails.
            TaskTimeoutError: If ``wait`` is set and the update does not finish in time.
        """
        attributes = self.index_filterable_attributes(model) if attributes is None else attributes
        index = self.accessor.administratable_index(model)
        logger.info("Updating filterable attributes of index %s: %s", index.uid, attributes)
        task = await index.update_filterable_attributes(attributes)
        return await index.client.settle(task, wait)

    async def set_sortable_attributes(
        self,
        model: type,
        attributes: list[str] | None = None,
        *,
        wait: bool = False,
    ) -> Task:
        """Push sortable attributes (defaults to ``index_sortable_attributes(model)``)."""
        attributes = self.index_sortable_attributes(model) if attributes is None else attributes
        index = self.accessor.administratable_index(model)
        logger.info("Updating sortable attributes of index %s: %s", index.uid, attributes)
        task = await index.update_sortable_attributes(attributes)
        return await index.client.settle(task, wait)

    async def set_ranking_rules(self, model: type, *, wait: bool = False) -> Task:
        index = self.accessor.administratable_index(model)
        rules = self.ranking_rules(model)
        logger.info("Updating ranking rules of index %s: %s", index.uid, rules)
        task = await index.update_ranking_rules(rules)
        return await index.client.settle(task, wait)

    # ── Reconciliation ───────────────────────────────────────────────────

    async def configure_attributes_and_index_if_needed(self, model: type, *, wait: bool = True) -> list[Task]:
        """Create the index if missing and push drifted attribute settings.

        Safe to call on every write: when the engine already reports the
        desired filterable and sortable attributes, no update is issued.
        A newly created index also receives the type's ranking rules when
        they are configured.

        Args:
            model: The registered type.
            wait: Wait for pushed settings to be applied.

        Returns:
            The settings tasks that were issued (empty when nothing drifted).
        """
        index = self.accessor.administratable_index(model)
        config = self.registry.config_for(model)

        current_filterable: list[Any] | None
        current_sortable: list[Any] | None
        created = False
        try:
            current_filterable = await index.get_filterable_attributes()
        except IndexNotFoundError:
            logger.info("Search index %s not found; creating it", index.uid)
            task = await index.client.create_index(index.uid, config.primary_search_key)
            await index.client.wait_for_task(task["taskUid"])
            current_filterable = current_sortable = None
            created = True
        else:
            current_sortable = await index.get_sortable_attributes()

        tasks: list[Task] = []
        desired_filterable = self.index_filterable_attributes(model)
        if current_filterable is None or set(current_filterable) != set(desired_filterable):
            tasks.append(await self.set_filterable_attributes(model, desired_filterable, wait=wait))

        desired_sortable = self.index_sortable_attributes(model)
        if current_sortable is None or set(current_sortable) != set(desired_sortable):
            tasks.append(await self.set_sortable_attributes(model, desired_sortable, wait=wait))

        if created and config.ranking_rules is not None:
            tasks.append(await self.set_ranking_rules(model, wait=wait))

        if not tasks:
            logger.debug("Search index %s already configured", index.uid)
        return tasks
