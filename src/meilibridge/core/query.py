"""Query Executor — Search option building and the raw engine query."""

from __future__ import annotations

import copy
from typing import Any

from meilibridge.core.indexes import IndexAccessor
from meilibridge.models.document import OBJECT_CLASS, ORIGINAL_DOCUMENT_ID
from meilibridge.models.registry import TypeRegistry

SearchOptions = dict[str, Any]
"""Meilisearch search parameters, in the engine's camelCase.

See https://www.meilisearch.com/docs/reference/api/search#search-parameters
"""


def filter_search_options_by_class(options: SearchOptions, type_name: str) -> SearchOptions:
    """Restrict a search to documents whose ``object_class`` is ``type_name``.

    An existing list filter gets a new element, an existing string filter is
    extended with ``AND``, and a missing filter becomes a one-element list.
    """
    class_filter = f"{OBJECT_CLASS} = {type_name}"
    existing = options.get("filter")
    if isinstance(existing, list):
        options["filter"] = [*existing, class_filter]
    elif isinstance(existing, str) and existing:
        options["filter"] = f"{existing} AND {class_filter}"
    else:
        options["filter"] = [class_filter]
    return options


class QueryExecutor:
    """Builds search options and runs queries against a type's search index.

    Args:
        registry: Registered searchable types.
        accessor: Index accessor used to reach the search index.
    """

    def __init__(self, registry: TypeRegistry, accessor: IndexAccessor) -> None:
        self.registry = registry
        self.accessor = accessor

    def build_search_options(
        self,
        model: type,
        options: SearchOptions | None = None,
        *,
        ids_only: bool = False,
        filtered_by_class: bool = True,
    ) -> SearchOptions:
        """Prepare the options for one query.

        The caller's options (or the type's configured defaults) are copied,
        never modified.  ``attributesToRetrieve`` always includes the primary
        key, plus ``object_class`` unless only ids are wanted, and
        ``original_document_id`` for class-prefixed ids.
        """
        config = self.registry.config_for(model)
        built = copy.deepcopy(config.search_options if options is None else options)
        pk = config.primary_search_key

        required = [pk] if ids_only else [pk, OBJECT_CLASS]
        if config.class_prefixed_search_ids:
            required.append(ORIGINAL_DOCUMENT_ID)
        retrieve = list(built.get("attributesToRetrieve") or [])
        if "*" not in retrieve:
            retrieve.extend(attribute for attribute in required if attribute not in retrieve)
            built["attributesToRetrieve"] = retrieve

        if filtered_by_class:
            filter_search_options_by_class(built, model.__name__)
        return built

    async def raw_search(self, model: type, query: str, options: SearchOptions | None = None) -> dict[str, Any]:
        """Run one query and return the engine response untouched.

        The response carries ``hits`` plus ``query``, ``processingTimeMs``,
        ``limit``, ``offset``, and ``estimatedTotalHits``.
        """
        if options is None:
            options = self.registry.config_for(model).search_options
        index = self.accessor.searchable_index(model)
        return await index.search(query, options)
