"""Index Accessor — Per-type index names bound to the admin/search clients."""

from __future__ import annotations

import re

from meilibridge.engine.client import IndexHandle
from meilibridge.engine.credentials import EngineClients
from meilibridge.engine.exceptions import ConfigurationError
from meilibridge.models.registry import TypeRegistry

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")


def snake_case(name: str) -> str:
    """``"BasicTestModel"`` -> ``"basic_test_model"``, ``"HTMLPage"`` -> ``"html_page"``."""
    name = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    name = _WORD_BOUNDARY.sub(r"\1_\2", name)
    return name.replace("-", "_").lower()


class IndexAccessor:
    """Resolves index names and binds them to the right client.

    Args:
        registry: Registered searchable types.
        clients: Resolved admin/search clients.
    """

    def __init__(self, registry: TypeRegistry, clients: EngineClients) -> None:
        self.registry = registry
        self.clients = clients

    def search_index_name(self, model: type) -> str:
        """Configured index name, else the snake-cased type name.

        Types sharing an ``index_name`` are searched together.

        Raises:
            ConfigurationError: If the name resolves to an empty string.
        """
        config = self.registry.config_for(model)
        name = config.index_name if config.index_name is not None else snake_case(model.__name__)
        if not name or not name.strip():
            raise ConfigurationError(f'Invalid search index name for {model.__name__}: "{name}"')
        return name

    def administratable_index(self, model: type) -> IndexHandle:
        """The type's index bound to the admin client (writes and settings)."""
        if self.clients.admin_client is None:
            raise ConfigurationError("No admin client available; configure an admin or master key.")
        return self.clients.admin_client.index(self.search_index_name(model))

    def searchable_index(self, model: type) -> IndexHandle:
        """The type's index bound to the search client (queries)."""
        if self.clients.search_client is None:
            raise ConfigurationError("No search client available; configure a search or master key.")
        return self.clients.search_client.index(self.search_index_name(model))
