"""Type Registry — Registration and lookup of searchable record types.

Types are registered together with their ``SearchConfig``; hits refer to
their owning type by name (``object_class``), which the registry resolves
back to the class.
"""

from __future__ import annotations

import logging

from meilibridge.engine.exceptions import TypeNotRegisteredError
from meilibridge.models.searchable import SearchConfig, declared_fields

logger = logging.getLogger(__name__)


class TypeRegistry:
    """Registry of searchable record types.

    Example:
        >>> registry = TypeRegistry()
        >>> registry.register(Note)
        >>> registry.register(Comment, SearchConfig(index_name="general_search"))
        >>> registry.resolve("Note")
        <class 'Note'>
    """

    def __init__(self) -> None:
        self._types: dict[str, type] = {}
        self._configs: dict[str, SearchConfig] = {}

    def register(self, model: type, config: SearchConfig | None = None) -> None:
        """Register a record type.

        Args:
            model: The record class.
            config: Search config; defaults to ``model.search_config()``.
        """
        name = model.__name__
        if name in self._types:
            logger.warning("Overwriting existing search type registration: %s", name)
        if config is None:
            config = model.search_config()
        self._types[name] = model
        self._configs[name] = config
        logger.info("Registered search type: %s", name)

    def resolve(self, type_name: str) -> type:
        """Get a registered type by name.

        Raises:
            TypeNotRegisteredError: If no type is registered under this name.
        """
        if type_name not in self._types:
            raise TypeNotRegisteredError(
                f"No search type registered with name '{type_name}'. "
                f"Registered types: {list(self._types.keys())}"
            )
        return self._types[type_name]

    def config_for(self, model: type) -> SearchConfig:
        """Get the search config of a registered type.

        Raises:
            TypeNotRegisteredError: If the type is not registered.
        """
        name = model.__name__
        if self._types.get(name) is not model:
            raise TypeNotRegisteredError(f"Type '{name}' is not registered for search.")
        return self._configs[name]

    def searchable_attributes(self, model: type) -> list[str]:
        """Configured searchable attributes, else every attribute the type declares."""
        config = self.config_for(model)
        if config.searchable_attributes is not None:
            return list(config.searchable_attributes)
        return declared_fields(model)

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._types

    @property
    def registered_types(self) -> list[str]:
        """List all registered type names."""
        return list(self._types.keys())
