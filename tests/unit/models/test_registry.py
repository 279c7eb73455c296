"""Tests for the type registry."""

from __future__ import annotations

import pytest
from support import BasicTestModel, ExtendedTestModel, RelatedModel

from meilibridge.engine.exceptions import TypeNotRegisteredError
from meilibridge.models.registry import TypeRegistry
from meilibridge.models.searchable import SearchConfig


class TestTypeRegistry:
    def test_register_uses_search_config(self) -> None:
        registry = TypeRegistry()
        registry.register(ExtendedTestModel)
        assert registry.config_for(ExtendedTestModel).index_name == "general_search"

    def test_register_with_explicit_config(self) -> None:
        registry = TypeRegistry()
        registry.register(RelatedModel, SearchConfig(index_name="people"))
        assert registry.config_for(RelatedModel).index_name == "people"

    def test_resolve_by_name(self, registry: TypeRegistry) -> None:
        assert registry.resolve("BasicTestModel") is BasicTestModel
        assert "BasicTestModel" in registry

    def test_resolve_unknown_raises(self, registry: TypeRegistry) -> None:
        with pytest.raises(TypeNotRegisteredError, match="Nope"):
            registry.resolve("Nope")

    def test_config_for_unregistered_raises(self) -> None:
        with pytest.raises(TypeNotRegisteredError):
            TypeRegistry().config_for(BasicTestModel)

    def test_searchable_attributes_default_to_fields(self, registry: TypeRegistry) -> None:
        assert registry.searchable_attributes(BasicTestModel) == ["id", "name", "description", "age"]

    def test_searchable_attributes_override(self, registry: TypeRegistry) -> None:
        assert registry.searchable_attributes(ExtendedTestModel) == ["name", "description", "age"]

    def test_registered_types(self) -> None:
        registry = TypeRegistry()
        registry.register(BasicTestModel)
        registry.register(RelatedModel)
        assert registry.registered_types == ["BasicTestModel", "RelatedModel"]
