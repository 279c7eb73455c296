"""Searchable capability — What a record type provides to take part in search.

Record types do not inherit from anything.  They implement the
``Searchable`` protocol and hand a ``SearchConfig`` to the type registry;
unset config fields are filled in by the reconciler with defaults.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


class SearchConfig(BaseModel):
    """Per-type search configuration.

    ``None`` means "use the default" for every optional field.
    """

    model_config = ConfigDict(frozen=True)

    primary_search_key: str = Field(default="id", description="Attribute guaranteed unique; the index primary key")
    index_name: str | None = Field(
        default=None,
        description="Index name. Share one value across types to search them together",
    )
    class_prefixed_search_ids: bool = Field(
        default=False,
        description="Store ids as '<TypeName>_<key>' so several types can share one index",
    )
    searchable_attributes: list[str] | None = Field(default=None, description="Attributes copied into documents")
    filterable_attributes: list[str] | None = Field(default=None, description="Filterable attribute override")
    sortable_attributes: list[str] | None = Field(default=None, description="Sortable attribute override")
    unfilterable: bool = Field(default=False, description="Only 'object_class' is filterable")
    search_options: dict[str, Any] = Field(default_factory=dict, description="Default Meilisearch search parameters")
    ranking_rules: list[str] | None = Field(default=None, description="Ranking rule override")


@runtime_checkable
class Searchable(Protocol):
    """Capability every searchable record type implements.

    ``to_indexable_document`` usually delegates to
    :func:`meilibridge.models.document.build_indexable_document`.
    """

    @classmethod
    def search_config(cls) -> SearchConfig: ...

    def to_indexable_document(self) -> dict[str, Any]: ...


def declared_fields(model: type) -> list[str]:
    """Return the attribute names a model class declares.

    Supports pydantic models, dataclasses, and plain annotated classes.
    """
    model_fields = getattr(model, "model_fields", None)
    if isinstance(model_fields, dict):
        return list(model_fields)
    if dataclasses.is_dataclass(model):
        return [f.name for f in dataclasses.fields(model)]
    names: list[str] = []
    for klass in reversed(model.__mro__):
        for name in getattr(klass, "__annotations__", {}):
            if not name.startswith("__") and name not in names:
                names.append(name)
    return names
