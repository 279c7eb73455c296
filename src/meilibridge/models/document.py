"""Indexable documents — Projection of records into engine documents."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from meilibridge.engine.exceptions import MalformedDocumentError
from meilibridge.models.searchable import SearchConfig, declared_fields

OBJECT_CLASS = "object_class"
ORIGINAL_DOCUMENT_ID = "original_document_id"

IndexableDocument = dict[str, Any]


def prefixed_id(type_name: str, key: str) -> str:
    """Build a class-prefixed document id: ``"<TypeName>_<key>"``."""
    return f"{type_name}_{key}"


def record_key(record: Any, config: SearchConfig) -> str:
    """Return the record's primary key as a string.

    Records keyed by ``_id`` (document stores) are indexed under ``id``, so an
    ``id`` primary key falls back to ``_id`` when the record has no ``id``.
    """
    pk = config.primary_search_key
    if pk == "id" and not hasattr(record, "id") and hasattr(record, "_id"):
        return str(record._id)
    return str(getattr(record, pk))


def build_indexable_document(
    record: Any,
    config: SearchConfig | None = None,
    searchable_attributes: Iterable[str] | None = None,
) -> IndexableDocument:
    """Project a record into a Meilisearch document.

    Copies the searchable attributes, then guarantees:

      - the primary key field is a string (``_id`` is renamed to ``id`` when
        the primary key is ``id`` and only ``_id`` is present)
      - ``object_class`` names the record's type, unless already set
      - with class-prefixed ids, the key becomes ``"<TypeName>_<key>"`` and
        ``original_document_id`` holds the unprefixed key

    Args:
        record: The record to project.
        config: Search config; defaults to ``type(record).search_config()``.
        searchable_attributes: Attributes to copy; defaults to the config's
            override, then to the attributes the type declares.

    Returns:
        The indexable document.
    """
    model = type(record)
    if config is None:
        config = model.search_config()
    if searchable_attributes is None:
        searchable_attributes = config.searchable_attributes or declared_fields(model)

    document: IndexableDocument = {str(name): getattr(record, name) for name in searchable_attributes}

    pk = config.primary_search_key
    if pk == "id" and "_id" in document and "id" not in document:
        key = str(document.pop("_id"))
    elif pk in document:
        key = str(document[pk])
    else:
        key = record_key(record, config)

    type_name = model.__name__
    document[pk] = prefixed_id(type_name, key) if config.class_prefixed_search_ids else key
    document.setdefault(OBJECT_CLASS, type_name)
    if config.class_prefixed_search_ids:
        document[ORIGINAL_DOCUMENT_ID] = key
    return document


def validate_documents(documents: Iterable[IndexableDocument]) -> None:
    """Reject documents that lack ``object_class``.

    Raises:
        MalformedDocumentError: If any document has no ``object_class``.
    """
    for position, document in enumerate(documents):
        if not document.get(OBJECT_CLASS):
            raise MalformedDocumentError(
                f"All searchable documents must define {OBJECT_CLASS} (document #{position} does not)"
            )
