"""Searchable record models, documents, and the type registry."""

from meilibridge.models.document import build_indexable_document, validate_documents
from meilibridge.models.registry import TypeRegistry
from meilibridge.models.searchable import Searchable, SearchConfig
from meilibridge.models.store import RecordStore

__all__ = [
    "RecordStore",
    "SearchConfig",
    "Searchable",
    "TypeRegistry",
    "build_indexable_document",
    "validate_documents",
]
