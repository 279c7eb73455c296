"""Hit Normalizer — Engine hits to ordered match descriptors.

Hit order encodes relevance.  Descriptors keep it exactly; every later stage
walks them in this order.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from meilibridge.models.document import OBJECT_CLASS, ORIGINAL_DOCUMENT_ID

_LEADING_TOKEN = re.compile(r"^[^_]+_")


@dataclass(frozen=True)
class MatchDescriptor:
    """One hit, reduced to what hydration needs."""

    id: str
    owning_class: str
    original_id: str


@dataclass
class NormalizedHits:
    """Ordered descriptors plus the original ids grouped by owning type."""

    descriptors: list[MatchDescriptor] = field(default_factory=list)
    groups: dict[str, list[str]] = field(default_factory=dict)

    @property
    def original_ids(self) -> list[str]:
        return [d.original_id for d in self.descriptors]


def demangle_id(document_id: str) -> str:
    """Strip one leading ``"<token>_"`` from a class-prefixed id.

    ``"Note_64274543"`` -> ``"64274543"``.  The token ends at the first
    underscore, so a type name that itself contains ``_`` is not stripped
    completely (``"Foo_Bar_1"`` -> ``"Bar_1"``).  Documents written with
    ``original_document_id`` avoid this.
    """
    return _LEADING_TOKEN.sub("", document_id, count=1)


def normalize_hits(hits: list[dict[str, Any]], primary_key: str, prefixed_ids: bool) -> NormalizedHits:
    """Convert raw hits into match descriptors, in engine order.

    Args:
        hits: The ``hits`` array of a search response.
        primary_key: Field holding the document id.
        prefixed_ids: Whether ids are class-prefixed.

    Returns:
        Descriptors in hit order, and per-type original ids for batched lookups.
    """
    normalized = NormalizedHits()
    for hit in hits:
        document_id = str(hit[primary_key])
        owning_class = hit.get(OBJECT_CLASS, "")
        if not prefixed_ids:
            original_id = document_id
        elif ORIGINAL_DOCUMENT_ID in hit:
            original_id = str(hit[ORIGINAL_DOCUMENT_ID])
        else:
            original_id = demangle_id(document_id)

        normalized.descriptors.append(MatchDescriptor(document_id, owning_class, original_id))
        normalized.groups.setdefault(owning_class, []).append(original_id)
    return normalized
