"""Object Hydrator — Batched primary-store lookups for match descriptors.

One ``fetch_by_primary_keys`` call is made per owning type, and the groups
are fetched concurrently.  Records are then emitted by walking the
descriptors once, so relevance order is preserved without re-sorting.

Failure policy:
  - A descriptor whose record no longer exists (stale index entry) is
    dropped.
  - A group whose type cannot be resolved, or whose fetch raises, is
    recorded in ``HydrationResult.failed_groups`` and logged; the other
    groups still hydrate.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from meilibridge.core.normalizer import NormalizedHits
from meilibridge.engine.exceptions import TypeNotRegisteredError, UnresolvableTypeError
from meilibridge.models.document import record_key
from meilibridge.models.registry import TypeRegistry
from meilibridge.models.store import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class HydrationResult:
    """Hydrated records in relevance order, plus per-type failures."""

    records: list[Any] = field(default_factory=list)
    failed_groups: dict[str, Exception] = field(default_factory=dict)


class ObjectHydrator:
    """Turns normalized hits back into primary-store records.

    Args:
        registry: Registered searchable types, used to resolve ``object_class``.
        store: The primary record store.
    """

    def __init__(self, registry: TypeRegistry, store: RecordStore) -> None:
        self.registry = registry
        self.store = store

    async def _fetch_group(self, type_name: str, ids: list[str]) -> dict[str, Any]:
        try:
            model = self.registry.resolve(type_name)
        except TypeNotRegisteredError as e:
            raise UnresolvableTypeError(f"Cannot resolve owning type '{type_name}' of {len(ids)} hit(s)") from e

        config = self.registry.config_for(model)
        records = await self.store.fetch_by_primary_keys(model, ids)
        return {record_key(record, config): record for record in records}

    async def hydrate(self, normalized: NormalizedHits) -> HydrationResult:
        """Fetch the records behind ``normalized`` and return them in hit order."""
        result = HydrationResult()
        type_names = list(normalized.groups)

        outcomes = await asyncio.gather(
            *(self._fetch_group_safely(name, normalized.groups[name]) for name in type_names)
        )

        lookup: dict[str, dict[str, Any]] = {}
        for type_name, (records, error) in zip(type_names, outcomes, strict=True):
            if error is not None:
                result.failed_groups[type_name] = error
            else:
                lookup[type_name] = records

        dropped = 0
        for descriptor in normalized.descriptors:
            records = lookup.get(descriptor.owning_class)
            if records is None:
                continue
            record = records.get(descriptor.original_id)
            if record is None:
                dropped += 1
                continue
            result.records.append(record)

        if dropped:
            logger.debug("Dropped %d hit(s) with no matching record in the primary store", dropped)
        return result

    async def _fetch_group_safely(self, type_name: str, ids: list[str]) -> tuple[dict[str, Any], Exception | None]:
        try:
            return await self._fetch_group(type_name, ids), None
        except Exception as e:
            logger.warning("Hydration failed for %d %s hit(s): %s", len(ids), type_name or "<untyped>", e, exc_info=True)
            return {}, e
