"""Primary record store interface.

The store owns the records; the search pipeline only borrows them for reads.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class RecordStore(Protocol):
    """Capabilities the pipeline consumes from the primary store."""

    async def fetch_by_primary_keys(self, model: type, keys: list[str]) -> Iterable[Any]:
        """Return the records of ``model`` whose primary key is in ``keys``, in any order.

        Keys with no matching record are simply absent from the result.
        """
        ...

    def iter_records(self, model: type) -> AsyncIterator[Any]:
        """Iterate over every record of ``model`` (used for reindexing)."""
        ...
