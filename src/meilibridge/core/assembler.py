"""Result Assembler — Final search result shape."""

from __future__ import annotations

from typing import Any

SearchResult = dict[str, Any]
"""``{"matches": [...], "search_result_metadata": {...}}``"""

# Meilisearch < 1.0 reports nbHits, later versions estimatedTotalHits
RESPONSE_METADATA_KEYS = (
    "query",
    "processingTimeMs",
    "limit",
    "offset",
    "estimatedTotalHits",
    "nbHits",
)


def extract_metadata(response: dict[str, Any]) -> dict[str, Any]:
    """Copy the paging metadata fields present in a raw engine response."""
    return {key: response[key] for key in RESPONSE_METADATA_KEYS if key in response}


def assemble_results(matches: list[Any], response: dict[str, Any], include_metadata: bool = True) -> SearchResult:
    """Build ``{"matches": matches}``, merged with the response metadata if asked."""
    result: SearchResult = {"matches": matches}
    if include_metadata:
        result["search_result_metadata"] = extract_metadata(response)
    return result
