"""Integration test fixtures — a live Meilisearch instance.

Expects an engine to be running, for example:
    docker run -p 7700:7700 -e MEILI_MASTER_KEY=test-master-key getmeili/meilisearch

Override the location with MEILIBRIDGE_TEST_URL / MEILIBRIDGE_TEST_MASTER_KEY.
"""

from __future__ import annotations

import os
import time

import httpx
import pytest


def _wait_for_service(url: str, timeout: float = 30.0) -> bool:
    """Block until *url* returns HTTP 200, or timeout."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            r = httpx.get(url, timeout=5)
            if r.status_code == 200:
                return True
        except httpx.HTTPError:
            pass
        time.sleep(1)
    return False


@pytest.fixture(scope="session")
def meilisearch_ready() -> str:
    """Ensure Meilisearch is running and return its URL."""
    url = os.environ.get("MEILIBRIDGE_TEST_URL", "http://localhost:7700")
    if not _wait_for_service(f"{url}/health", timeout=5.0):
        pytest.skip(f"Meilisearch not available at {url}")
    return url


@pytest.fixture(scope="session")
def meilisearch_master_key() -> str:
    return os.environ.get("MEILIBRIDGE_TEST_MASTER_KEY", "test-master-key")
