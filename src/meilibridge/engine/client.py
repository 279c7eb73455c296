"""Meilisearch client — Narrow async wrapper around the Meilisearch REST API.

Only the operations the reconciliation pipeline and the write paths need are
exposed; nothing is forwarded dynamically.  Communication goes through
``httpx``.

Usage::

    async with MeilisearchClient("http://localhost:7700", api_key="admin-key") as client:
        index = client.index("notes")
        task = await index.add_documents([{"id": "1", "object_class": "Note"}], "id", wait=True)
        response = await index.search("hello", {"limit": 5})
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import httpx

from meilibridge.engine.exceptions import (
    EngineAPIError,
    IndexNotFoundError,
    TaskFailedError,
    TaskTimeoutError,
)

logger = logging.getLogger(__name__)

Task = dict[str, Any]
"""Task handle returned by asynchronous engine operations (carries ``taskUid``)."""

TASK_FINISHED_OK = "succeeded"
TASK_FINISHED_ERROR = frozenset({"failed", "canceled"})
MAX_POLL_INTERVAL = 1.0


class MeilisearchClient:
    """Async client for a single Meilisearch instance and API key.

    Args:
        url: Meilisearch instance URL, e.g. ``"http://localhost:7700"``.
        api_key: Master, admin, or search API key.
        timeout: HTTP request timeout in seconds.  Also bounds task polling.
        max_retries: Connection retries performed by the HTTP transport.
        poll_interval: Initial interval in seconds between task status polls.
        transport: Optional custom ``httpx`` transport (used by tests).
    """

    def __init__(
        self,
        url: str,
        api_key: str | None = None,
        *,
        timeout: float = 10.0,
        max_retries: int = 2,
        poll_interval: float = 0.05,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.max_retries = max_retries
        self.poll_interval = poll_interval

        headers: dict[str, str] = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        self._http = httpx.AsyncClient(
            base_url=self.url,
            timeout=httpx.Timeout(timeout),
            headers=headers,
            transport=transport or httpx.AsyncHTTPTransport(retries=max_retries),
        )

    async def __aenter__(self) -> MeilisearchClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()

    def __repr__(self) -> str:
        return f"MeilisearchClient(url={self.url!r})"

    # ── Transport ────────────────────────────────────────────────────────

    async def request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            IndexNotFoundError: If the engine replies with ``index_not_found``.
            EngineAPIError: For any other HTTP error or transport failure.
        """
        try:
            resp = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise EngineAPIError(f"Meilisearch request {method} {path} failed: {e}") from e

        if resp.status_code >= 400:
            try:
                body = resp.json()
            except ValueError:
                body = {}
            code = body.get("code") if isinstance(body, dict) else None
            message = body.get("message") if isinstance(body, dict) else None
            error_cls = IndexNotFoundError if code == "index_not_found" else EngineAPIError
            raise error_cls(
                f"Meilisearch {method} {path} returned HTTP {resp.status_code}: {message or resp.text}",
                status_code=resp.status_code,
                code=code,
            )

        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    # ── Instance-level operations ────────────────────────────────────────

    async def health(self) -> dict[str, Any]:
        return await self.request("GET", "/health")

    async def list_keys(self) -> dict[str, Any]:
        """List API keys.  Requires the master key.

        Returns:
            ``{"results": [{"name": ..., "key": ...}, ...], ...}``
        """
        return await self.request("GET", "/keys")

    async def create_index(self, uid: str, primary_key: str | None = None) -> Task:
        payload: dict[str, Any] = {"uid": uid}
        if primary_key:
            payload["primaryKey"] = primary_key
        return await self.request("POST", "/indexes", json=payload)

    async def delete_index(self, uid: str) -> Task:
        return await self.request("DELETE", f"/indexes/{uid}")

    async def get_task(self, task_uid: int) -> dict[str, Any]:
        return await self.request("GET", f"/tasks/{task_uid}")

    async def wait_for_task(
        self,
        task_uid: int,
        *,
        timeout: float | None = None,
        interval: float | None = None,
    ) -> dict[str, Any]:
        """Poll a task until it finishes.

        The polling interval doubles after each attempt up to one second.

        Args:
            task_uid: The task identifier returned by an asynchronous call.
            timeout: Polling budget in seconds.  Defaults to the request timeout.
            interval: Initial polling interval in seconds.  Defaults to ``poll_interval``.

        Returns:
            The finished task, with status ``succeeded``.

        Raises:
            TaskFailedError: If the task ends as ``failed`` or ``canceled``.
            TaskTimeoutError: If the task is still pending when the budget runs out.
        """
        budget = self.timeout if timeout is None else timeout
        deadline = time.monotonic() + budget
        interval = self.poll_interval if interval is None else interval

        while True:
            task = await self.get_task(task_uid)
            status = task.get("status")
            if status == TASK_FINISHED_OK:
                logger.debug("Task %s succeeded", task_uid)
                return task
            if status in TASK_FINISHED_ERROR:
                raise TaskFailedError(task)

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise TaskTimeoutError(f"Task {task_uid} still {status} after {budget:.1f}s")
            await asyncio.sleep(min(interval, remaining))
            interval = min(interval * 2, MAX_POLL_INTERVAL)

    async def settle(self, task: Task, wait: bool) -> Task:
        """Return ``task`` as-is, or wait for it when ``wait`` is set."""
        if not wait:
            return task
        return await self.wait_for_task(task["taskUid"])

    def index(self, uid: str) -> IndexHandle:
        """Bind an index UID to this client."""
        return IndexHandle(self, uid)


class IndexHandle:
    """A Meilisearch index bound to a specific client (and therefore API key).

    Write operations return the engine task handle.  Passing ``wait=True``
    blocks until the task has finished and returns the finished task instead.
    """

    def __init__(self, client: MeilisearchClient, uid: str) -> None:
        self.client = client
        self.uid = uid

    def __repr__(self) -> str:
        return f"IndexHandle(uid={self.uid!r}, client={self.client!r})"

    @property
    def _path(self) -> str:
        return f"/indexes/{self.uid}"

    # ── Search ───────────────────────────────────────────────────────────

    async def search(self, query: str, options: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute a search and return the unmodified engine response."""
        payload = {"q": query, **(options or {})}
        return await self.client.request("POST", f"{self._path}/search", json=payload)

    async def get_stats(self) -> dict[str, Any]:
        return await self.client.request("GET", f"{self._path}/stats")

    # ── Documents ────────────────────────────────────────────────────────

    async def add_documents(
        self,
        documents: list[dict[str, Any]],
        primary_key: str | None = None,
        *,
        wait: bool = False,
    ) -> Task:
        params = {"primaryKey": primary_key} if primary_key else None
        task = await self.client.request("POST", f"{self._path}/documents", json=documents, params=params)
        return await self.client.settle(task, wait)

    async def update_documents(
        self,
        documents: list[dict[str, Any]],
        primary_key: str | None = None,
        *,
        wait: bool = False,
    ) -> Task:
        params = {"primaryKey": primary_key} if primary_key else None
        task = await self.client.request("PUT", f"{self._path}/documents", json=documents, params=params)
        return await self.client.settle(task, wait)

    async def delete_document(self, document_id: str, *, wait: bool = False) -> Task:
        task = await self.client.request("DELETE", f"{self._path}/documents/{document_id}")
        return await self.client.settle(task, wait)

    async def delete_all_documents(self, *, wait: bool = False) -> Task:
        task = await self.client.request("DELETE", f"{self._path}/documents")
        return await self.client.settle(task, wait)

    # ── Settings ─────────────────────────────────────────────────────────

    async def get_filterable_attributes(self) -> list[str]:
        return await self.client.request("GET", f"{self._path}/settings/filterable-attributes")

    async def update_filterable_attributes(self, attributes: list[str]) -> Task:
        return await self.client.request("PUT", f"{self._path}/settings/filterable-attributes", json=attributes)

    async def get_sortable_attributes(self) -> list[str]:
        return await self.client.request("GET", f"{self._path}/settings/sortable-attributes")

    async def update_sortable_attributes(self, attributes: list[str]) -> Task:
        return await self.client.request("PUT", f"{self._path}/settings/sortable-attributes", json=attributes)

    async def update_ranking_rules(self, rules: list[str]) -> Task:
        return await self.client.request("PUT", f"{self._path}/settings/ranking-rules", json=rules)
