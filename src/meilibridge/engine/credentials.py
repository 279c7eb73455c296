"""Credential resolution — Derive least-privilege engine clients.

Two clients are built:

  - an **admin** client, used for document writes and index settings
  - a **search** client, used for queries only

Explicit admin/search keys always win.  When either is missing and a master
key is configured, the master key is used exactly once to list the engine's
keys and pick the ``Default Search API Key`` / ``Default Admin API Key``
entries.  The master client is closed immediately afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from meilibridge.engine.client import MeilisearchClient
from meilibridge.engine.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_KEY_NAME = "Default Search API Key"
DEFAULT_ADMIN_KEY_NAME = "Default Admin API Key"

ClientFactory = Callable[..., MeilisearchClient]


class CredentialSet(BaseModel):
    """Engine URL and keys.  Immutable; replace it to reconfigure."""

    model_config = ConfigDict(frozen=True)

    url: str | None = Field(default=None, description="Meilisearch instance URL")
    master_key: str | None = Field(default=None, description="Master key, able to mint other keys")
    admin_key: str | None = Field(default=None, description="Explicit admin API key")
    search_key: str | None = Field(default=None, description="Explicit search API key")
    timeout: float = Field(default=10.0, gt=0, description="Request timeout in seconds")
    max_retries: int = Field(default=2, ge=0, description="Connection retries per request")
    poll_interval: float = Field(default=0.05, gt=0, description="Initial task polling interval in seconds")


class EngineClients:
    """The admin/search client pair produced by ``CredentialResolver``.

    Either client may be ``None`` (degraded mode) but never both.
    """

    def __init__(
        self,
        admin_client: MeilisearchClient | None,
        search_client: MeilisearchClient | None,
    ) -> None:
        self.admin_client = admin_client
        self.search_client = search_client

    @property
    def enabled(self) -> bool:
        return self.admin_client is not None or self.search_client is not None

    async def close(self) -> None:
        """Close both clients."""
        for client in (self.admin_client, self.search_client):
            if client is not None:
                await client.close()

    async def __aenter__(self) -> EngineClients:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()


class CredentialResolver:
    """Builds scoped engine clients from a ``CredentialSet``.

    Args:
        credentials: URL and keys to resolve.
        client_factory: Callable building a ``MeilisearchClient`` from
            ``(url, api_key, timeout=..., max_retries=..., poll_interval=...)``.

    Example:
        >>> resolver = CredentialResolver(CredentialSet(url="http://localhost:7700", master_key="mk"))
        >>> clients = await resolver.resolve()
    """

    def __init__(
        self,
        credentials: CredentialSet,
        client_factory: ClientFactory = MeilisearchClient,
    ) -> None:
        self.credentials = credentials
        self._client_factory = client_factory

    def _build(self, api_key: str) -> MeilisearchClient:
        creds = self.credentials
        return self._client_factory(
            creds.url,
            api_key,
            timeout=creds.timeout,
            max_retries=creds.max_retries,
            poll_interval=creds.poll_interval,
        )

    async def fetch_default_keys(self) -> dict[str, str | None]:
        """List keys with the master key and pick out the default search/admin keys.

        Returns:
            ``{"search": key | None, "admin": key | None}``

        Raises:
            ConfigurationError: If no URL or master key is configured.
        """
        creds = self.credentials
        if not creds.url or not creds.master_key:
            raise ConfigurationError("A Meilisearch URL and master key are required to derive API keys.")

        master_client = self._build(creds.master_key)
        try:
            response = await master_client.list_keys()
        finally:
            await master_client.close()

        by_name: dict[str, Any] = {entry.get("name"): entry.get("key") for entry in response.get("results", [])}
        return {
            "search": by_name.get(DEFAULT_SEARCH_KEY_NAME),
            "admin": by_name.get(DEFAULT_ADMIN_KEY_NAME),
        }

    async def resolve(self) -> EngineClients:
        """Construct the admin and search clients.

        Returns:
            The resolved client pair.

        Raises:
            ConfigurationError: If neither client can be constructed.
            EngineAPIError: If listing keys with the master key fails.
        """
        creds = self.credentials
        if not creds.url:
            raise ConfigurationError("No Meilisearch URL configured. Check MEILIBRIDGE_SEARCH__URL.")

        search_key = creds.search_key
        admin_key = creds.admin_key

        if (not search_key or not admin_key) and creds.master_key:
            logger.info("Deriving missing API keys from master key at %s", creds.url)
            defaults = await self.fetch_default_keys()
            search_key = search_key or defaults["search"]
            admin_key = admin_key or defaults["admin"]

        admin_client = self._build(admin_key) if admin_key else None
        search_client = self._build(search_key) if search_key else None

        if admin_client is None and search_client is None:
            raise ConfigurationError(
                "Unable to configure search: no admin or search API key could be resolved. "
                "Check MEILIBRIDGE_SEARCH__ADMIN_KEY, MEILIBRIDGE_SEARCH__SEARCH_KEY, "
                "or MEILIBRIDGE_SEARCH__MASTER_KEY."
            )
        if admin_client is None:
            logger.warning("No admin API key resolved; indexing is unavailable")
        if search_client is None:
            logger.warning("No search API key resolved; searching is unavailable")

        return EngineClients(admin_client=admin_client, search_client=search_client)

    async def validate_default_keys(self) -> dict[str, dict[str, Any]]:
        """Compare configured keys against the engine's default keys.

        Diagnostic only; not used when resolving clients.

        Returns:
            ``{"search": {"status": "missing"|"provided", "matches": bool},
            "admin": {...}}``
        """
        defaults = await self.fetch_default_keys()
        configured = {"search": self.credentials.search_key, "admin": self.credentials.admin_key}

        report: dict[str, dict[str, Any]] = {}
        for kind, key in configured.items():
            report[kind] = {
                "status": "provided" if key else "missing",
                "matches": bool(key) and key == defaults[kind],
            }
        return report
