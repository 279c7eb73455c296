"""Meilisearch engine access — narrow client, credentials, and errors."""

from meilibridge.engine.client import IndexHandle, MeilisearchClient
from meilibridge.engine.credentials import CredentialResolver, CredentialSet, EngineClients

__all__ = ["CredentialResolver", "CredentialSet", "EngineClients", "IndexHandle", "MeilisearchClient"]
