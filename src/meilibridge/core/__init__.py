"""Core reconciliation pipeline."""

from meilibridge.core.service import SearchService, build_clients

__all__ = ["SearchService", "build_clients"]
