"""Logging setup."""

from meilibridge.observability.logging import search_context, setup_logging

__all__ = ["search_context", "setup_logging"]
