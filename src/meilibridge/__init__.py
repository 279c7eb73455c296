"""meilibridge — Reconcile Meilisearch results with a primary record store."""

__version__ = "0.1.0"
