"""Search engine and reconciliation exceptions."""

from __future__ import annotations


class MeiliBridgeError(Exception):
    """Base exception for meilibridge errors."""


class ConfigurationError(MeiliBridgeError):
    """Raised when no usable engine URL or credentials are configured."""


class EngineAPIError(MeiliBridgeError):
    """Raised when a Meilisearch call fails (network, auth, or validation).

    Attributes:
        status_code: HTTP status returned by the engine, ``None`` for transport failures.
        code: Meilisearch error code (e.g. ``"index_not_found"``), if any.
    """

    def __init__(self, message: str, *, status_code: int | None = None, code: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class IndexNotFoundError(EngineAPIError):
    """Raised when the engine reports that an index does not exist."""


class TaskFailedError(MeiliBridgeError):
    """Raised when an engine task finishes as ``failed`` or ``canceled``."""

    def __init__(self, task: dict) -> None:
        error = task.get("error") or {}
        super().__init__(
            f"Task {task.get('taskUid', task.get('uid'))} {task.get('status')}: {error.get('message', 'no details')}"
        )
        self.task = task


class TaskTimeoutError(MeiliBridgeError):
    """Raised when a task does not finish within the polling budget."""


class MalformedDocumentError(MeiliBridgeError):
    """Raised when a document submitted for indexing lacks ``object_class``."""


class TypeNotRegisteredError(MeiliBridgeError):
    """Raised when a type is not registered with the type registry."""


class UnresolvableTypeError(MeiliBridgeError):
    """Raised when a hit references an owning type that cannot be resolved."""
