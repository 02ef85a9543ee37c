"""
Unified error hierarchy for storage operations.

All storage-related exceptions inherit from StorageError,
providing consistent error handling across backends.

Expected outcomes (a missing source file, a file that is being written to)
are *not* exceptions at the store boundary: ``open_read`` returns an
``OpenResult`` for those. ``SourceModifiedError`` is only raised from inside
an already-open stream, where there is no result value to return.
"""

import re
from typing import Any


class StorageError(Exception):
    """
    Base exception for all storage operations.

    All storage backends raise subclasses of this exception,
    making it easy to catch storage-related errors.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


class ConnectionError(StorageError):
    """
    Failed to reach a storage backend.

    Raised when:
    - Client creation fails
    - Network timeout
    - Authentication failure
    """

    def __init__(
        self,
        message: str = "Failed to connect to storage backend",
        backend: str | None = None,
        url: str | None = None,
        **details,
    ):
        super().__init__(
            message,
            details={"backend": backend, "url": self._mask_url(url), **details},
        )
        self.backend = backend
        self.url = url

    @staticmethod
    def _mask_url(url: str | None) -> str | None:
        """Mask credentials embedded in a URL."""
        if not url:
            return None
        return re.sub(r"://([^:/]+):([^@]+)@", r"://\1:***@", url)


class NotFoundError(StorageError):
    """
    Requested object not found in storage.

    Raised when:
    - Tagging an object that was never written
    - Reading a key that does not exist
    """

    def __init__(
        self,
        message: str = "Item not found",
        item_type: str | None = None,
        item_id: str | None = None,
        **details,
    ):
        super().__init__(
            message,
            details={"item_type": item_type, "item_id": item_id, **details},
        )
        self.item_type = item_type
        self.item_id = item_id


class ConcurrencyError(StorageError):
    """
    Concurrent modification detected.

    Raised when:
    - An object changes while it is being read
    - A version/etag no longer matches
    """

    def __init__(
        self,
        message: str = "Concurrent modification detected",
        item_id: str | None = None,
        **details,
    ):
        super().__init__(message, details={"item_id": item_id, **details})
        self.item_id = item_id


class SourceModifiedError(ConcurrencyError):
    """A source file changed (size or modification time) while being streamed."""

    def __init__(self, path: str, expected: Any = None, actual: Any = None):
        super().__init__(
            f"Source file is currently being modified: {path}",
            item_id=path,
            expected=expected,
            actual=actual,
        )
        self.path = path


class UnsupportedBackendError(StorageError):
    """A store URL names a scheme no backend is registered for."""

    def __init__(self, url: str, available: list[str]):
        super().__init__(
            f"No storage backend for URL: {url!r}",
            details={"available": ", ".join(available)},
        )
        self.url = url
        self.available = available
