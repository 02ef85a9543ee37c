"""
Core storage infrastructure shared by every backend.
"""

from .errors import (
    ConcurrencyError,
    ConnectionError,
    NotFoundError,
    SourceModifiedError,
    StorageError,
    UnsupportedBackendError,
)

__all__ = [
    "ConcurrencyError",
    "ConnectionError",
    "NotFoundError",
    "SourceModifiedError",
    "StorageError",
    "UnsupportedBackendError",
]
