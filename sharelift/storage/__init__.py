"""
Source and destination store abstractions and implementations

Quick Start:
    >>> from sharelift.storage import create_destination_store, create_source_store

    >>> source = create_source_store("file:///mnt/livestream-recorder")
    >>> destination = create_destination_store("s3://livestream-recorder")
"""

from .backends import FilesystemSourceStore, InMemoryDestinationStore, InMemorySourceStore
from .core import (
    ConcurrencyError,
    ConnectionError,
    NotFoundError,
    SourceModifiedError,
    StorageError,
    UnsupportedBackendError,
)
from .factory import create_destination_store, create_source_store, get_available_backends
from .interfaces import DestinationStore, OpenResult, OpenStatus, SourceStore, SourceStream

__all__ = [
    # Factory functions
    "create_destination_store",
    "create_source_store",
    "get_available_backends",

    # Interfaces
    "DestinationStore",
    "OpenResult",
    "OpenStatus",
    "SourceStore",
    "SourceStream",

    # Errors
    "ConcurrencyError",
    "ConnectionError",
    "NotFoundError",
    "SourceModifiedError",
    "StorageError",
    "UnsupportedBackendError",

    # Implementations
    "FilesystemSourceStore",
    "InMemoryDestinationStore",
    "InMemorySourceStore",
]
