"""
Storage backend implementations.

Source stores:
    - filesystem: Mounted file share (aiofiles)
    - memory: In-memory (development/testing)

Destination stores:
    - s3: S3-compatible object storage (aioboto3)
    - memory: In-memory (development/testing)
"""

from .filesystem import FilesystemSourceStore
from .memory import InMemoryDestinationStore, InMemorySourceStore

__all__ = [
    "FilesystemSourceStore",
    "InMemoryDestinationStore",
    "InMemorySourceStore",
]
