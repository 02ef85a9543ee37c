"""
In-memory storage backends.
"""

from .destination import InMemoryDestinationStore, StoredObject
from .source import InMemorySourceStore, InMemorySourceStream

__all__ = [
    "InMemoryDestinationStore",
    "InMemorySourceStore",
    "InMemorySourceStream",
    "StoredObject",
]
