"""
Storage interfaces for the migration pipeline.
"""

from .destination import DestinationStore
from .source import OpenResult, OpenStatus, SourceStore, SourceStream

__all__ = [
    "DestinationStore",
    "OpenResult",
    "OpenStatus",
    "SourceStore",
    "SourceStream",
]
