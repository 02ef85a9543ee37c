# ============================================
# FILE: sharelift/storage/interfaces/destination.py
# ============================================

"""
Destination Store Interface

Defines the contract for the flat-namespace object store that holds
artifacts after migration, with tiering and tag/metadata support.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from sharelift.core.cancellation import CancellationScope
from sharelift.core.types import StorageTier

if TYPE_CHECKING:
    from sharelift.storage.interfaces.source import SourceStream
    from sharelift.transfer.progress import ProgressMeter


class DestinationStore(ABC):
    """Abstract interface for the destination object store"""

    name: str = "destination"

    def __init__(self, key_prefix: str = ""):
        self.key_prefix = key_prefix

    def object_key(self, filename: str) -> str:
        """Key an uploaded file is stored under (deterministic in the filename)."""
        return f"{self.key_prefix}{filename}"

    @abstractmethod
    async def check_available(self) -> None:
        """
        Verify the store is reachable.

        Raises:
            ConfigurationError: If the store cannot be used at all
        """

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check whether an object is stored under ``key``."""

    @abstractmethod
    async def write_stream(
        self,
        key: str,
        stream: SourceStream,
        total_size: int,
        content_type: str,
        storage_tier: StorageTier,
        metadata: dict[str, str],
        progress: ProgressMeter | None,
        cancel: CancellationScope,
    ) -> None:
        """
        Stream ``stream`` into ``key`` and commit it.

        The stream is read from its current position; callers rewind it to
        zero first. Nothing is written when ``cancel`` is already raised.

        Args:
            key: Destination object key
            stream: Source byte stream
            total_size: Expected byte length
            content_type: Content type stored with the object
            storage_tier: Tier the object is written to
            metadata: Metadata stored with the object
            progress: Meter fed with transferred byte counts
            cancel: Cancellation scope of the calling transfer task

        Raises:
            StorageError: (or backend errors) if the write cannot be committed
        """

    @abstractmethod
    async def set_tags(self, key: str, tags: dict[str, str]) -> None:
        """
        Attach queryable tags to a committed object.

        Raises:
            NotFoundError: If no object exists under ``key``
        """

    async def close(self) -> None:  # noqa: B027
        """Release client resources (no-op by default)"""

    async def __aenter__(self):
        await self.check_available()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
