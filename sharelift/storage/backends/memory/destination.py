"""
In-memory destination store

Provides a simple in-memory object store for development and testing.
Not suitable for production use as objects are lost on process restart.

Failures can be injected per key and per operation to exercise the
pipeline's partial-failure paths.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sharelift.core.cancellation import CancellationScope
from sharelift.core.types import StorageTier
from sharelift.storage.core import NotFoundError
from sharelift.storage.interfaces.destination import DestinationStore

if TYPE_CHECKING:
    from sharelift.storage.interfaces.source import SourceStream
    from sharelift.transfer.progress import ProgressMeter

DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass
class StoredObject:
    """One committed object"""

    key: str
    data: bytes
    content_type: str
    storage_tier: StorageTier
    metadata: dict[str, str]
    tags: dict[str, str] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def size(self) -> int:
        return len(self.data)


class InMemoryDestinationStore(DestinationStore):
    """
    In-memory implementation of the destination store

    Stores committed objects in a dictionary. Keeps per-key write and tag
    counters so tests can assert each side effect happened at most once.
    """

    name = "memory"

    def __init__(self, key_prefix: str = "", chunk_size: int = DEFAULT_CHUNK_SIZE):
        super().__init__(key_prefix)
        self.chunk_size = chunk_size
        self.objects: dict[str, StoredObject] = {}
        self.write_counts: dict[str, int] = {}
        self.tag_counts: dict[str, int] = {}
        self._failures: dict[tuple[str, str], BaseException] = {}
        self._lock = asyncio.Lock()

    def fail_on(self, key: str, error: BaseException, operation: str = "write") -> None:
        """Make the next ``operation`` ("write" or "tags") on ``key`` raise ``error``."""
        if operation not in ("write", "tags"):
            msg = f"Unknown operation: {operation}"
            raise ValueError(msg)
        self._failures[(key, operation)] = error

    def _raise_injected(self, key: str, operation: str) -> None:
        error = self._failures.pop((key, operation), None)
        if error is not None:
            raise error

    async def check_available(self) -> None:
        return None

    async def exists(self, key: str) -> bool:
        return key in self.objects

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
        """Read the stream in chunks, then commit atomically under ``key``."""
        if cancel.cancelled:
            return

        self.write_counts[key] = self.write_counts.get(key, 0) + 1
        if progress is not None:
            progress.start()

        chunks: list[bytes] = []
        while True:
            chunk = await stream.read(self.chunk_size)
            if not chunk:
                break
            chunks.append(chunk)
            if progress is not None:
                progress.advance(len(chunk))
            # Yield so concurrent transfers interleave like real network I/O.
            await asyncio.sleep(0)

        self._raise_injected(key, "write")

        async with self._lock:
            self.objects[key] = StoredObject(
                key=key,
                data=b"".join(chunks),
                content_type=content_type,
                storage_tier=storage_tier,
                metadata=dict(metadata),
            )

    async def set_tags(self, key: str, tags: dict[str, str]) -> None:
        self._raise_injected(key, "tags")
        async with self._lock:
            stored = self.objects.get(key)
            if stored is None:
                msg = f"Cannot tag missing object: {key}"
                raise NotFoundError(msg, item_type="object", item_id=key)
            stored.tags = dict(tags)
            self.tag_counts[key] = self.tag_counts.get(key, 0) + 1
