"""
In-memory source store

Provides a simple in-memory file store for development and testing.
Not suitable for production use as files are lost on process restart.

Writers can be simulated with ``lock`` (the next open reports CONFLICT) and
``put`` on a path that is already open (the open stream raises
SourceModifiedError on its next read).
"""

import asyncio
import io
from dataclasses import dataclass

from sharelift.core.cancellation import CancellationScope
from sharelift.storage.core import SourceModifiedError
from sharelift.storage.interfaces.source import OpenResult, SourceStore


@dataclass
class _MemoryFile:
    data: bytes
    version: int


def _normalize(path: str) -> str:
    return path.lstrip("/")


class InMemorySourceStream:
    """Seekable async stream over a snapshot of one in-memory file"""

    def __init__(self, store: "InMemorySourceStore", path: str, snapshot: _MemoryFile):
        self._store = store
        self._path = path
        self._version = snapshot.version
        self._buffer = io.BytesIO(snapshot.data)
        self.size = len(snapshot.data)
        self.closed = False

    async def read(self, size: int = -1) -> bytes:
        current = self._store._files.get(self._path)
        if current is None or current.version != self._version:
            raise SourceModifiedError(
                self._path,
                expected=self._version,
                actual=current.version if current else None,
            )
        return self._buffer.read(size)

    async def seek(self, offset: int, whence: int = 0) -> int:
        return self._buffer.seek(offset, whence)

    async def tell(self) -> int:
        return self._buffer.tell()

    async def close(self) -> None:
        self.closed = True
        self._buffer.close()


class InMemorySourceStore(SourceStore):
    """
    In-memory implementation of the source store

    Example:
        >>> store = InMemorySourceStore({"abc123.mp4": b"..."})
        >>> await store.exists("abc123.mp4")
        True
    """

    name = "memory"

    def __init__(self, files: dict[str, bytes] | None = None):
        self._files: dict[str, _MemoryFile] = {}
        self._locked: set[str] = set()
        self._versions = 0
        self._lock = asyncio.Lock()
        self.deleted: list[str] = []
        self.opened: list[str] = []

        for path, data in (files or {}).items():
            self.put(path, data)

    def put(self, path: str, data: bytes) -> None:
        """Create or overwrite a file (bumps its version)."""
        self._versions += 1
        self._files[_normalize(path)] = _MemoryFile(data=bytes(data), version=self._versions)

    def get(self, path: str) -> bytes | None:
        stored = self._files.get(_normalize(path))
        return stored.data if stored else None

    def lock(self, path: str) -> None:
        """Simulate another writer holding the file open."""
        self._locked.add(_normalize(path))

    def unlock(self, path: str) -> None:
        self._locked.discard(_normalize(path))

    @property
    def paths(self) -> list[str]:
        return sorted(self._files)

    async def check_available(self) -> None:
        return None

    async def exists(self, path: str) -> bool:
        return _normalize(path) in self._files

    async def open_read(self, path: str, cancel: CancellationScope) -> OpenResult:
        path = _normalize(path)
        async with self._lock:
            snapshot = self._files.get(path)
            if snapshot is None:
                return OpenResult.not_found(path)

            if path in self._locked:
                cancel.cancel("source modified during open")
                return OpenResult.conflict(path, "file is locked by another writer")

            self.opened.append(path)
            stream = InMemorySourceStream(self, path, snapshot)
            return OpenResult.opened(path, stream, stream.size)

    async def delete_if_exists(self, path: str) -> bool:
        path = _normalize(path)
        async with self._lock:
            if path in self._files:
                del self._files[path]
                self.deleted.append(path)
                return True
            return False
