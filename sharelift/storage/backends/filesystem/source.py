# ============================================
# FILE: sharelift/storage/backends/filesystem/source.py
# ============================================

"""
Filesystem Source Store

Reads artifacts from a hierarchical file share mounted into the local
filesystem (SMB/NFS mount, or a plain directory in development).

Concurrent-writer detection:
- At open, the file's ``(size, mtime_ns)`` signature is taken before and
  after the open; a difference, or an OS-level permission/lock refusal,
  yields a CONFLICT result.
- The returned stream re-checks the signature after every read and raises
  ``SourceModifiedError`` as soon as the file changes underneath it.

Example:
    >>> store = FilesystemSourceStore("/mnt/livestream-recorder")
    >>> async with store:
    ...     result = await store.open_read("abc123.mp4", CancellationScope())
"""

import os
from pathlib import Path

import aiofiles
import aiofiles.os

from sharelift.core.cancellation import CancellationScope
from sharelift.core.exceptions import ConfigurationError
from sharelift.storage.core import SourceModifiedError, StorageError
from sharelift.storage.interfaces.source import OpenResult, SourceStore


def _signature(stat_result: os.stat_result) -> tuple[int, int]:
    return (stat_result.st_size, stat_result.st_mtime_ns)


class FilesystemSourceStream:
    """Async stream over an open file that detects concurrent modification"""

    def __init__(self, handle, path: Path, signature: tuple[int, int]):
        self._handle = handle
        self._path = path
        self._signature = signature
        self.size = signature[0]

    async def read(self, size: int = -1) -> bytes:
        data = await self._handle.read(size)
        await self._verify_unchanged()
        return data

    async def _verify_unchanged(self) -> None:
        try:
            current = _signature(await aiofiles.os.stat(self._path))
        except FileNotFoundError:
            current = None
        if current != self._signature:
            raise SourceModifiedError(str(self._path), expected=self._signature, actual=current)

    async def seek(self, offset: int, whence: int = 0) -> int:
        return await self._handle.seek(offset, whence)

    async def tell(self) -> int:
        return await self._handle.tell()

    async def close(self) -> None:
        await self._handle.close()


class FilesystemSourceStore(SourceStore):
    """
    Filesystem-based source store.

    Paths are interpreted relative to ``root`` and may not escape it.
    """

    name = "filesystem"

    def __init__(self, root: str | Path):
        """
        Initialize filesystem source store.

        Args:
            root: Directory the file share is mounted at
        """
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        """Absolute path for a share-relative path"""
        root = self.root.resolve()
        target = (root / path.lstrip("/\\")).resolve()
        if target != root and root not in target.parents:
            msg = f"Path escapes the source root: {path}"
            raise StorageError(msg, details={"root": str(root)})
        return target

    async def check_available(self) -> None:
        if not await aiofiles.os.path.isdir(self.root):
            msg = f"Source share does not exist: {self.root}"
            raise ConfigurationError(msg)

    async def exists(self, path: str) -> bool:
        return await aiofiles.os.path.isfile(self._resolve(path))

    async def open_read(self, path: str, cancel: CancellationScope) -> OpenResult:
        target = self._resolve(path)

        try:
            before = _signature(await aiofiles.os.stat(target))
            handle = await aiofiles.open(target, "rb")
        except FileNotFoundError:
            return OpenResult.not_found(path)
        except (PermissionError, BlockingIOError) as e:
            cancel.cancel("source locked during open")
            return OpenResult.conflict(path, f"{type(e).__name__}: {e}")

        try:
            after = _signature(await aiofiles.os.stat(target))
        except FileNotFoundError:
            await handle.close()
            return OpenResult.not_found(path)

        if after != before:
            await handle.close()
            cancel.cancel("source modified during open")
            return OpenResult.conflict(path, f"signature changed from {before} to {after}")

        stream = FilesystemSourceStream(handle, target, after)
        return OpenResult.opened(path, stream, stream.size)

    async def delete_if_exists(self, path: str) -> bool:
        try:
            await aiofiles.os.remove(self._resolve(path))
        except FileNotFoundError:
            return False
        return True
