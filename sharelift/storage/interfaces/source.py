# ============================================
# FILE: sharelift/storage/interfaces/source.py
# ============================================

"""
Source Store Interface

Defines the contract for the hierarchical, path-addressed file store that
holds artifacts before migration.

Stores are stateless with respect to individual transfers and are shared by
every concurrent transfer task of a run.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

from sharelift.core.cancellation import CancellationScope


@runtime_checkable
class SourceStream(Protocol):
    """Async, seekable byte stream over one source file."""

    size: int

    async def read(self, size: int = -1) -> bytes: ...

    async def seek(self, offset: int, whence: int = 0) -> int: ...

    async def tell(self) -> int: ...

    async def close(self) -> None: ...


class OpenStatus(Enum):
    """Result of opening a source file for reading"""

    OPENED = "opened"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"  # Being modified or locked by another writer


@dataclass(frozen=True)
class OpenResult:
    """
    Explicit outcome of ``SourceStore.open_read``.

    Only ``OPENED`` results carry a stream; ``size`` is the byte length
    observed at open time.
    """

    status: OpenStatus
    path: str
    stream: SourceStream | None = None
    size: int = 0
    detail: str | None = None

    @classmethod
    def opened(cls, path: str, stream: SourceStream, size: int) -> OpenResult:
        return cls(OpenStatus.OPENED, path, stream, size)

    @classmethod
    def not_found(cls, path: str) -> OpenResult:
        return cls(OpenStatus.NOT_FOUND, path)

    @classmethod
    def conflict(cls, path: str, detail: str | None = None) -> OpenResult:
        return cls(OpenStatus.CONFLICT, path, detail=detail)

    @property
    def ok(self) -> bool:
        return self.status is OpenStatus.OPENED


class SourceStore(ABC):
    """Abstract interface for the source file store"""

    name: str = "source"

    @abstractmethod
    async def check_available(self) -> None:
        """
        Verify the store is reachable and its root exists.

        Raises:
            ConfigurationError: If the store cannot be used at all
        """

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """
        Check whether a file exists at ``path``.

        Args:
            path: Path relative to the store root

        Returns:
            True if a regular file exists there
        """

    @abstractmethod
    async def open_read(self, path: str, cancel: CancellationScope) -> OpenResult:
        """
        Open a file for streaming.

        A file detected as concurrently modified (or locked) while opening
        yields ``CONFLICT`` *and* raises ``cancel`` so the caller's later
        stages do not run.

        Args:
            path: Path relative to the store root
            cancel: Cancellation scope of the calling transfer task

        Returns:
            OpenResult describing the outcome
        """

    @abstractmethod
    async def delete_if_exists(self, path: str) -> bool:
        """
        Delete a file if present. Idempotent.

        Returns:
            True if a file was actually deleted
        """

    async def close(self) -> None:  # noqa: B027
        """Release client resources (no-op by default)"""

    async def __aenter__(self):
        await self.check_available()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
