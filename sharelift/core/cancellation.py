"""
Per-file cancellation scope.

A scope is owned by exactly one transfer task. Raising it means "nothing more
to do for this file": stages that have not started yet are skipped. It never
interrupts an operation already in flight and has no effect on sibling tasks.
Whole-run cancellation is plain asyncio task cancellation and is handled by
the coordinator, not through scopes.
"""

import asyncio


class CancellationScope:
    """
    Write-once "do nothing more" flag for a single file.

    Example:
        >>> scope = CancellationScope("abc123.mp4")
        >>> scope.cancel("not found")
        >>> scope.cancelled
        True
    """

    __slots__ = ("_event", "_reason", "name")

    def __init__(self, name: str = ""):
        self.name = name
        self._event = asyncio.Event()
        self._reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> bool:
        """
        Raise the scope.

        Returns:
            True if this call raised it, False if it was already raised
            (the first reason is kept).
        """
        if self._event.is_set():
            return False
        self._reason = reason
        self._event.set()
        return True

    async def wait(self) -> None:
        """Block until the scope is raised."""
        await self._event.wait()

    def __repr__(self) -> str:
        state = f"cancelled: {self._reason}" if self.cancelled else "active"
        return f"CancellationScope({self.name!r}, {state})"
