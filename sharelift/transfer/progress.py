"""
Progress Meter - throttled, human-readable upload progress.

Upload clients report raw byte counts, often once per part or chunk. The
meter turns those into ``ProgressEvent`` values, emitting one only when the
floored percentage increases, so a transfer produces at most 101 events and
a zero-byte transfer produces none.

Usage:
    >>> meter = ProgressMeter("abc123.mp4", total_size=1_000_000)
    >>> meter.start()
    >>> event = meter.advance(250_000)
    >>> event.percentage
    25

Emission is observability only: a failing sink is logged and ignored.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sharelift.monitoring.logging import MigrationLogger

logger = logging.getLogger(__name__)


def compute_percentage(bytes_transferred: int, total_size: int) -> int | None:
    """
    Floored completion percentage in [0, 100].

    Returns None when ``total_size`` is zero (nothing meaningful to report).
    """
    if total_size <= 0:
        return None
    clamped = min(max(bytes_transferred, 0), total_size)
    return clamped * 100 // total_size


def compute_rate(bytes_transferred: int, elapsed_seconds: float) -> float | None:
    """Bytes per second, or None while no measurable time has elapsed."""
    if elapsed_seconds <= 0:
        return None
    return bytes_transferred / elapsed_seconds


def format_bytes(bytes_size: float) -> str:
    """Format bytes in human readable format"""
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if abs(bytes_size) < 1024.0:
            return f"{bytes_size:.1f}{unit}"
        bytes_size /= 1024.0
    return f"{bytes_size:.1f}PB"


def format_rate(bytes_per_second: float | None) -> str:
    if bytes_per_second is None:
        return "n/a"
    return f"{format_bytes(bytes_per_second)}/s"


@dataclass(frozen=True)
class ProgressEvent:
    """
    One emitted progress sample.

    Attributes:
        filename: File being transferred
        bytes_transferred: Bytes confirmed by the upload client so far
        total_size: Expected size of the file
        percentage: Floored completion percentage
        elapsed_seconds: Time since the meter was started
        bytes_per_second: Average throughput, None when elapsed is zero
    """

    filename: str
    bytes_transferred: int
    total_size: int
    percentage: int
    elapsed_seconds: float
    bytes_per_second: float | None

    @property
    def rate_display(self) -> str:
        return format_rate(self.bytes_per_second)

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "bytes_transferred": self.bytes_transferred,
            "total_size": self.total_size,
            "percentage": self.percentage,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "bytes_per_second": (
                round(self.bytes_per_second, 2) if self.bytes_per_second is not None else None
            ),
        }


class ProgressMeter:
    """
    Stateful progress tracker for a single transfer.

    The meter owns its last emitted percentage and its start time; nothing
    else mutates them. Each call returns the event it emitted (or None), so
    callers never need to share state with the upload callback.

    Example:
        >>> meter = ProgressMeter("clip.mp4", 200)
        >>> meter.start()
        >>> meter.update(100).percentage
        50
        >>> meter.update(101) is None  # still 50%
        True
    """

    def __init__(
        self,
        filename: str,
        total_size: int,
        logger: MigrationLogger | None = None,
        sink: Callable[[ProgressEvent], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the meter.

        Args:
            filename: File being transferred (carried on every event)
            total_size: Expected size in bytes
            logger: Migration logger receiving upload progress events
            sink: Extra callback receiving every emitted event
            clock: Monotonic clock in seconds (injectable for tests)
        """
        self.filename = filename
        self.total_size = total_size
        self._logger = logger
        self._sink = sink
        self._clock = clock
        self._started_at: float | None = None
        self._bytes_transferred = 0
        self._last_percentage: int | None = None

    @property
    def bytes_transferred(self) -> int:
        return self._bytes_transferred

    @property
    def last_percentage(self) -> int | None:
        return self._last_percentage

    @property
    def elapsed_seconds(self) -> float:
        if self._started_at is None:
            return 0.0
        return self._clock() - self._started_at

    def start(self) -> None:
        """Start (or restart) timing. Called right before the write begins."""
        self._started_at = self._clock()
        self._bytes_transferred = 0
        self._last_percentage = None

    def advance(self, nbytes: int) -> ProgressEvent | None:
        """Record ``nbytes`` more bytes (incremental callbacks)."""
        return self.update(self._bytes_transferred + nbytes)

    def update(self, bytes_transferred: int) -> ProgressEvent | None:
        """
        Record the cumulative byte count.

        Returns:
            The emitted event, or None if the floored percentage did not
            increase (or the file is empty)
        """
        if self._started_at is None:
            self.start()

        self._bytes_transferred = max(self._bytes_transferred, bytes_transferred)

        percentage = compute_percentage(self._bytes_transferred, self.total_size)
        if percentage is None:
            return None
        if self._last_percentage is not None and percentage <= self._last_percentage:
            return None

        elapsed = self.elapsed_seconds
        event = ProgressEvent(
            filename=self.filename,
            bytes_transferred=self._bytes_transferred,
            total_size=self.total_size,
            percentage=percentage,
            elapsed_seconds=elapsed,
            bytes_per_second=compute_rate(self._bytes_transferred, elapsed),
        )
        self._last_percentage = percentage
        self._emit(event)
        return event

    def average_rate(self) -> float | None:
        """Average throughput over the whole transfer so far."""
        return compute_rate(self._bytes_transferred, self.elapsed_seconds)

    def _emit(self, event: ProgressEvent) -> None:
        try:
            if self._logger is not None:
                self._logger.upload_progress(event)
            if self._sink is not None:
                self._sink(event)
        except Exception as e:
            logger.warning(f"Progress sink failed for {self.filename}: {e}")
