"""
Transfer Task - the single-file migration pipeline.

Stages run strictly in order:

    PENDING -> LOCATED -> STREAMING -> FINALIZING -> DELETING -> COMPLETED

with exits to SKIPPED_NOT_FOUND (source absent), SKIPPED_CONFLICT (source
being modified) and FAILED (any other error). The only externally visible
effects are one destination write, one tag-set call and one source delete;
each runs at most once per task.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sharelift.core.cancellation import CancellationScope
from sharelift.core.content_types import content_type_for
from sharelift.core.exceptions import DestinationExistsError, TransferFailure
from sharelift.core.types import OutcomeKind, OverwritePolicy, StorageTier, TransferState
from sharelift.monitoring.logging import MigrationLogger
from sharelift.storage.core import SourceModifiedError
from sharelift.storage.interfaces.source import OpenStatus
from sharelift.transfer.progress import ProgressMeter, format_rate

if TYPE_CHECKING:
    from sharelift.core.config import MigrationConfig
    from sharelift.monitoring.prometheus import PrometheusMetrics
    from sharelift.storage.interfaces import DestinationStore, SourceStore, SourceStream


@dataclass(frozen=True)
class TransferSettings:
    """Per-run settings shared by every transfer task"""

    storage_tier: StorageTier = StorageTier.COOL
    overwrite_policy: OverwritePolicy = OverwritePolicy.WARN

    @classmethod
    def from_config(cls, config: MigrationConfig) -> TransferSettings:
        return cls(storage_tier=config.storage_tier, overwrite_policy=config.overwrite_policy)


@dataclass(frozen=True)
class TransferOutcome:
    """
    Final, immutable result of one transfer task.

    Attributes:
        filename: Candidate filename the task handled
        kind: Terminal outcome
        key: Destination object key
        error: Underlying error for FAILED (or the conflict) outcomes
        bytes_transferred: Bytes written to the destination (0 unless COMPLETED)
        duration_seconds: Wall time spent in the task
    """

    filename: str
    kind: OutcomeKind
    key: str = ""
    error: BaseException | None = None
    bytes_transferred: int = 0
    duration_seconds: float = 0.0

    @property
    def failed(self) -> bool:
        return self.kind is OutcomeKind.FAILED

    def to_dict(self) -> dict:
        return {
            "filename": self.filename,
            "outcome": self.kind.value,
            "key": self.key,
            "error": str(self.error) if self.error is not None else None,
            "bytes_transferred": self.bytes_transferred,
            "duration_seconds": round(self.duration_seconds, 3),
        }


class TransferTask:
    """
    Moves one candidate file from the source store to the destination store.

    Each task owns exactly one ``CancellationScope``. Raising it means
    "nothing more to do for this file"; it is checked before streaming and
    again before finalizing/deleting, and never touches sibling tasks.

    The outcome is write-once. ``execute()`` returns it for skipped and
    completed files and raises ``TransferFailure`` (chained from the real
    error) for failed ones.

    Example:
        >>> task = TransferTask("abc123", "abc123.mp4", source, destination)
        >>> outcome = await task.execute()
        >>> outcome.kind
        <OutcomeKind.COMPLETED: 'completed'>
    """

    def __init__(
        self,
        artifact_id: str,
        filename: str,
        source: SourceStore,
        destination: DestinationStore,
        settings: TransferSettings | None = None,
        logger: MigrationLogger | None = None,
        metrics: PrometheusMetrics | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.artifact_id = artifact_id
        self.filename = filename
        self.source = source
        self.destination = destination
        self.settings = settings or TransferSettings()
        self.logger = logger or MigrationLogger()
        self.metrics = metrics
        self.key = destination.object_key(filename)
        self.cancel_scope = CancellationScope(filename)
        self.history: list[TransferState] = [TransferState.PENDING]

        self._clock = clock
        self._state = TransferState.PENDING
        self._outcome: TransferOutcome | None = None
        self._started_at: float | None = None

    @property
    def state(self) -> TransferState:
        return self._state

    @property
    def outcome(self) -> TransferOutcome | None:
        return self._outcome

    def _transition(self, state: TransferState) -> None:
        self._state = state
        self.history.append(state)
        self.logger.debug(f"{self.filename}: {state.value}")

    def _finish(
        self, kind: OutcomeKind, error: BaseException | None = None, bytes_transferred: int = 0
    ) -> TransferOutcome:
        """Set the outcome exactly once and enter the matching terminal state"""
        if self._outcome is not None:
            msg = f"Outcome for {self.filename} already set to {self._outcome.kind.value}"
            raise RuntimeError(msg)

        duration = self._clock() - self._started_at if self._started_at is not None else 0.0
        self._outcome = TransferOutcome(
            filename=self.filename,
            kind=kind,
            key=self.key,
            error=error,
            bytes_transferred=bytes_transferred,
            duration_seconds=duration,
        )
        self._transition(kind.state)

        if self.metrics is not None:
            self.metrics.transfer_finished(kind.value, duration, bytes_transferred)
        return self._outcome

    async def execute(self) -> TransferOutcome:
        """
        Run the pipeline to a terminal state.

        Returns:
            The task's outcome (COMPLETED or SKIPPED_*)

        Raises:
            TransferFailure: If the task ended FAILED
            RuntimeError: If the task was already executed
        """
        if self._started_at is not None:
            msg = f"Transfer task for {self.filename} already executed"
            raise RuntimeError(msg)

        self._started_at = self._clock()
        token = self.logger.set_context(artifact_id=self.artifact_id, file_name=self.filename)
        if self.metrics is not None:
            self.metrics.transfer_started()

        try:
            await self._run()
        except SourceModifiedError as e:
            self.cancel_scope.cancel("source modified during read")
            self.logger.file_conflict(self.filename, str(e))
            self._finish(OutcomeKind.SKIPPED_CONFLICT, error=e)
        except asyncio.CancelledError:
            # Whole-run cancellation (timeout); no outcome is recorded
            self.cancel_scope.cancel("migration cancelled")
            if self._outcome is None and self.metrics is not None:
                self.metrics.transfer_finished("cancelled", self._clock() - self._started_at, 0)
            raise
        except Exception as e:
            self.logger.transfer_failed(self.filename, e)
            # A skip may already be recorded when cleanup (stream close) fails
            if self._outcome is None:
                self._finish(OutcomeKind.FAILED, error=e)
            raise TransferFailure(self.filename, self.artifact_id, f"{self.filename}: {e}") from e
        finally:
            self.logger.reset_context(token)

        return self._outcome

    async def _run(self) -> None:
        # PENDING: locate
        if not await self.source.exists(self.filename):
            self.cancel_scope.cancel("source not found")
            self.logger.file_not_found(self.filename)
            self._finish(OutcomeKind.SKIPPED_NOT_FOUND)
            return
        self._transition(TransferState.LOCATED)

        # LOCATED: open
        opened = await self.source.open_read(self.filename, self.cancel_scope)
        if not opened.ok:
            if opened.status is OpenStatus.NOT_FOUND:
                self.cancel_scope.cancel("source vanished before open")
                self.logger.file_not_found(self.filename)
                self._finish(OutcomeKind.SKIPPED_NOT_FOUND)
            else:
                self.cancel_scope.cancel(opened.detail or "source conflict")
                self.logger.file_conflict(self.filename, opened.detail)
                self._finish(OutcomeKind.SKIPPED_CONFLICT)
            return

        self.logger.file_opened(self.filename, opened.size)
        try:
            written = await self._stream(opened.stream, opened.size)
        finally:
            await opened.stream.close()

        if not written or self._stopped_early():
            return

        # FINALIZING: tags only after a committed write
        self._transition(TransferState.FINALIZING)
        await self.destination.set_tags(self.key, self._tags(opened.size))
        if self._stopped_early():
            return

        # DELETING: source delete, already-gone is fine
        self._transition(TransferState.DELETING)
        deleted = await self.source.delete_if_exists(self.filename)
        self.logger.source_deleted(self.filename, deleted)

        self._finish(OutcomeKind.COMPLETED, bytes_transferred=opened.size)

    async def _stream(self, stream: SourceStream, size: int) -> bool:
        """STREAMING stage. Returns False when there was nothing to do."""
        if self._stopped_early():
            return False
        self._transition(TransferState.STREAMING)

        if await self.destination.exists(self.key):
            if self.settings.overwrite_policy is OverwritePolicy.REFUSE:
                raise DestinationExistsError(self.key)
            self.logger.destination_exists(self.key)

        # The existence check may have moved the cursor
        await stream.seek(0)

        tier = self.settings.storage_tier
        meter = ProgressMeter(self.filename, size, logger=self.logger, clock=self._clock)
        self.logger.upload_started(self.filename, self.key, size, tier.value)

        await self.destination.write_stream(
            self.key,
            stream,
            total_size=size,
            content_type=content_type_for(self.filename),
            storage_tier=tier,
            metadata=self._tags(size),
            progress=meter,
            cancel=self.cancel_scope,
        )

        self.logger.upload_finished(
            self.filename, size, format_rate(meter.average_rate()), meter.elapsed_seconds
        )
        return True

    def _stopped_early(self) -> bool:
        """Record a skip when the scope was raised by an earlier stage"""
        if not self.cancel_scope.cancelled:
            return False
        if self._outcome is None:
            self.logger.file_conflict(self.filename, self.cancel_scope.reason)
            self._finish(OutcomeKind.SKIPPED_CONFLICT)
        return True

    def _tags(self, size: int) -> dict[str, str]:
        return {"id": self.artifact_id, "fileSize": str(size)}

    def __repr__(self) -> str:
        return f"TransferTask({self.filename!r}, state={self._state.value})"
