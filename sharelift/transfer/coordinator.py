"""
Migration Coordinator

Expands an artifact id into its candidate filenames, runs one TransferTask
per filename concurrently and folds the outcomes into a MigrationResult.

Tasks are independent: a skip or failure on one file never cancels or blocks
another. All tasks reach a terminal state before ``migrate()`` returns, and a
run with failures is not rolled back. A failed run is retried wholesale by
the caller: sources that were already moved come back as SKIPPED_NOT_FOUND.

Two runs targeting the same artifact concurrently race on the destination
namespace under last-writer-wins; no locking is attempted.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from sharelift.core.config import MigrationConfig
from sharelift.core.exceptions import (
    InvalidArtifactIdError,
    MigrationFailedError,
    MigrationTimeoutError,
)
from sharelift.core.types import OutcomeKind
from sharelift.monitoring.logging import MigrationLogger
from sharelift.monitoring.prometheus import PrometheusMetrics
from sharelift.storage.factory import create_destination_store, create_source_store
from sharelift.storage.interfaces import DestinationStore, SourceStore
from sharelift.transfer.task import TransferOutcome, TransferSettings, TransferTask


@dataclass
class MigrationResult:
    """
    Aggregate result of one migration run.

    Attributes:
        artifact_id: Artifact that was migrated
        outcomes: One outcome per candidate filename, in candidate order
        duration_seconds: Wall time of the whole run
        error: First failure in candidate order (a TransferFailure), if any
    """

    artifact_id: str
    outcomes: list[TransferOutcome] = field(default_factory=list)
    duration_seconds: float = 0.0
    error: BaseException | None = None

    @property
    def success(self) -> bool:
        """True unless a task failed; all-skipped runs are successful."""
        return self.error is None

    @property
    def cause(self) -> BaseException | None:
        """Underlying error of the first failure"""
        if self.error is None:
            return None
        return self.error.__cause__ or self.error

    @property
    def failures(self) -> list[TransferOutcome]:
        return [o for o in self.outcomes if o.failed]

    def outcome_for(self, filename: str) -> TransferOutcome | None:
        for outcome in self.outcomes:
            if outcome.filename == filename:
                return outcome
        return None

    def counts(self) -> dict[str, int]:
        """Number of outcomes per kind (every kind present, in declaration order)"""
        counts = {kind.value: 0 for kind in OutcomeKind}
        for outcome in self.outcomes:
            counts[outcome.kind.value] += 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {
            "artifact_id": self.artifact_id,
            "success": self.success,
            "error": str(self.cause) if self.cause is not None else None,
            "duration_seconds": round(self.duration_seconds, 3),
            "counts": self.counts(),
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


class MigrationCoordinator:
    """
    Runs the migration of one artifact at a time across its file set.

    The source and destination stores are shared by every task; the
    coordinator owns them and closes them when used as an async context
    manager (entering it verifies both stores are reachable).

    Example:
        >>> async with create_coordinator(MigrationConfig.from_env()) as coordinator:
        ...     result = await coordinator.migrate("abc123")
        ...     print(result.counts())
    """

    def __init__(
        self,
        source: SourceStore,
        destination: DestinationStore,
        config: MigrationConfig,
        logger: MigrationLogger | None = None,
        metrics: PrometheusMetrics | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.source = source
        self.destination = destination
        self.config = config
        self.logger = logger or MigrationLogger()
        self.metrics = metrics
        self.settings = TransferSettings.from_config(config)
        self._clock = clock

    def candidate_filenames(self, artifact_id: str) -> list[str]:
        """
        Filenames an artifact may consist of, in configured extension order.

        Raises:
            InvalidArtifactIdError: If the id is empty or path-like
        """
        if not artifact_id or not artifact_id.strip():
            msg = "Artifact id must not be empty"
            raise InvalidArtifactIdError(msg)
        if "/" in artifact_id or "\\" in artifact_id or ".." in artifact_id:
            msg = f"Artifact id must not contain path components: {artifact_id!r}"
            raise InvalidArtifactIdError(msg)
        return [f"{artifact_id}{ext}" for ext in self.config.extensions]

    def create_task(self, artifact_id: str, filename: str) -> TransferTask:
        """New task with its own cancellation scope"""
        return TransferTask(
            artifact_id,
            filename,
            self.source,
            self.destination,
            settings=self.settings,
            logger=self.logger,
            metrics=self.metrics,
            clock=self._clock,
        )

    async def migrate(self, artifact_id: str, raise_on_failure: bool = True) -> MigrationResult:
        """
        Migrate every present file of an artifact.

        Args:
            artifact_id: Logical id of the artifact
            raise_on_failure: Raise MigrationFailedError instead of returning
                a failed result

        Returns:
            MigrationResult with one outcome per candidate filename

        Raises:
            InvalidArtifactIdError: If the id is unusable (before any I/O)
            MigrationFailedError: If a task failed and raise_on_failure is set
            MigrationTimeoutError: If the configured deadline expired
        """
        filenames = self.candidate_filenames(artifact_id)

        token = self.logger.set_context(artifact_id=artifact_id)
        try:
            self.logger.migration_started(artifact_id, filenames)
            started = self._clock()
            tasks = [self.create_task(artifact_id, filename) for filename in filenames]

            try:
                results = await self._run_all(tasks)
            except TimeoutError:
                self.logger.error(
                    f"Migration timed out: {artifact_id} after {self.config.timeout_seconds}s",
                    outcome="timeout",
                )
                if self.metrics is not None:
                    self.metrics.migration_finished(False)
                raise MigrationTimeoutError(artifact_id, self.config.timeout_seconds) from None

            result = self._process_results(artifact_id, tasks, results)
            result.duration_seconds = self._clock() - started

            self.logger.migration_finished(result)
            if self.metrics is not None:
                self.metrics.migration_finished(result.success)
        finally:
            self.logger.reset_context(token)

        if not result.success and raise_on_failure:
            msg = f"Migration failed for artifact {artifact_id}: {result.cause}"
            raise MigrationFailedError(artifact_id, result, msg) from result.error
        return result

    async def _run_all(self, tasks: list[TransferTask]) -> list[Any]:
        """Run every task to completion; a deadline cancels all of them."""
        runs = [
            asyncio.create_task(task.execute(), name=f"transfer:{task.filename}")
            for task in tasks
        ]
        gathered = asyncio.gather(*runs, return_exceptions=True)

        if self.config.timeout_seconds is None:
            return await gathered
        return await asyncio.wait_for(gathered, timeout=self.config.timeout_seconds)

    def _process_results(
        self, artifact_id: str, tasks: list[TransferTask], results: list[Any]
    ) -> MigrationResult:
        """Collect outcomes in candidate order; the first failure wins."""
        result = MigrationResult(artifact_id=artifact_id)

        for task, value in zip(tasks, results, strict=True):
            if isinstance(value, BaseException):
                if result.error is None:
                    result.error = value
                outcome = task.outcome or TransferOutcome(
                    filename=task.filename, kind=OutcomeKind.FAILED, key=task.key, error=value
                )
            else:
                outcome = value
            result.outcomes.append(outcome)

        return result

    async def start(self) -> None:
        """
        Verify both stores before any work is attempted.

        Raises:
            ConfigurationError: If either store is unavailable
        """
        await self.source.check_available()
        await self.destination.check_available()

    async def close(self) -> None:
        """Close both stores"""
        try:
            await self.source.close()
        finally:
            await self.destination.close()

    async def __aenter__(self) -> MigrationCoordinator:
        try:
            await self.start()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def create_coordinator(
    config: MigrationConfig,
    logger: MigrationLogger | None = None,
    metrics: PrometheusMetrics | None = None,
) -> MigrationCoordinator:
    """
    Build a coordinator and its stores from configuration.

    Use the returned coordinator as an async context manager: entering it
    checks both stores (fatal ConfigurationError before any work) and
    exiting closes them.

    Raises:
        UnsupportedBackendError: If a store URL has an unknown scheme
        ConfigurationError: If a store URL is incomplete (e.g. no bucket)
        MissingDependencyError: If a backend's packages aren't installed
    """
    source = create_source_store(config.source_url)
    destination = create_destination_store(
        config.destination_url,
        key_prefix=config.key_prefix,
        region_name=config.s3_region,
        endpoint_url=config.s3_endpoint_url,
    )
    return MigrationCoordinator(source, destination, config, logger=logger, metrics=metrics)
