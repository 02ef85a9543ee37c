# ============================================
# FILE: sharelift/__init__.py
# ============================================

"""
sharelift - Move video artifacts from a file share into object storage

An artifact is a logical id (e.g. a video id) plus a configured, ordered set
of extensions; each resulting filename is moved independently:

- Located on the source share (absent files are skipped)
- Streamed to the destination with content type, storage tier and metadata
- Tagged with the artifact id and file size
- Deleted from the source share

Files being written by another process are detected and skipped. A failed
run is safe to retry: already-moved files come back as "not found".

Usage:
    >>> from sharelift import MigrationConfig, create_coordinator
    >>>
    >>> config = MigrationConfig(
    ...     source_url="file:///mnt/recordings",
    ...     destination_url="s3://recordings",
    ...     extensions=(".mp4", ".jpg", ".info.json"),
    ... )
    >>> async with create_coordinator(config) as coordinator:
    ...     result = await coordinator.migrate("abc123")
    >>> result.counts()
    {'completed': 2, 'skipped_not_found': 1, 'skipped_conflict': 0, 'failed': 0}
"""

__version__ = "0.3.0"

from sharelift.core import (
    CancellationScope,
    ConfigurationError,
    DestinationExistsError,
    InvalidArtifactIdError,
    MigrationConfig,
    MigrationFailedError,
    MigrationTimeoutError,
    MissingDependencyError,
    OutcomeKind,
    OverwritePolicy,
    ShareliftError,
    StorageTier,
    TransferFailure,
    TransferState,
)
from sharelift.monitoring import MigrationLogger, PrometheusMetrics, setup_migration_logging
from sharelift.storage import (
    DestinationStore,
    OpenResult,
    OpenStatus,
    SourceStore,
    create_destination_store,
    create_source_store,
)
from sharelift.transfer import (
    MigrationCoordinator,
    MigrationResult,
    ProgressEvent,
    ProgressMeter,
    TransferOutcome,
    TransferTask,
    create_coordinator,
)

__all__ = [
    "__version__",
    # Configuration and types
    "CancellationScope",
    "MigrationConfig",
    "OutcomeKind",
    "OverwritePolicy",
    "StorageTier",
    "TransferState",
    # Pipeline
    "MigrationCoordinator",
    "MigrationResult",
    "ProgressEvent",
    "ProgressMeter",
    "TransferOutcome",
    "TransferTask",
    "create_coordinator",
    # Storage
    "DestinationStore",
    "OpenResult",
    "OpenStatus",
    "SourceStore",
    "create_destination_store",
    "create_source_store",
    # Monitoring
    "MigrationLogger",
    "PrometheusMetrics",
    "setup_migration_logging",
    # Errors
    "ConfigurationError",
    "DestinationExistsError",
    "InvalidArtifactIdError",
    "MigrationFailedError",
    "MigrationTimeoutError",
    "MissingDependencyError",
    "ShareliftError",
    "TransferFailure",
]
