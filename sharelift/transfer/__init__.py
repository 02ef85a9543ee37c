"""
The migration pipeline: progress metering, per-file transfer tasks and the
coordinator that runs them concurrently.
"""

from .coordinator import MigrationCoordinator, MigrationResult, create_coordinator
from .progress import (
    ProgressEvent,
    ProgressMeter,
    compute_percentage,
    compute_rate,
    format_bytes,
    format_rate,
)
from .task import TransferOutcome, TransferSettings, TransferTask

__all__ = [
    "MigrationCoordinator",
    "MigrationResult",
    "ProgressEvent",
    "ProgressMeter",
    "TransferOutcome",
    "TransferSettings",
    "TransferTask",
    "compute_percentage",
    "compute_rate",
    "create_coordinator",
    "format_bytes",
    "format_rate",
]
