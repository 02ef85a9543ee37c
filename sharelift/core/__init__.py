# ============================================
# FILE: sharelift/core/__init__.py
# ============================================
"""
Core module for sharelift - configuration, shared types, errors and the
per-file cancellation scope.
"""

from sharelift.core.cancellation import CancellationScope
from sharelift.core.config import DEFAULT_EXTENSIONS, DEFAULT_KEY_PREFIX, MigrationConfig
from sharelift.core.content_types import DEFAULT_CONTENT_TYPE, content_type_for
from sharelift.core.env import EnvManager
from sharelift.core.exceptions import (
    ConfigurationError,
    DestinationExistsError,
    InvalidArtifactIdError,
    MigrationFailedError,
    MigrationTimeoutError,
    MissingDependencyError,
    ShareliftError,
    TransferFailure,
)
from sharelift.core.types import OutcomeKind, OverwritePolicy, StorageTier, TransferState

__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "DEFAULT_EXTENSIONS",
    "DEFAULT_KEY_PREFIX",
    "CancellationScope",
    "ConfigurationError",
    "DestinationExistsError",
    "EnvManager",
    "InvalidArtifactIdError",
    "MigrationConfig",
    "MigrationFailedError",
    "MigrationTimeoutError",
    "MissingDependencyError",
    "OutcomeKind",
    "OverwritePolicy",
    "ShareliftError",
    "StorageTier",
    "TransferFailure",
    "TransferState",
    "content_type_for",
]
