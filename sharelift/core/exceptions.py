# ============================================
# FILE: sharelift/core/exceptions.py
# ============================================

"""
All migration-related exceptions
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sharelift.transfer.coordinator import MigrationResult


class ShareliftError(Exception):
    """Base sharelift error"""


class ConfigurationError(ShareliftError):
    """Required setting missing/invalid, or a store is unreachable at startup"""


class InvalidArtifactIdError(ShareliftError):
    """Artifact id cannot be turned into candidate filenames"""


class DestinationExistsError(ShareliftError):
    """Destination object exists and the overwrite policy refuses to replace it"""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Destination object already exists: {key}")


class TransferFailure(ShareliftError):
    """
    A single file's pipeline failed.

    The underlying error is always chained as ``__cause__``.
    """

    def __init__(self, filename: str, artifact_id: str, message: str | None = None):
        self.filename = filename
        self.artifact_id = artifact_id
        super().__init__(message or f"Transfer failed for {filename} (artifact {artifact_id})")


class MigrationFailedError(ShareliftError):
    """At least one transfer task of a migration ended FAILED"""

    def __init__(self, artifact_id: str, result: MigrationResult, message: str | None = None):
        self.artifact_id = artifact_id
        self.result = result
        super().__init__(message or f"Migration failed for artifact {artifact_id}")


class MigrationTimeoutError(ShareliftError):
    """The whole migration run exceeded its configured deadline"""

    def __init__(self, artifact_id: str, timeout_seconds: float):
        self.artifact_id = artifact_id
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Migration for artifact {artifact_id} timed out after {timeout_seconds}s"
        )


class MissingDependencyError(ShareliftError):
    """
    Raised when an optional dependency is not installed.

    This exception provides clear installation instructions to help users
    quickly resolve missing package issues.
    """

    INSTALL_COMMANDS = {
        "aioboto3": "pip install aioboto3",
        "uvicorn": "pip install sharelift[server]",
        "prometheus-client": "pip install prometheus-client",
    }

    def __init__(self, package: str, feature: str | None = None):
        self.package = package
        self.feature = feature

        install_cmd = self.INSTALL_COMMANDS.get(package, f"pip install {package}")

        if feature:
            message = (
                f"\n╔══════════════════════════════════════════════════════════════╗\n"
                f"║  Missing Dependency: {package:<40} ║\n"
                f"╠══════════════════════════════════════════════════════════════╣\n"
                f"║  Required for: {feature:<45} ║\n"
                f"║  Install with: {install_cmd:<45} ║\n"
                f"╚══════════════════════════════════════════════════════════════╝"
            )
        else:
            message = (
                f"\n╔══════════════════════════════════════════════════════════════╗\n"
                f"║  Missing Dependency: {package:<40} ║\n"
                f"╠══════════════════════════════════════════════════════════════╣\n"
                f"║  Install with: {install_cmd:<45} ║\n"
                f"╚══════════════════════════════════════════════════════════════╝"
            )

        super().__init__(message)
