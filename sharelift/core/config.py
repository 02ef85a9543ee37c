"""
MigrationConfig - Unified configuration for a sharelift deployment.

Provides a single, type-safe configuration object describing:
- Where artifacts come from (source file share)
- Where they go (destination object store, key prefix, storage tier)
- Which candidate filenames make up one artifact (ordered extension set)
- Run-level behaviour (overwrite policy, optional timeout, logging)

All values are read once, at construction. A coordinator built from a config
never re-reads the environment while it runs.

Example (explicit):
    >>> config = MigrationConfig(
    ...     source_url="file:///mnt/livestream-recorder",
    ...     destination_url="s3://livestream-recorder",
    ...     storage_tier=StorageTier.HOT,
    ... )

Example (environment):
    >>> config = MigrationConfig.from_env()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

from sharelift.core.env import EnvManager
from sharelift.core.exceptions import ConfigurationError
from sharelift.core.types import OverwritePolicy, StorageTier

logger = logging.getLogger(__name__)

# Media containers, thumbnails, then metadata/caption sidecars.
DEFAULT_EXTENSIONS: tuple[str, ...] = (
    ".jpg",
    ".jpeg",
    ".png",
    ".webp",
    ".mp4",
    ".webm",
    ".mkv",
    ".info.json",
    ".live_chat.json",
)

DEFAULT_KEY_PREFIX = "videos/"


@dataclass(frozen=True)
class MigrationConfig:
    """
    Configuration for migrating artifacts.

    Attributes:
        source_url: Source share location (``file:///path``, bare path or ``memory://``)
        destination_url: Destination bucket (``s3://bucket`` or ``memory://``)
        extensions: Ordered suffixes appended to an artifact id
        storage_tier: Tier every uploaded object is written to
        key_prefix: Logical folder prepended to every destination key
        overwrite_policy: Behaviour when the destination object already exists
        timeout_seconds: Optional deadline for a whole migration run
        s3_region: Region for the S3 destination
        s3_endpoint_url: Custom endpoint (LocalStack, MinIO, ...)
        log_level: Level for the ``sharelift`` logger namespace
        log_json: Emit JSON log lines instead of plain text
    """

    source_url: str
    destination_url: str
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    storage_tier: StorageTier = StorageTier.COOL
    key_prefix: str = DEFAULT_KEY_PREFIX
    overwrite_policy: OverwritePolicy = OverwritePolicy.WARN
    timeout_seconds: float | None = None
    s3_region: str = "us-east-1"
    s3_endpoint_url: str | None = None
    log_level: str = "INFO"
    log_json: bool = False

    def __post_init__(self) -> None:
        # Normalise loose input while keeping the instance immutable.
        object.__setattr__(self, "extensions", tuple(self.extensions))
        object.__setattr__(self, "storage_tier", StorageTier.parse(self.storage_tier))
        if isinstance(self.overwrite_policy, str):
            object.__setattr__(self, "overwrite_policy", _parse_policy(self.overwrite_policy))
        self._validate()

    def _validate(self) -> None:
        if not self.source_url:
            msg = "source_url is required"
            raise ConfigurationError(msg)
        if not self.destination_url:
            msg = "destination_url is required"
            raise ConfigurationError(msg)
        if not self.extensions:
            msg = "At least one extension is required"
            raise ConfigurationError(msg)
        for ext in self.extensions:
            if not ext.startswith(".") or "/" in ext or "\\" in ext:
                msg = f"Invalid extension {ext!r}: must start with '.' and contain no path separators"
                raise ConfigurationError(msg)
        if len(set(self.extensions)) != len(self.extensions):
            msg = f"Duplicate extensions in {self.extensions}"
            raise ConfigurationError(msg)
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            msg = f"timeout_seconds must be positive, got {self.timeout_seconds}"
            raise ConfigurationError(msg)
        if self.log_level.upper() not in logging.getLevelNamesMapping():
            msg = f"Unknown log level {self.log_level!r}"
            raise ConfigurationError(msg)

    def with_overrides(self, **changes: Any) -> MigrationConfig:
        """Copy with the given non-None fields replaced (used by the CLI)."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def from_env(cls, env: EnvManager | None = None, **overrides: Any) -> MigrationConfig:
        """
        Build configuration from ``SHARELIFT_*`` environment variables.

        Args:
            env: Environment manager (defaults to one that loads ./.env)
            **overrides: Explicit values that win over the environment

        Raises:
            ConfigurationError: If a required variable is missing or malformed
        """
        env = env or EnvManager()

        try:
            values: dict[str, Any] = {
                "source_url": env.get("SOURCE_URL", required=overrides.get("source_url") is None),
                "destination_url": env.get(
                    "DESTINATION_URL", required=overrides.get("destination_url") is None
                ),
                "extensions": tuple(env.get_list("EXTENSIONS", list(DEFAULT_EXTENSIONS))),
                "storage_tier": StorageTier.parse(env.get("BLOB_TIER")),
                "key_prefix": env.get("KEY_PREFIX", DEFAULT_KEY_PREFIX),
                "overwrite_policy": _parse_policy(env.get("OVERWRITE_POLICY", "warn")),
                "timeout_seconds": env.get_float("TIMEOUT_SECONDS"),
                "s3_region": env.get("S3_REGION", "us-east-1"),
                "s3_endpoint_url": env.get("S3_ENDPOINT_URL"),
                "log_level": env.get("LOG_LEVEL", "INFO"),
                "log_json": env.get_bool("LOG_JSON", False),
            }
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        values.update({k: v for k, v in overrides.items() if v is not None})
        config = cls(**values)
        logger.debug(
            "Loaded configuration: source=%s destination=%s tier=%s extensions=%d",
            config.source_url,
            config.destination_url,
            config.storage_tier.value,
            len(config.extensions),
        )
        return config


def _parse_policy(value: str) -> OverwritePolicy:
    try:
        return OverwritePolicy(value.strip().lower())
    except ValueError:
        allowed = ", ".join(p.value for p in OverwritePolicy)
        msg = f"Unknown overwrite policy {value!r} (expected one of: {allowed})"
        raise ConfigurationError(msg) from None
