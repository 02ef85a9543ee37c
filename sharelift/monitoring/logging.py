"""
Structured logging for artifact migrations

Provides structured logging utilities for the migration pipeline, with
context propagation (artifact id, file name, correlation id) through a
ContextVar. asyncio copies the context into every task it creates, so each
concurrently running transfer logs with its own filename.

There is no module-level logger instance: the coordinator and its transfer
tasks receive a ``MigrationLogger`` explicitly.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sharelift.transfer.coordinator import MigrationResult
    from sharelift.transfer.progress import ProgressEvent

LOGGER_NAMESPACE = "sharelift"

# Context variables for propagating migration context
migration_context: ContextVar[dict[str, Any]] = ContextVar("migration_context", default={})

_CONTEXT_FIELDS = ("artifact_id", "file_name", "correlation_id")


class MigrationJsonFormatter(logging.Formatter):
    """
    JSON formatter for migration logs with structured fields

    Ensures every line carries the artifact id and filename it belongs to
    """

    # Fields to extract from log record if present
    _EXTRA_FIELDS = (
        "artifact_id",
        "file_name",
        "correlation_id",
        "key",
        "file_size",
        "storage_tier",
        "percentage",
        "bytes_per_second",
        "duration_ms",
        "outcome",
        "error_type",
    )

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON"""
        log_entry = self._build_base_entry(record)
        self._add_migration_context(log_entry)
        self._add_record_extras(log_entry, record)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)

    def _build_base_entry(self, record: logging.LogRecord) -> dict[str, Any]:
        """Build base log entry with standard fields."""
        return {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

    def _add_migration_context(self, log_entry: dict[str, Any]) -> None:
        """Add migration context to log entry if available."""
        context = migration_context.get()
        for name in _CONTEXT_FIELDS:
            if context.get(name) is not None:
                log_entry[name] = context[name]

    def _add_record_extras(self, log_entry: dict[str, Any], record: logging.LogRecord) -> None:
        """Add extra fields from log record."""
        for name in self._EXTRA_FIELDS:
            value = getattr(record, name, None)
            if value is not None and value != "":
                log_entry[name] = value


class MigrationContextFilter(logging.Filter):
    """
    Logging filter that adds migration context to log records
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Add migration context to log record"""
        context = migration_context.get()

        for name in _CONTEXT_FIELDS:
            if not hasattr(record, name):
                setattr(record, name, context.get(name) or "")

        return True


@contextmanager
def migration_scope(**values: Any) -> Iterator[dict[str, Any]]:
    """
    Extend the migration context for the duration of a block.

    Example:
        with migration_scope(artifact_id="abc123"):
            ...  # every log line in here carries artifact_id
    """
    merged = {**migration_context.get(), **values}
    token: Token = migration_context.set(merged)
    try:
        yield merged
    finally:
        migration_context.reset(token)


class MigrationLogger:
    """
    Migration-aware logger with automatic context propagation
    """

    def __init__(self, name: str = LOGGER_NAMESPACE, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger(name)

        if not any(isinstance(f, MigrationContextFilter) for f in self.logger.filters):
            self.logger.addFilter(MigrationContextFilter())

    @staticmethod
    def set_context(**values: Any) -> Token:
        """Merge values into the current context; returns a token for reset_context"""
        return migration_context.set({**migration_context.get(), **values})

    @staticmethod
    def reset_context(token: Token) -> None:
        migration_context.reset(token)

    @staticmethod
    def context() -> dict[str, Any]:
        return dict(migration_context.get())

    # Plain passthroughs for ad-hoc messages

    def debug(self, msg: str, **extra: Any) -> None:
        self.logger.debug(msg, extra=extra)

    def info(self, msg: str, **extra: Any) -> None:
        self.logger.info(msg, extra=extra)

    def warning(self, msg: str, **extra: Any) -> None:
        self.logger.warning(msg, extra=extra)

    def error(self, msg: str, **extra: Any) -> None:
        self.logger.error(msg, extra=extra)

    # Migration lifecycle

    def migration_started(self, artifact_id: str, candidates: list[str]) -> None:
        """Log migration start"""
        self.logger.info(
            f"Migration started: {artifact_id} ({len(candidates)} candidate files)",
            extra={"artifact_id": artifact_id},
        )

    def migration_finished(self, result: MigrationResult) -> None:
        """Log migration end with per-outcome counts"""
        counts = result.counts()
        summary = ", ".join(f"{kind}={count}" for kind, count in counts.items())
        level = logging.INFO if result.success else logging.ERROR
        self.logger.log(
            level,
            f"Migration finished: {result.artifact_id} - "
            f"{'success' if result.success else 'failed'} ({summary})",
            extra={
                "artifact_id": result.artifact_id,
                "outcome": "success" if result.success else "failed",
                "duration_ms": round(result.duration_seconds * 1000, 2),
            },
        )

    # Per-file events

    def file_not_found(self, filename: str) -> None:
        self.logger.debug(f"Source file not exists, skip: {filename}", extra={"outcome": "skipped_not_found"})

    def file_conflict(self, filename: str, detail: str | None = None) -> None:
        """Log a file skipped because another writer is modifying it"""
        message = f"Source file is currently being modified: {filename}"
        if detail:
            message = f"{message} ({detail})"
        self.logger.error(message, extra={"outcome": "skipped_conflict"})

    def file_opened(self, filename: str, size: int) -> None:
        self.logger.info(f"Get file stream. {filename} {size}", extra={"file_size": size})

    def destination_exists(self, key: str) -> None:
        self.logger.warning(f"Destination object already exists {key}", extra={"key": key})

    def upload_started(self, filename: str, key: str, size: int, storage_tier: str) -> None:
        self.logger.info(
            f"Start streaming {filename} to {key}",
            extra={"key": key, "file_size": size, "storage_tier": storage_tier},
        )

    def upload_progress(self, event: ProgressEvent) -> None:
        self.logger.debug(
            f"{event.filename} Uploading...{event.percentage}%, at speed {event.rate_display}",
            extra={"percentage": event.percentage, "bytes_per_second": event.bytes_per_second},
        )

    def upload_finished(self, filename: str, size: int, rate_display: str, duration_seconds: float) -> None:
        self.logger.info(
            f"Finish upload {filename}, at speed {rate_display}",
            extra={"file_size": size, "duration_ms": round(duration_seconds * 1000, 2)},
        )

    def source_deleted(self, filename: str, deleted: bool) -> None:
        if deleted:
            self.logger.info(f"File {filename} deleted from source store")
        else:
            self.logger.debug(f"File {filename} already gone from source store")

    def transfer_failed(self, filename: str, error: BaseException) -> None:
        """Log transfer failure with traceback"""
        self.logger.error(
            f"Upload failed: {filename} - {error!s}",
            extra={"outcome": "failed", "error_type": type(error).__name__},
            exc_info=error,
        )


def setup_migration_logging(
    log_level: str = "INFO", json_format: bool = False, include_console: bool = True
) -> MigrationLogger:
    """
    Set up structured logging for migrations

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_format: Use JSON formatting for structured logs
        include_console: Include console handler

    Returns:
        Configured MigrationLogger instance
    """
    root_logger = logging.getLogger(LOGGER_NAMESPACE)
    root_logger.setLevel(getattr(logging, log_level.upper()))

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if include_console:
        console_handler = logging.StreamHandler()
        console_handler.addFilter(MigrationContextFilter())

        if json_format:
            console_handler.setFormatter(MigrationJsonFormatter())
        else:
            formatter = logging.Formatter(
                "%(asctime)s [%(levelname)s] %(message)s <%(name)s> "
                "[%(artifact_id)s:%(file_name)s]"
            )
            console_handler.setFormatter(formatter)

        root_logger.addHandler(console_handler)

    return MigrationLogger(LOGGER_NAMESPACE)
