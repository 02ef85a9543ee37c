"""
Base integration utilities for sharelift.

Provides framework-agnostic utilities used by the HTTP front-end:
- Correlation ID generation and propagation through the migration
  logging context
"""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager

from sharelift.monitoring.logging import migration_context, migration_scope

CORRELATION_ID_HEADER = "X-Correlation-ID"


def generate_correlation_id() -> str:
    """
    Generate a new unique correlation ID.

    Returns:
        A UUID string suitable for distributed tracing.
    """
    return str(uuid.uuid4())


def get_correlation_id() -> str | None:
    """Correlation ID of the current request, if one is in scope."""
    return migration_context.get().get("correlation_id")


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """
    Run a block with a correlation ID in the logging context.

    A new ID is generated when none is supplied. Every log line of the
    migration run inside the block (including its concurrent transfer
    tasks) carries it.

    Example:
        with correlation_scope(request.headers.get(CORRELATION_ID_HEADER)) as cid:
            await coordinator.migrate(artifact_id)
    """
    correlation_id = correlation_id or generate_correlation_id()
    with migration_scope(correlation_id=correlation_id):
        yield correlation_id
