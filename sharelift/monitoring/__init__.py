"""
Monitoring - structured logging and optional Prometheus metrics.
"""

from .logging import (
    MigrationContextFilter,
    MigrationJsonFormatter,
    MigrationLogger,
    migration_context,
    migration_scope,
    setup_migration_logging,
)
from .prometheus import PrometheusMetrics, is_prometheus_available, start_metrics_server

__all__ = [
    "MigrationContextFilter",
    "MigrationJsonFormatter",
    "MigrationLogger",
    "PrometheusMetrics",
    "is_prometheus_available",
    "migration_context",
    "migration_scope",
    "setup_migration_logging",
    "start_metrics_server",
]
