"""
Prometheus metrics integration for sharelift.

Quick Start:
    >>> from sharelift.monitoring.prometheus import PrometheusMetrics, start_metrics_server
    >>>
    >>> start_metrics_server(port=8000)
    >>> metrics = PrometheusMetrics()
    >>> coordinator = MigrationCoordinator(source, destination, config, metrics=metrics)

Requirements:
    pip install prometheus-client
"""

import logging
from typing import Any

# Check if prometheus_client is installed
try:
    from prometheus_client import REGISTRY, Counter, Gauge, Histogram, start_http_server

    PROMETHEUS_AVAILABLE = True
except ImportError:  # pragma: no cover
    PROMETHEUS_AVAILABLE = False
    REGISTRY: Any = None  # type: ignore[no-redef]
    Counter: Any = None  # type: ignore[no-redef]
    Gauge: Any = None  # type: ignore[no-redef]
    Histogram: Any = None  # type: ignore[no-redef]
    start_http_server: Any = None  # type: ignore[no-redef]


logger = logging.getLogger(__name__)


class PrometheusMetrics:
    """
    Prometheus-compatible metrics collector for migrations.

    Exposes the following metrics:
        - {prefix}_transfers_total: Counter of file transfers by outcome
        - {prefix}_bytes_transferred_total: Counter of bytes uploaded
        - {prefix}_transfer_duration_seconds: Histogram of per-file durations
        - {prefix}_migrations_total: Counter of migration runs by status
        - {prefix}_active_transfers: Gauge of transfers currently running
    """

    def __init__(self, prefix: str = "sharelift", registry: Any = None):
        """
        Initialize Prometheus metrics.

        Args:
            prefix: Metric name prefix (default: "sharelift")
            registry: Collector registry (default: the global registry)
        """
        if not PROMETHEUS_AVAILABLE:  # pragma: no cover
            logger.warning(
                "prometheus-client not installed. Metrics will not be collected. "
                "Install with: pip install prometheus-client"
            )
            self._enabled = False
            return

        self._enabled = True
        self._prefix = prefix
        registry = registry if registry is not None else REGISTRY

        self._transfers_total = Counter(
            f"{prefix}_transfers_total",
            "Total file transfers by outcome",
            ["outcome"],
            registry=registry,
        )

        self._bytes_total = Counter(
            f"{prefix}_bytes_transferred_total",
            "Total bytes uploaded to the destination store",
            registry=registry,
        )

        self._transfer_duration = Histogram(
            f"{prefix}_transfer_duration_seconds",
            "Per-file transfer duration in seconds",
            ["outcome"],
            buckets=[0.1, 0.5, 1.0, 5.0, 15.0, 30.0, 60.0, 300.0, 900.0, 3600.0],
            registry=registry,
        )

        self._migrations_total = Counter(
            f"{prefix}_migrations_total",
            "Total migration runs by status",
            ["status"],
            registry=registry,
        )

        self._active_transfers = Gauge(
            f"{prefix}_active_transfers",
            "Number of transfers currently running",
            registry=registry,
        )

    @property
    def enabled(self) -> bool:
        return self._enabled

    def transfer_started(self) -> None:
        if not self._enabled:
            return
        self._active_transfers.inc()

    def transfer_finished(self, outcome: str, duration: float, bytes_transferred: int) -> None:
        """
        Record the end of one file transfer.

        Args:
            outcome: OutcomeKind value
            duration: Transfer duration in seconds
            bytes_transferred: Bytes uploaded (0 for skipped/failed transfers)
        """
        if not self._enabled:
            return

        self._active_transfers.dec()
        self._transfers_total.labels(outcome=outcome).inc()
        self._transfer_duration.labels(outcome=outcome).observe(duration)
        if bytes_transferred:
            self._bytes_total.inc(bytes_transferred)

    def migration_finished(self, success: bool) -> None:
        if not self._enabled:
            return
        self._migrations_total.labels(status="success" if success else "failed").inc()


def start_metrics_server(port: int = 8000, addr: str = "0.0.0.0") -> None:
    """
    Start a Prometheus HTTP metrics server.

    Args:
        port: Port to listen on (default: 8000)
        addr: Address to bind to (default: 0.0.0.0 for all interfaces)
    """
    if not PROMETHEUS_AVAILABLE:  # pragma: no cover
        logger.error(
            "Cannot start metrics server: prometheus-client not installed. "
            "Install with: pip install prometheus-client"
        )
        return

    start_http_server(port, addr)
    logger.info(f"Prometheus metrics server started on port {port}")


def is_prometheus_available() -> bool:
    """Check if prometheus-client is installed."""
    return PROMETHEUS_AVAILABLE
