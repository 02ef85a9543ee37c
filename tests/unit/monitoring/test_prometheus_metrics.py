"""
Tests for Prometheus metrics coverage.

These tests cover the PrometheusMetrics class and related functionality.
"""

from unittest.mock import patch

import pytest
from prometheus_client import CollectorRegistry

from sharelift.monitoring.prometheus import (
    PROMETHEUS_AVAILABLE,
    PrometheusMetrics,
    is_prometheus_available,
    start_metrics_server,
)


@pytest.fixture
def registry():
    return CollectorRegistry()


@pytest.fixture
def fresh_metrics(registry):
    """Metrics bound to a private registry so counts start at zero."""
    return PrometheusMetrics(prefix="test_migrate", registry=registry)


class TestPrometheusMetrics:
    """Tests for PrometheusMetrics class."""

    def test_prometheus_is_available(self):
        assert PROMETHEUS_AVAILABLE is True
        assert is_prometheus_available() is True

    def test_metrics_initialization(self, fresh_metrics):
        assert fresh_metrics.enabled is True

    def test_transfer_lifecycle(self, fresh_metrics, registry):
        fresh_metrics.transfer_started()
        assert registry.get_sample_value("test_migrate_active_transfers") == 1

        fresh_metrics.transfer_finished("completed", 2.5, 1_000_000)

        assert registry.get_sample_value("test_migrate_active_transfers") == 0
        assert (
            registry.get_sample_value("test_migrate_transfers_total", {"outcome": "completed"})
            == 1
        )
        assert registry.get_sample_value("test_migrate_bytes_transferred_total") == 1_000_000
        assert (
            registry.get_sample_value(
                "test_migrate_transfer_duration_seconds_sum", {"outcome": "completed"}
            )
            == 2.5
        )

    def test_skips_add_no_bytes(self, fresh_metrics, registry):
        fresh_metrics.transfer_started()
        fresh_metrics.transfer_finished("skipped_not_found", 0.01, 0)

        assert registry.get_sample_value("test_migrate_bytes_transferred_total") == 0
        assert (
            registry.get_sample_value(
                "test_migrate_transfers_total", {"outcome": "skipped_not_found"}
            )
            == 1
        )

    def test_migration_status(self, fresh_metrics, registry):
        fresh_metrics.migration_finished(True)
        fresh_metrics.migration_finished(False)
        fresh_metrics.migration_finished(False)

        def runs(status):
            return registry.get_sample_value("test_migrate_migrations_total", {"status": status})

        assert runs("success") == 1
        assert runs("failed") == 2

    def test_duplicate_prefix_on_same_registry_fails(self, fresh_metrics, registry):
        with pytest.raises(ValueError):
            PrometheusMetrics(prefix="test_migrate", registry=registry)


class TestStartMetricsServer:
    def test_starts_http_server(self):
        with patch("sharelift.monitoring.prometheus.start_http_server") as mock_start:
            start_metrics_server(port=9999, addr="127.0.0.1")

        mock_start.assert_called_once_with(9999, "127.0.0.1")
