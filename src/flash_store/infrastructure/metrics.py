"""Prometheus metrics for the key-value store."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all store metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Point operation metrics
        self.operations_total = Counter(
            "flash_store_operations_total",
            "Total number of store operations",
            ["operation", "status"],  # operation: put, get, delete, count; status: success, error
            registry=self._registry,
        )

        self.operation_latency_seconds = Histogram(
            "flash_store_operation_latency_seconds",
            "Store operation latency in seconds",
            ["operation"],
            buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.5, 1.0),
            registry=self._registry,
        )

        self.get_misses_total = Counter(
            "flash_store_get_misses_total",
            "Total reads of absent keys",
            registry=self._registry,
        )

        # Cursor metrics
        self.open_cursors = Gauge(
            "flash_store_open_cursors",
            "Number of engine cursors currently open",
            registry=self._registry,
        )

        self.cursors_opened_total = Counter(
            "flash_store_cursors_opened_total",
            "Total engine cursors opened",
            registry=self._registry,
        )

        self.entries_scanned_total = Counter(
            "flash_store_entries_scanned_total",
            "Total entries produced by traversals",
            registry=self._registry,
        )

        # Store info
        self.info = Info(
            "flash_store",
            "Key-value store information",
            registry=self._registry,
        )

    @contextmanager
    def track(self, operation: str) -> Iterator[None]:
        """Count one operation and record its latency.

        The status label is "error" when the body raises.
        """
        start = time.perf_counter()
        status = "success"
        try:
            yield
        except BaseException:
            status = "error"
            raise
        finally:
            self.operation_latency_seconds.labels(operation=operation).observe(
                time.perf_counter() - start
            )
            self.operations_total.labels(operation=operation, status=status).inc()


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    from flash_store import __version__
    _metrics.info.info({
        "version": __version__,
    })

    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
