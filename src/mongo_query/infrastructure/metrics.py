"""Prometheus metrics for the query layer."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all query layer metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Read path
        self.queries_total = Counter(
            "mongo_queries_total",
            "Total number of find operations executed",
            ["operation", "status"],  # status: success, error
            registry=self._registry,
        )

        self.query_latency_seconds = Histogram(
            "mongo_query_latency_seconds",
            "Find latency from cursor open to last record, in seconds",
            ["operation"],
            buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
            registry=self._registry,
        )

        self.documents_returned_total = Counter(
            "mongo_documents_returned_total",
            "Total documents materialized from cursors",
            ["operation"],
            registry=self._registry,
        )

        self.decode_errors_total = Counter(
            "mongo_decode_errors_total",
            "Total rejected query option payloads",
            ["kind"],  # unknown_field, type_mismatch, malformed
            registry=self._registry,
        )

        # Write path
        self.write_operations_total = Counter(
            "mongo_write_operations_total",
            "Total pass-through write operations",
            ["operation", "status"],
            registry=self._registry,
        )

        self.info = Info(
            "mongo_query",
            "Query layer information",
            registry=self._registry,
        )


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

    from mongo_query import __version__
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
