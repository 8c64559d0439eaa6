"""Infrastructure layer - cross-cutting concerns."""

from mongo_query.infrastructure.config import Config, MongoConfig, ObservabilityConfig, get_config
from mongo_query.infrastructure.logging import setup_logging, get_logger
from mongo_query.infrastructure.metrics import setup_metrics, get_metrics, MetricsRegistry
from mongo_query.infrastructure.tracing import setup_tracing, get_tracer, query_span, trace_span

__all__ = [
    "Config",
    "MongoConfig",
    "ObservabilityConfig",
    "get_config",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
    "trace_span",
    "query_span",
]
