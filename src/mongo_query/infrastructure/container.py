"""Dependency injection container for the query layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from opentelemetry import trace

from mongo_query.infrastructure.config import Config, get_config
from mongo_query.infrastructure.logging import setup_logging
from mongo_query.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from mongo_query.infrastructure.tracing import setup_tracing

if TYPE_CHECKING:
    from mongo_query.application import DocumentClient
    from mongo_query.ports.outbound import DocumentStore


@dataclass
class Container:
    """Dependency injection container for query layer components."""

    config: Config
    logger: structlog.BoundLogger
    tracer: trace.Tracer
    metrics: MetricsRegistry
    store: DocumentStore
    client: DocumentClient

    _instance: "Container | None" = None

    @classmethod
    def create(cls, store: DocumentStore | None = None) -> "Container":
        """Create and initialize the container with all dependencies.

        Args:
            store: Store to use instead of connecting with the configured URI.
        """
        if cls._instance is not None:
            return cls._instance

        from mongo_query.adapters.outbound import PyMongoDocumentStore
        from mongo_query.application import DocumentClient

        config = get_config()
        observability = config.observability
        logger = setup_logging(observability.log_level, observability.log_format)
        tracer = setup_tracing(
            observability.otel_service_name,
            observability.otel_endpoint,
            console_export=observability.otel_console_export,
        )
        if observability.metrics_port is not None:
            metrics = setup_metrics(observability.metrics_port)
        else:
            metrics = get_metrics()

        if store is None:
            store = PyMongoDocumentStore.from_config(config.mongo)
        client = DocumentClient(store, metrics=metrics)

        cls._instance = cls(
            config=config,
            logger=logger,
            tracer=tracer,
            metrics=metrics,
            store=store,
            client=client,
        )

        logger.info(
            "mongo_query_container_initialized",
            app_name=config.mongo.app_name,
            max_time_ms=config.mongo.max_time_ms,
        )

        return cls._instance

    @classmethod
    def get(cls) -> "Container":
        """Get the singleton container instance."""
        if cls._instance is None:
            return cls.create()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the container (useful for testing)."""
        if cls._instance is not None:
            cls._instance.store.close()
        cls._instance = None


def get_container() -> Container:
    """Get the dependency injection container."""
    return Container.get()
