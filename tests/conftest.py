"""Pytest configuration and fixtures for mongo_query tests."""

from __future__ import annotations

from typing import Any, Generator, Iterator
from unittest.mock import MagicMock

import pytest
from prometheus_client import CollectorRegistry

from mongo_query.adapters.outbound import InMemoryDocumentStore
from mongo_query.application import CursorMaterializer, DocumentClient
from mongo_query.infrastructure.config import Config, MongoConfig
from mongo_query.infrastructure.container import Container
from mongo_query.infrastructure.metrics import MetricsRegistry


class FakeCursor:
    """Cursor double yielding a fixed list of records.

    Items that are exceptions are raised instead of yielded, which lets a
    test fail the stream at an exact position.
    """

    def __init__(self, records: list[Any]) -> None:
        self._records = records
        self.close_calls = 0
        self.yielded = 0

    def __iter__(self) -> Iterator[Any]:
        for record in self._records:
            if isinstance(record, BaseException):
                raise record
            self.yielded += 1
            yield record

    def close(self) -> None:
        self.close_calls += 1


@pytest.fixture(autouse=True)
def reset_container() -> Generator[None, None, None]:
    """Reset the DI container before and after each test."""
    Container.reset()
    yield
    Container.reset()


@pytest.fixture
def test_config() -> Config:
    """Provide a test configuration."""
    return Config(
        mongo=MongoConfig(
            uri="mongodb://localhost:27017",
            server_selection_timeout_ms=500,  # fail fast in tests
        ),
    )


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def memory_store() -> InMemoryDocumentStore:
    """Provide an empty in-memory document store."""
    return InMemoryDocumentStore()


@pytest.fixture
def materializer(metrics_registry: MetricsRegistry) -> CursorMaterializer:
    """Provide a materializer reporting to an isolated registry."""
    return CursorMaterializer(metrics=metrics_registry)


@pytest.fixture
def client(memory_store: InMemoryDocumentStore, metrics_registry: MetricsRegistry) -> DocumentClient:
    """Provide a client backed by the in-memory store."""
    return DocumentClient(memory_store, metrics=metrics_registry)


@pytest.fixture
def make_cursor() -> type[FakeCursor]:
    """Provide the FakeCursor class for building scripted cursors."""
    return FakeCursor


@pytest.fixture
def mock_store() -> MagicMock:
    """Provide a DocumentStore double whose find returns an empty cursor."""
    store = MagicMock()
    store.find.return_value = FakeCursor([])
    return store


@pytest.fixture
def people() -> list[dict[str, Any]]:
    """Sample documents used across pipeline tests."""
    return [
        {"_id": 1, "name": "carol", "age": 35, "city": "oslo"},
        {"_id": 2, "name": "alice", "age": 30, "city": "lima"},
        {"_id": 3, "name": "bob", "age": 30, "city": "oslo"},
        {"_id": 4, "name": "dave", "age": 25, "city": "lima"},
        {"_id": 5, "name": "erin", "age": 35, "city": "rome"},
    ]


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
