"""Integration tests: the full client against the in-memory store."""

from __future__ import annotations

from typing import Any

import pytest
from opentelemetry import trace

from mongo_query.adapters.outbound import InMemoryDocumentStore
from mongo_query.application import DocumentClient
from mongo_query.infrastructure import container as container_module
from mongo_query.infrastructure.config import get_config
from mongo_query.infrastructure.container import Container
from mongo_query.ports.inbound import DecodeError, ExecutionError


@pytest.fixture
def loaded_client(client: DocumentClient, people: list[dict[str, Any]]) -> DocumentClient:
    client.drop_collection("db", "people")
    client.insert_many("db", "people", people)
    return client


@pytest.mark.integration
class TestQueryPipeline:
    """End-to-end find_with_limit behaviour."""

    def test_sort_limit_projection(self, loaded_client: DocumentClient) -> None:
        result = loaded_client.find_with_limit(
            "db",
            "people",
            {"age": {"$gte": 30}},
            {"limit": 3, "sort": [{"field": "age", "asc": False}, {"field": "name", "asc": True}]},
            {"_id": 0, "name": 1, "age": 1},
        )

        assert result == [
            {"name": "carol", "age": 35},
            {"name": "erin", "age": 35},
            {"name": "alice", "age": 30},
        ]

    def test_sort_precedence_follows_list_order(self, loaded_client: DocumentClient) -> None:
        by_city_then_name = loaded_client.find_with_limit(
            "db", "people", {}, {"sort": [{"field": "city", "asc": True}, {"field": "name", "asc": False}]}
        )
        by_name_only = loaded_client.find_with_limit(
            "db", "people", {}, {"sort": [{"field": "name", "asc": False}]}
        )

        assert [doc["name"] for doc in by_city_then_name] == ["dave", "alice", "carol", "bob", "erin"]
        assert [doc["name"] for doc in by_name_only] == ["erin", "dave", "carol", "bob", "alice"]

    def test_zero_limit_returns_everything(self, loaded_client: DocumentClient) -> None:
        assert len(loaded_client.find_with_limit("db", "people", {}, {"limit": 0})) == 5

    def test_no_matches_returns_empty_list(self, loaded_client: DocumentClient) -> None:
        assert loaded_client.find_with_limit("db", "people", {"city": "paris"}, {}) == []

    def test_unknown_option_rejected(self, loaded_client: DocumentClient) -> None:
        with pytest.raises(DecodeError):
            loaded_client.find_with_limit("db", "people", {}, {"limit": 5, "bogus": True})

    def test_store_rejection_is_execution_error(
        self, loaded_client: DocumentClient, memory_store: InMemoryDocumentStore
    ) -> None:
        with pytest.raises(ExecutionError):
            loaded_client.find_with_limit("db", "people", {"name": {"$where": "1"}}, {})

        assert memory_store.open_cursors == []

    def test_oversized_int_filter_is_execution_error(
        self, loaded_client: DocumentClient, memory_store: InMemoryDocumentStore
    ) -> None:
        with pytest.raises(ExecutionError, match="cannot encode filter"):
            loaded_client.find_with_limit("db", "people", {"age": 2**64}, {})

        assert memory_store.cursors_opened == 0

    def test_oversized_limit_is_decode_error(self, loaded_client: DocumentClient) -> None:
        with pytest.raises(DecodeError) as exc_info:
            loaded_client.find_with_limit("db", "people", {}, {"limit": 2**70})

        assert exc_info.value.location == "limit"

    def test_cursors_closed_after_success(
        self, loaded_client: DocumentClient, memory_store: InMemoryDocumentStore
    ) -> None:
        loaded_client.find_all("db", "people")
        loaded_client.find("db", "people", {"city": "oslo"})

        assert memory_store.cursors_opened == 2
        assert memory_store.open_cursors == []


@pytest.mark.integration
class TestFacadeRoundTrip:
    """Writes followed by reads through the same client."""

    def test_write_then_read(self, loaded_client: DocumentClient) -> None:
        counts = loaded_client.update_many("db", "people", {"city": "lima"}, {"$set": {"city": "cusco"}})
        deleted = loaded_client.delete_many("db", "people", {"age": 35})

        assert (counts.matched, counts.modified) == (2, 2)
        assert deleted == 2
        assert [doc["_id"] for doc in loaded_client.find("db", "people", {"city": "cusco"})] == [2, 4]
        assert loaded_client.find_one("db", "people", {"city": "oslo"}) == {
            "_id": 3,
            "name": "bob",
            "age": 30,
            "city": "oslo",
        }

    def test_drop_then_find_all(self, loaded_client: DocumentClient) -> None:
        loaded_client.drop_collection("db", "people")

        assert loaded_client.find_all("db", "people") == []


@pytest.mark.integration
class TestContainer:
    """Container wiring with an injected store."""

    def test_create_with_store(self, memory_store: InMemoryDocumentStore) -> None:
        container = Container.create(store=memory_store)

        assert container.store is memory_store
        assert container.client.store is memory_store
        assert Container.get() is container

        container.client.insert("db", "c", {"_id": 1})
        assert container.client.find_all("db", "c") == [{"_id": 1}]

    def test_console_span_export_follows_config(
        self, memory_store: InMemoryDocumentStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        tracing_calls: list[dict[str, Any]] = []

        def fake_setup_tracing(service_name: str, otlp_endpoint: str | None = None, console_export: bool = False):
            tracing_calls.append({"service_name": service_name, "console_export": console_export})
            return trace.get_tracer(service_name)

        monkeypatch.setenv("MONGO_QUERY_OBSERVABILITY__OTEL_CONSOLE_EXPORT", "true")
        monkeypatch.setattr(container_module, "setup_tracing", fake_setup_tracing)
        get_config.cache_clear()
        try:
            Container.create(store=memory_store)
        finally:
            get_config.cache_clear()

        assert tracing_calls == [{"service_name": "mongo_query", "console_export": True}]
