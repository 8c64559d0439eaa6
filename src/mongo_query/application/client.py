"""Document Client - entry point for scripted access to a document store.

The client bundles the query pipeline (decode, compile, materialize)
with thin pass-through write operations that share the same store
connection.

Usage:
    from mongo_query.adapters import PyMongoDocumentStore
    from mongo_query.application import DocumentClient

    client = DocumentClient(PyMongoDocumentStore.connect("mongodb://localhost:27017"))

    client.insert_many("shop", "orders", [{"n": 1}, {"n": 2}, {"n": 3}])
    docs = client.find_with_limit(
        "shop",
        "orders",
        {"n": {"$gte": 2}},
        {"limit": 1, "sort": [{"field": "n", "asc": False}]},
        {"_id": 0},
    )

    client.disconnect()
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator, Sequence

from mongo_query.application.cursor_materializer import CursorMaterializer
from mongo_query.domain.services import OptionDecoder, QueryCompiler
from mongo_query.domain.value_objects import CompiledQuery, SortDirection
from mongo_query.infrastructure.logging import get_logger
from mongo_query.infrastructure.metrics import MetricsRegistry, get_metrics
from mongo_query.ports.inbound import (
    DecodeError,
    OptionDecoderPort,
    QueryCompilerPort,
    ResultSet,
)
from mongo_query.ports.outbound import DocumentStore, StoreError, UpdateCounts


logger = get_logger(__name__)

# Deletes and find_one order by _id so that "first match" is deterministic.
# Whether the filter actually targets _id is left to the caller.
_ID_ORDER = [("_id", int(SortDirection.ASCENDING))]


class DocumentClient:
    """Query pipeline plus pass-through operations over one store.

    Thread Safety:
        The client holds no per-call state. Concurrent calls are safe as
        long as the underlying store is.
    """

    def __init__(
        self,
        store: DocumentStore,
        decoder: OptionDecoderPort | None = None,
        compiler: QueryCompilerPort | None = None,
        materializer: CursorMaterializer | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._store = store
        self._metrics = metrics or get_metrics()
        self._decoder: OptionDecoderPort = decoder or OptionDecoder()
        self._compiler: QueryCompilerPort = compiler or QueryCompiler()
        self._materializer = materializer or CursorMaterializer(self._metrics)

    @property
    def store(self) -> DocumentStore:
        return self._store

    def __enter__(self) -> DocumentClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.disconnect()

    @contextmanager
    def _write(self, operation: str, database: str, collection: str) -> Generator[None, None, None]:
        try:
            yield
        except StoreError:
            self._metrics.write_operations_total.labels(operation=operation, status="error").inc()
            raise
        self._metrics.write_operations_total.labels(operation=operation, status="success").inc()
        logger.debug("write_completed", operation=operation, database=database, collection=collection)

    # Query pipeline

    def find_with_limit(
        self,
        database: str,
        collection: str,
        filter: Any,
        opts: Any = None,
        fields: Any = None,
    ) -> ResultSet:
        """Find with caller-supplied limit, sort and projection.

        Args:
            database: Database name.
            collection: Collection name.
            filter: Query predicate, passed to the store as given.
            opts: Free-form options, ``{"limit": int, "sort": [{"field": str, "asc": bool}]}``.
            fields: Projection, passed to the store as given.

        Returns:
            Matching documents in store-delivery order.

        Raises:
            DecodeError: If opts does not match the options schema.
            ExecutionError: If the find cannot be completed.
        """
        logger.debug(
            "find_with_limit",
            database=database,
            collection=collection,
            filter=repr(filter),
            opts=repr(opts),
            fields=repr(fields),
        )
        try:
            options = self._decoder.decode(opts)
        except DecodeError as e:
            self._metrics.decode_errors_total.labels(kind=e.kind.value).inc()
            raise

        compiled = self._compiler.compile(filter, options, fields)
        return self._materializer.execute(
            self._store, database, collection, compiled, operation="find_with_limit"
        )

    def find(self, database: str, collection: str, filter: Any) -> ResultSet:
        """Find all documents matching a filter, without options."""
        compiled = CompiledQuery(filter=filter)
        return self._materializer.execute(self._store, database, collection, compiled, operation="find")

    def find_all(self, database: str, collection: str) -> ResultSet:
        """Return every document in a collection, in natural order."""
        compiled = CompiledQuery(filter={})
        return self._materializer.execute(
            self._store, database, collection, compiled, operation="find_all"
        )

    # Pass-through operations

    def find_one(self, database: str, collection: str, filter: Any) -> dict[str, Any] | None:
        """Return the matching document with the lowest _id, or None."""
        return self._store.find_one(database, collection, filter, sort=_ID_ORDER)

    def insert(self, database: str, collection: str, document: Any) -> Any:
        """Insert one document and return its _id."""
        with self._write("insert", database, collection):
            return self._store.insert_one(database, collection, document)

    def insert_many(self, database: str, collection: str, documents: Sequence[Any]) -> list[Any]:
        """Insert documents and return their _ids."""
        with self._write("insert_many", database, collection):
            return self._store.insert_many(database, collection, documents)

    def delete_one(self, database: str, collection: str, filter: Any) -> int:
        """Delete the first matching document, hinting the _id index."""
        with self._write("delete_one", database, collection):
            deleted = self._store.delete_one(database, collection, filter, hint=_ID_ORDER)
        logger.info("documents_deleted", database=database, collection=collection, deleted=deleted)
        return deleted

    def delete_many(self, database: str, collection: str, filter: Any) -> int:
        """Delete every matching document and return how many were removed."""
        with self._write("delete_many", database, collection):
            deleted = self._store.delete_many(database, collection, filter, hint=_ID_ORDER)
        logger.info("documents_deleted", database=database, collection=collection, deleted=deleted)
        return deleted

    def update_many(self, database: str, collection: str, filter: Any, update: Any) -> UpdateCounts:
        """Apply an update document to every match."""
        with self._write("update_many", database, collection):
            return self._store.update_many(database, collection, filter, update)

    def drop_collection(self, database: str, collection: str) -> None:
        """Drop a collection if present."""
        with self._write("drop_collection", database, collection):
            self._store.drop_collection(database, collection)

    def disconnect(self) -> None:
        """Close the underlying store connection."""
        logger.info("disconnecting")
        self._store.close()
