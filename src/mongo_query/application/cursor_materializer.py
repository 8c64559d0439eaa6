"""Cursor Materializer - runs a compiled find and collects its results.

This is the only stage of the query pipeline that performs I/O. It
renders the compiled query, opens a cursor, and drains it into a list of
plain dicts in delivery order.

Failure policy:
    - Filter encoding, cursor open, record decode and cursor streaming
      failures all raise ExecutionError.
    - Documents collected before a failure are discarded; the caller
      never sees a truncated result.
    - The cursor is closed on every exit path, including interrupts.
    - Nothing is retried here. Retrying the whole call is up to the caller.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from typing import Any

import bson
from bson.errors import BSONError, InvalidBSON
from bson.raw_bson import RawBSONDocument

from mongo_query.domain.value_objects import CompiledQuery
from mongo_query.infrastructure.logging import get_logger
from mongo_query.infrastructure.metrics import MetricsRegistry, get_metrics
from mongo_query.infrastructure.tracing import query_span
from mongo_query.ports.inbound import ExecutionError, ResultSet
from mongo_query.ports.outbound import DocumentStore, StoreError


logger = get_logger(__name__)


def decode_record(record: Any) -> dict[str, Any]:
    """Decode one cursor record into a plain dict.

    Accepts RawBSONDocument, BSON bytes, or an already-decoded mapping.

    Raises:
        bson.errors.BSONError: If the record is not valid BSON.
    """
    if isinstance(record, RawBSONDocument):
        return bson.decode(record.raw)
    if isinstance(record, (bytes, bytearray, memoryview)):
        return bson.decode(bytes(record))
    if isinstance(record, Mapping):
        return dict(record)
    raise InvalidBSON(f"unsupported record type: {type(record).__name__}")


class CursorMaterializer:
    """Executes compiled queries and materializes their cursors."""

    def __init__(self, metrics: MetricsRegistry | None = None) -> None:
        self._metrics = metrics or get_metrics()

    def execute(
        self,
        store: DocumentStore,
        database: str,
        collection: str,
        compiled: CompiledQuery,
        operation: str = "find",
    ) -> ResultSet:
        """Run a compiled find and return every matching document.

        Args:
            store: Document store to query.
            database: Database name.
            collection: Collection name.
            compiled: The query to run.
            operation: Label used for logs and metrics.

        Returns:
            Documents in store-delivery order; empty if nothing matched.

        Raises:
            ExecutionError: If the find cannot be completed.
        """
        start = time.perf_counter()
        log = logger.bind(database=database, collection=collection, operation=operation)

        with query_span(operation, database, collection) as span:
            try:
                documents = self._materialize(store, database, collection, compiled)
            except ExecutionError as e:
                self._metrics.queries_total.labels(operation=operation, status="error").inc()
                log.error("find_failed", error=str(e))
                raise

            elapsed = time.perf_counter() - start
            span.set_attribute("db.documents_returned", len(documents))

        self._metrics.queries_total.labels(operation=operation, status="success").inc()
        self._metrics.query_latency_seconds.labels(operation=operation).observe(elapsed)
        self._metrics.documents_returned_total.labels(operation=operation).inc(len(documents))
        log.info("find_completed", documents=len(documents), elapsed_seconds=round(elapsed, 6))
        return documents

    def _materialize(
        self,
        store: DocumentStore,
        database: str,
        collection: str,
        compiled: CompiledQuery,
    ) -> ResultSet:
        try:
            filter_document, sort, projection = compiled.render()
        except (BSONError, OverflowError, TypeError) as e:
            raise ExecutionError(f"cannot encode filter: {e}", database, collection) from e

        try:
            cursor = store.find(
                database,
                collection,
                filter_document,
                limit=compiled.limit,
                sort=sort,
                projection=projection,
            )
        except StoreError as e:
            raise ExecutionError(f"cannot open cursor: {e}", database, collection) from e

        documents: ResultSet = []
        try:
            for index, record in enumerate(cursor):
                try:
                    documents.append(decode_record(record))
                except BSONError as e:
                    raise ExecutionError(
                        f"cannot decode record {index}: {e}", database, collection
                    ) from e
        except (StoreError, BSONError, OverflowError) as e:
            raise ExecutionError(
                f"cursor failed after {len(documents)} records: {e}", database, collection
            ) from e
        finally:
            cursor.close()

        return documents
