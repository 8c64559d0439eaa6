"""PyMongo-backed Document Store implementation.

This adapter implements the DocumentStore protocol on top of a shared
``pymongo.MongoClient``. The client owns the connection pool; one adapter
instance can serve concurrent callers.

Finds are issued against a collection handle whose document class is
RawBSONDocument, so records reach the caller as undecoded BSON and a bad
record is reported by whoever decodes it rather than inside the driver.

Every driver failure is re-raised as StoreError with the original
exception chained.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator, Iterator, Sequence

from bson.codec_options import CodecOptions
from bson.errors import BSONError
from bson.raw_bson import RawBSONDocument
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.cursor import Cursor as DriverCursor
from pymongo.errors import PyMongoError

from mongo_query.infrastructure.config import MongoConfig
from mongo_query.infrastructure.logging import get_logger
from mongo_query.ports.outbound import StoreError, UpdateCounts


logger = get_logger(__name__)

_RAW_CODEC_OPTIONS = CodecOptions(document_class=RawBSONDocument)


@contextmanager
def _translate_errors(operation: str, database: str, collection: str) -> Generator[None, None, None]:
    """Re-raise driver and argument errors as StoreError."""
    try:
        yield
    except (PyMongoError, BSONError, OverflowError, TypeError, ValueError) as e:
        logger.error(
            "store_operation_failed",
            operation=operation,
            database=database,
            collection=collection,
            error=str(e),
        )
        raise StoreError(f"{operation} on {database}.{collection} failed: {e}") from e


class PyMongoCursor:
    """Cursor adapter over a pymongo cursor.

    Driver errors raised while fetching batches are translated to
    StoreError. Records are yielded as RawBSONDocument.
    """

    def __init__(self, cursor: DriverCursor, database: str, collection: str) -> None:
        self._cursor = cursor
        self._database = database
        self._collection = collection

    def __iter__(self) -> Iterator[Any]:
        with _translate_errors("cursor_next", self._database, self._collection):
            for record in self._cursor:
                yield record

    def close(self) -> None:
        self._cursor.close()


class PyMongoDocumentStore:
    """DocumentStore over a pymongo MongoClient.

    Example:
        store = PyMongoDocumentStore.connect("mongodb://localhost:27017")
        cursor = store.find("shop", "orders", {"status": "open"}, limit=10)
    """

    def __init__(self, client: MongoClient, max_time_ms: int | None = None) -> None:
        """Initialize the store.

        Args:
            client: Connected MongoClient; the store takes ownership.
            max_time_ms: Optional server-side deadline for every find.
        """
        self._client = client
        self._max_time_ms = max_time_ms

    @classmethod
    def connect(
        cls,
        uri: str,
        *,
        app_name: str | None = None,
        connect_timeout_ms: int | None = None,
        server_selection_timeout_ms: int | None = None,
        max_time_ms: int | None = None,
    ) -> PyMongoDocumentStore:
        """Create a store from a connection URI.

        The driver connects lazily; an unreachable server surfaces as
        StoreError on the first operation.

        Raises:
            StoreError: If the URI or client options are invalid.
        """
        kwargs: dict[str, Any] = {}
        if app_name is not None:
            kwargs["appname"] = app_name
        if connect_timeout_ms is not None:
            kwargs["connectTimeoutMS"] = connect_timeout_ms
        if server_selection_timeout_ms is not None:
            kwargs["serverSelectionTimeoutMS"] = server_selection_timeout_ms

        try:
            client: MongoClient = MongoClient(uri, **kwargs)
        except (PyMongoError, TypeError, ValueError) as e:
            raise StoreError(f"cannot create client: {e}") from e

        logger.info("store_client_created", app_name=app_name)
        return cls(client, max_time_ms=max_time_ms)

    @classmethod
    def from_config(cls, config: MongoConfig) -> PyMongoDocumentStore:
        """Create a store from the mongo section of the configuration."""
        return cls.connect(
            config.uri,
            app_name=config.app_name,
            connect_timeout_ms=config.connect_timeout_ms,
            server_selection_timeout_ms=config.server_selection_timeout_ms,
            max_time_ms=config.max_time_ms,
        )

    @property
    def client(self) -> MongoClient:
        return self._client

    def _collection(self, database: str, collection: str, raw: bool = False) -> Collection:
        db = self._client[database]
        if raw:
            return db.get_collection(collection, codec_options=_RAW_CODEC_OPTIONS)
        return db[collection]

    def find(
        self,
        database: str,
        collection: str,
        filter: Any,
        *,
        limit: int | None = None,
        sort: list[tuple[str, int]] | None = None,
        projection: Any = None,
    ) -> PyMongoCursor:
        kwargs: dict[str, Any] = {}
        if limit is not None:
            kwargs["limit"] = limit
        if sort is not None:
            kwargs["sort"] = sort
        if projection is not None:
            kwargs["projection"] = projection
        if self._max_time_ms is not None:
            kwargs["max_time_ms"] = self._max_time_ms

        with _translate_errors("find", database, collection):
            cursor = self._collection(database, collection, raw=True).find(filter, **kwargs)
        return PyMongoCursor(cursor, database, collection)

    def find_one(
        self,
        database: str,
        collection: str,
        filter: Any,
        *,
        sort: list[tuple[str, int]] | None = None,
    ) -> dict[str, Any] | None:
        with _translate_errors("find_one", database, collection):
            return self._collection(database, collection).find_one(filter, sort=sort)

    def insert_one(self, database: str, collection: str, document: Any) -> Any:
        with _translate_errors("insert_one", database, collection):
            result = self._collection(database, collection).insert_one(document)
        return result.inserted_id

    def insert_many(self, database: str, collection: str, documents: Sequence[Any]) -> list[Any]:
        with _translate_errors("insert_many", database, collection):
            result = self._collection(database, collection).insert_many(list(documents))
        return list(result.inserted_ids)

    def delete_one(
        self,
        database: str,
        collection: str,
        filter: Any,
        *,
        hint: list[tuple[str, int]] | None = None,
    ) -> int:
        with _translate_errors("delete_one", database, collection):
            result = self._collection(database, collection).delete_one(filter, hint=hint)
        return result.deleted_count

    def delete_many(
        self,
        database: str,
        collection: str,
        filter: Any,
        *,
        hint: list[tuple[str, int]] | None = None,
    ) -> int:
        with _translate_errors("delete_many", database, collection):
            result = self._collection(database, collection).delete_many(filter, hint=hint)
        return result.deleted_count

    def update_many(self, database: str, collection: str, filter: Any, update: Any) -> UpdateCounts:
        with _translate_errors("update_many", database, collection):
            result = self._collection(database, collection).update_many(filter, update)
        return UpdateCounts(matched=result.matched_count, modified=result.modified_count)

    def drop_collection(self, database: str, collection: str) -> None:
        with _translate_errors("drop_collection", database, collection):
            self._collection(database, collection).drop()

    def close(self) -> None:
        logger.info("store_client_closing")
        self._client.close()
