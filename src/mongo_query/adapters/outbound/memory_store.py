"""In-memory document store for testing and development.

This adapter provides an in-process implementation of the DocumentStore
protocol. It keeps documents in insertion order and evaluates a small,
commonly used subset of the query language:

- Equality on top-level and dotted fields (arrays match on membership)
- ``$eq``, ``$ne``, ``$gt``, ``$gte``, ``$lt``, ``$lte``, ``$in``, ``$nin``,
  ``$exists``, and top-level ``$and`` / ``$or``
- Inclusion or exclusion projections on top-level fields
- Multi-key sort and limit
- ``$set``, ``$unset`` and ``$inc`` updates

Anything outside that subset raises StoreError, the same way the server
rejects an invalid query. Cursors yield BSON-encoded records so the
decoding path matches the real driver.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Any, Callable, Iterator, Sequence

import bson
from bson import ObjectId
from bson.errors import BSONError
from bson.raw_bson import RawBSONDocument

from mongo_query.infrastructure.logging import get_logger
from mongo_query.ports.outbound import StoreError, UpdateCounts


logger = get_logger(__name__)

_MISSING = object()


@dataclass
class MemoryCollection:
    """State for an in-memory collection."""

    name: str
    documents: list[dict[str, Any]] = field(default_factory=list)

    def ids(self) -> set[Any]:
        return {doc["_id"] for doc in self.documents}


class MemoryCursor:
    """Cursor over a precomputed list of encoded records."""

    def __init__(
        self, records: list[bytes], on_close: Callable[[MemoryCursor], None] | None = None
    ) -> None:
        self._records = records
        self._closed = False
        self._on_close = on_close

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> Iterator[bytes]:
        for record in self._records:
            if self._closed:
                raise StoreError("cursor is closed")
            yield record

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            self._on_close(self)


def _as_document(value: Any) -> dict[str, Any]:
    """Decode a filter/update argument into a plain dict."""
    if value is None:
        return {}
    try:
        if isinstance(value, RawBSONDocument):
            return bson.decode(value.raw)
        if isinstance(value, (bytes, bytearray)):
            return bson.decode(bytes(value))
    except BSONError as e:
        raise StoreError(f"invalid BSON document: {e}") from e
    if isinstance(value, Mapping):
        return dict(value)
    raise StoreError(f"document must be a mapping, got {type(value).__name__}")


def _lookup(document: Mapping[str, Any], path: str) -> Any:
    """Resolve a dotted path, returning _MISSING when absent."""
    current: Any = document
    for part in path.split("."):
        if isinstance(current, Mapping) and part in current:
            current = current[part]
        else:
            return _MISSING
    return current


def _equals(value: Any, expected: Any) -> bool:
    if value is _MISSING:
        return expected is None
    if isinstance(value, list) and not isinstance(expected, list):
        return expected in value
    return value == expected


def _compare(value: Any, operand: Any, op: str) -> bool:
    if value is _MISSING or value is None:
        return False
    try:
        if op == "$gt":
            return value > operand
        if op == "$gte":
            return value >= operand
        if op == "$lt":
            return value < operand
        return value <= operand
    except TypeError:
        return False


def _apply_operator(value: Any, op: str, operand: Any) -> bool:
    if op == "$eq":
        return _equals(value, operand)
    if op == "$ne":
        return not _equals(value, operand)
    if op in ("$gt", "$gte", "$lt", "$lte"):
        return _compare(value, operand, op)
    if op in ("$in", "$nin"):
        if not isinstance(operand, (list, tuple)):
            raise StoreError(f"{op} needs an array")
        found = any(_equals(value, candidate) for candidate in operand)
        return found if op == "$in" else not found
    if op == "$exists":
        return (value is not _MISSING) == bool(operand)
    raise StoreError(f"unknown operator: {op}")


def _is_operator_document(condition: Any) -> bool:
    return (
        isinstance(condition, Mapping)
        and len(condition) > 0
        and all(isinstance(key, str) and key.startswith("$") for key in condition)
    )


def _matches(document: Mapping[str, Any], query: Mapping[str, Any]) -> bool:
    for key, condition in query.items():
        if key == "$and":
            if not all(_matches(document, sub) for sub in condition):
                return False
        elif key == "$or":
            if not any(_matches(document, sub) for sub in condition):
                return False
        elif key.startswith("$"):
            raise StoreError(f"unknown top level operator: {key}")
        else:
            value = _lookup(document, key)
            if _is_operator_document(condition):
                for op, operand in condition.items():
                    if not _apply_operator(value, op, operand):
                        return False
            elif not _equals(value, condition):
                return False
    return True


def _compare_values(left: Any, right: Any) -> int:
    # missing and null sort before everything else
    left_null = left is _MISSING or left is None
    right_null = right is _MISSING or right is None
    if left_null and right_null:
        return 0
    if left_null:
        return -1
    if right_null:
        return 1
    try:
        return (left > right) - (left < right)
    except TypeError:
        left_type, right_type = type(left).__name__, type(right).__name__
        return (left_type > right_type) - (left_type < right_type)


def _sorted(documents: list[dict[str, Any]], sort: list[tuple[str, int]]) -> list[dict[str, Any]]:
    def compare(a: dict[str, Any], b: dict[str, Any]) -> int:
        for path, direction in sort:
            result = _compare_values(_lookup(a, path), _lookup(b, path))
            if result:
                return result * direction
        return 0

    return sorted(documents, key=cmp_to_key(compare))


def _project(document: dict[str, Any], projection: Any) -> dict[str, Any]:
    if projection is None:
        return document
    if isinstance(projection, (list, tuple)):
        projection = {name: 1 for name in projection}
    if not isinstance(projection, Mapping):
        raise StoreError(f"projection must be a mapping or list, got {type(projection).__name__}")
    if not projection:
        return document

    include_id = bool(projection.get("_id", 1))
    fields = {name: bool(flag) for name, flag in projection.items() if name != "_id"}
    if fields and len(set(fields.values())) > 1:
        raise StoreError("cannot mix inclusion and exclusion in a projection")

    if fields and next(iter(fields.values())):
        result = {name: value for name, value in document.items() if fields.get(name)}
        if include_id and "_id" in document:
            result = {"_id": document["_id"], **result}
        return result

    excluded = set(fields)
    if not include_id:
        excluded.add("_id")
    return {name: value for name, value in document.items() if name not in excluded}


class InMemoryDocumentStore:
    """In-memory implementation of the DocumentStore protocol.

    Example:
        store = InMemoryDocumentStore()
        store.insert_many("shop", "orders", [{"n": 1}, {"n": 2}])
        cursor = store.find("shop", "orders", {"n": {"$gt": 1}})
    """

    def __init__(self) -> None:
        self._databases: dict[str, dict[str, MemoryCollection]] = {}
        self._lock = threading.Lock()
        self._closed = False
        # Cursors leave this list when closed
        self.open_cursors: list[MemoryCursor] = []
        self.cursors_opened = 0

    def _check_open(self) -> None:
        if self._closed:
            raise StoreError("store is closed")

    def _get(self, database: str, collection: str, create: bool = False) -> MemoryCollection | None:
        collections = self._databases.get(database)
        if collections is None:
            if not create:
                return None
            collections = self._databases.setdefault(database, {})
        coll = collections.get(collection)
        if coll is None and create:
            coll = collections[collection] = MemoryCollection(name=collection)
        return coll

    def _select(self, database: str, collection: str, filter: Any) -> list[dict[str, Any]]:
        query = _as_document(filter)
        coll = self._get(database, collection)
        if coll is None:
            return []
        return [doc for doc in coll.documents if _matches(doc, query)]

    def _release(self, cursor: MemoryCursor) -> None:
        with self._lock:
            self.open_cursors.remove(cursor)

    def collection_names(self, database: str) -> list[str]:
        """Names of the collections that exist in a database."""
        return sorted(self._databases.get(database, {}))

    def find(
        self,
        database: str,
        collection: str,
        filter: Any,
        *,
        limit: int | None = None,
        sort: list[tuple[str, int]] | None = None,
        projection: Any = None,
    ) -> MemoryCursor:
        with self._lock:
            self._check_open()
            matched = self._select(database, collection, filter)
            if sort:
                matched = _sorted(matched, sort)
            if limit:
                matched = matched[:limit]
            try:
                records = [bson.encode(_project(doc, projection)) for doc in matched]
            except (BSONError, OverflowError) as e:
                raise StoreError(f"cannot encode result: {e}") from e

        cursor = MemoryCursor(records, on_close=self._release)
        with self._lock:
            self.open_cursors.append(cursor)
            self.cursors_opened += 1
        logger.debug("memory_find", database=database, collection=collection, matched=len(records))
        return cursor

    def find_one(
        self,
        database: str,
        collection: str,
        filter: Any,
        *,
        sort: list[tuple[str, int]] | None = None,
    ) -> dict[str, Any] | None:
        with self._lock:
            self._check_open()
            matched = self._select(database, collection, filter)
            if sort:
                matched = _sorted(matched, sort)
            return copy.deepcopy(matched[0]) if matched else None

    def insert_one(self, database: str, collection: str, document: Any) -> Any:
        return self.insert_many(database, collection, [document])[0]

    def insert_many(self, database: str, collection: str, documents: Sequence[Any]) -> list[Any]:
        if not documents:
            raise StoreError("documents must be a non-empty list")
        with self._lock:
            self._check_open()
            coll = self._get(database, collection, create=True)
            assert coll is not None
            existing = coll.ids()
            staged = []
            for document in documents:
                doc = copy.deepcopy(_as_document(document))
                doc.setdefault("_id", ObjectId())
                if doc["_id"] in existing:
                    raise StoreError(f"duplicate key: _id {doc['_id']!r}")
                existing.add(doc["_id"])
                staged.append({"_id": doc.pop("_id"), **doc})
            coll.documents.extend(staged)
        return [doc["_id"] for doc in staged]

    def _delete(self, database: str, collection: str, filter: Any, many: bool) -> int:
        with self._lock:
            self._check_open()
            matched = self._select(database, collection, filter)
            if not many:
                matched = matched[:1]
            if not matched:
                return 0
            coll = self._get(database, collection)
            assert coll is not None
            doomed = {id(doc) for doc in matched}
            coll.documents = [doc for doc in coll.documents if id(doc) not in doomed]
            return len(matched)

    def delete_one(
        self,
        database: str,
        collection: str,
        filter: Any,
        *,
        hint: list[tuple[str, int]] | None = None,
    ) -> int:
        return self._delete(database, collection, filter, many=False)

    def delete_many(
        self,
        database: str,
        collection: str,
        filter: Any,
        *,
        hint: list[tuple[str, int]] | None = None,
    ) -> int:
        return self._delete(database, collection, filter, many=True)

    def update_many(self, database: str, collection: str, filter: Any, update: Any) -> UpdateCounts:
        spec = _as_document(update)
        if not spec or not all(key.startswith("$") for key in spec):
            raise StoreError("update only works with $ operators")
        unsupported = set(spec) - {"$set", "$unset", "$inc"}
        if unsupported:
            raise StoreError(f"unsupported update operators: {sorted(unsupported)}")

        with self._lock:
            self._check_open()
            matched = self._select(database, collection, filter)
            modified = 0
            for doc in matched:
                before = copy.deepcopy(doc)
                for name, value in spec.get("$set", {}).items():
                    doc[name] = copy.deepcopy(value)
                for name in spec.get("$unset", {}):
                    doc.pop(name, None)
                for name, amount in spec.get("$inc", {}).items():
                    doc[name] = doc.get(name, 0) + amount
                if doc != before:
                    modified += 1
        return UpdateCounts(matched=len(matched), modified=modified)

    def drop_collection(self, database: str, collection: str) -> None:
        with self._lock:
            self._check_open()
            self._databases.get(database, {}).pop(collection, None)

    def close(self) -> None:
        self._closed = True
