"""Document Store port for the backing database.

This outbound port defines the contract the query layer needs from a
document store. The store owns indexing, durability and query planning;
the query layer only dispatches finds and simple writes.

Implementations must:
- Deliver find results through a Cursor that yields raw records
  (BSON bytes, RawBSONDocument, or plain mappings) so decoding stays
  with the caller
- Translate every driver failure into StoreError
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, Iterator, Protocol, Sequence


class StoreError(Exception):
    """Raised when the document store rejects or fails an operation."""


@dataclass(frozen=True)
class UpdateCounts:
    """Outcome of an update_many call."""

    matched: int
    modified: int


class Cursor(Protocol):
    """Server-side handle over a find's result stream.

    Iteration may block for network round trips and may raise StoreError
    at any point. close() must be safe to call more than once.
    """

    def __iter__(self) -> Iterator[Any]:
        ...

    def close(self) -> None:
        ...


class DocumentStore(Protocol):
    """Protocol for document store operations.

    Thread Safety:
        Implementations may be shared between threads. Connection pooling
        is the implementation's concern.
    """

    @abstractmethod
    def find(
        self,
        database: str,
        collection: str,
        filter: Any,
        *,
        limit: int | None = None,
        sort: list[tuple[str, int]] | None = None,
        projection: Any = None,
    ) -> Cursor:
        """Open a cursor over matching documents.

        Args:
            database: Database name.
            collection: Collection name.
            filter: Encoded filter document.
            limit: Document limit, or None for no limit clause.
            sort: Ordered (field, direction) pairs, or None.
            projection: Projection document, or None for all fields.

        Raises:
            StoreError: If the cursor cannot be opened.
        """
        ...

    @abstractmethod
    def find_one(
        self,
        database: str,
        collection: str,
        filter: Any,
        *,
        sort: list[tuple[str, int]] | None = None,
    ) -> dict[str, Any] | None:
        """Return the first matching document, or None."""
        ...

    @abstractmethod
    def insert_one(self, database: str, collection: str, document: Any) -> Any:
        """Insert a document and return its _id."""
        ...

    @abstractmethod
    def insert_many(self, database: str, collection: str, documents: Sequence[Any]) -> list[Any]:
        """Insert documents and return their _ids in order."""
        ...

    @abstractmethod
    def delete_one(
        self,
        database: str,
        collection: str,
        filter: Any,
        *,
        hint: list[tuple[str, int]] | None = None,
    ) -> int:
        """Delete at most one matching document and return the deleted count."""
        ...

    @abstractmethod
    def delete_many(
        self,
        database: str,
        collection: str,
        filter: Any,
        *,
        hint: list[tuple[str, int]] | None = None,
    ) -> int:
        """Delete all matching documents and return the deleted count."""
        ...

    @abstractmethod
    def update_many(self, database: str, collection: str, filter: Any, update: Any) -> UpdateCounts:
        """Apply an update to all matching documents."""
        ...

    @abstractmethod
    def drop_collection(self, database: str, collection: str) -> None:
        """Drop a collection. Dropping a missing collection is not an error."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the underlying connection."""
        ...
