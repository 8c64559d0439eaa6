"""Store-facing representation of a compiled find.

A CompiledQuery carries exactly the clauses the store should receive.
Absent clauses are ``None`` rather than neutral values: a limit of ``None``
means the find is unbounded, which is not the same as asking the store for
zero documents.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import bson
from bson.raw_bson import RawBSONDocument

from mongo_query.domain.value_objects.query_options import SortDirection


SortSpec = tuple[tuple[str, SortDirection], ...]


@dataclass(frozen=True, slots=True)
class CompiledQuery:
    """A find ready for dispatch.

    Attributes:
        filter: Caller-supplied predicate, kept as given until rendered.
        limit: Positive document limit, or None for no limit clause.
        sort_spec: Ordered (field, direction) pairs, or None for natural order.
        projection: Caller-supplied projection, or None for all fields.
    """

    filter: Any = None
    limit: int | None = None
    sort_spec: SortSpec | None = None
    projection: Any = None

    def __post_init__(self) -> None:
        if self.limit is not None and self.limit <= 0:
            raise ValueError(f"limit must be positive or None, got {self.limit}")

    def encoded_filter(self) -> bytes:
        """Serialize the filter to BSON.

        ``None`` encodes as the empty document. Already-encoded filters
        (BSON bytes or RawBSONDocument) are returned without re-encoding.

        Raises:
            bson.errors.InvalidDocument: If the filter cannot be encoded.
            TypeError: If the filter is not a document.
        """
        value = self.filter
        if value is None:
            return bson.encode({})
        if isinstance(value, RawBSONDocument):
            return bytes(value.raw)
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        if not isinstance(value, Mapping):
            raise TypeError(
                f"filter must be a document, got {type(value).__name__}"
            )
        return bson.encode(value)

    def sort_list(self) -> list[tuple[str, int]] | None:
        """Sort clause in the list-of-pairs form the driver accepts."""
        if self.sort_spec is None:
            return None
        return [(field, int(direction)) for field, direction in self.sort_spec]

    def render(self) -> tuple[RawBSONDocument, list[tuple[str, int]] | None, Any]:
        """Render the native (filter, sort, projection) triple.

        The filter is returned as a RawBSONDocument so the driver sends
        the encoded bytes verbatim.
        """
        return RawBSONDocument(self.encoded_filter()), self.sort_list(), self.projection
