"""Inbound ports - the contract offered to callers of the query pipeline.

Callers hand in untyped filter, options and projection values and get
back either a ResultSet or one of the errors below. No partial result is
ever returned alongside an error.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol

from mongo_query.domain.value_objects import CompiledQuery, QueryOptions


ResultSet = list[dict[str, Any]]
"""Materialized documents in store-delivery order."""


class QueryError(Exception):
    """Base class for query pipeline errors."""


class DecodeErrorKind(Enum):
    """Reasons an options payload can be rejected."""

    UNKNOWN_FIELD = "unknown_field"
    TYPE_MISMATCH = "type_mismatch"
    MALFORMED = "malformed"


class DecodeError(QueryError):
    """Raised when an options payload does not match the options schema."""

    def __init__(self, kind: DecodeErrorKind, reason: str, location: str = "") -> None:
        self.kind = kind
        self.reason = reason
        self.location = location
        where = f" at '{location}'" if location else ""
        super().__init__(f"{kind.value}{where}: {reason}")


class CompileError(QueryError):
    """Reserved for compile-time validation. Compilation is currently total."""


class ExecutionError(QueryError):
    """Raised when opening, streaming or decoding a cursor fails."""

    def __init__(
        self,
        message: str,
        database: str = "",
        collection: str = "",
    ) -> None:
        self.database = database
        self.collection = collection
        super().__init__(message)


class OptionDecoderPort(Protocol):
    """Turns a free-form options value into QueryOptions."""

    def decode(self, raw: Any) -> QueryOptions:
        """Raises DecodeError on any schema violation."""
        ...


class QueryCompilerPort(Protocol):
    """Turns options, filter and projection into a CompiledQuery."""

    def compile(self, filter: Any, options: QueryOptions, projection: Any = None) -> CompiledQuery:
        ...


__all__ = [
    "CompileError",
    "DecodeError",
    "DecodeErrorKind",
    "ExecutionError",
    "OptionDecoderPort",
    "QueryCompilerPort",
    "QueryError",
    "ResultSet",
]
