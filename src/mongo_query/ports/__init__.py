"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts:
- Inbound ports: the query pipeline offered to callers and its errors
- Outbound ports: the document store the pipeline dispatches to

Adapters implement these ports with concrete functionality.
"""

from mongo_query.ports.inbound import (
    CompileError,
    DecodeError,
    DecodeErrorKind,
    ExecutionError,
    QueryError,
    ResultSet,
)
from mongo_query.ports.outbound import Cursor, DocumentStore, StoreError, UpdateCounts

__all__ = [
    # Inbound ports
    "CompileError",
    "DecodeError",
    "DecodeErrorKind",
    "ExecutionError",
    "QueryError",
    "ResultSet",
    # Outbound ports
    "Cursor",
    "DocumentStore",
    "StoreError",
    "UpdateCounts",
]
