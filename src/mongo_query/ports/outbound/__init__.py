"""Outbound ports - interfaces for external dependencies.

Outbound ports define contracts for the document store the query
layer dispatches to.
"""

from mongo_query.ports.outbound.document_store import (
    Cursor,
    DocumentStore,
    StoreError,
    UpdateCounts,
)

__all__ = [
    "Cursor",
    "DocumentStore",
    "StoreError",
    "UpdateCounts",
]
