"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Outbound adapters: document stores backing the query pipeline
"""

from mongo_query.adapters.outbound import (
    InMemoryDocumentStore,
    PyMongoDocumentStore,
)

__all__ = [
    # Outbound adapters
    "InMemoryDocumentStore",
    "PyMongoDocumentStore",
]
