"""Outbound adapters - implementations of the DocumentStore port.

PyMongoDocumentStore talks to a real server; InMemoryDocumentStore is an
in-process stand-in for tests and local development.
"""

from mongo_query.adapters.outbound.memory_store import InMemoryDocumentStore, MemoryCursor
from mongo_query.adapters.outbound.pymongo_store import PyMongoCursor, PyMongoDocumentStore

__all__ = [
    "InMemoryDocumentStore",
    "MemoryCursor",
    "PyMongoCursor",
    "PyMongoDocumentStore",
]
