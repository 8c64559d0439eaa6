"""Application layer for the query pipeline.

Exports:
    - DocumentClient: Query pipeline and pass-through operations
    - CursorMaterializer: Executes compiled finds into lists of documents
    - decode_record: Decodes a single raw cursor record
"""

from mongo_query.application.client import DocumentClient
from mongo_query.application.cursor_materializer import CursorMaterializer, decode_record

__all__ = [
    "CursorMaterializer",
    "DocumentClient",
    "decode_record",
]
