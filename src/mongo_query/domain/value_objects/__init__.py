"""Value objects for the query layer."""

from mongo_query.domain.value_objects.compiled_query import CompiledQuery, SortSpec
from mongo_query.domain.value_objects.query_options import (
    MAX_LIMIT,
    QueryOptions,
    SortDirection,
    SortKey,
)

__all__ = [
    "CompiledQuery",
    "MAX_LIMIT",
    "QueryOptions",
    "SortDirection",
    "SortKey",
    "SortSpec",
]
