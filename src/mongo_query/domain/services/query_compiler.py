"""Query compiler: QueryOptions plus filter and projection to CompiledQuery.

Compilation is a pure, total transformation:

- ``limit == 0`` produces no limit clause at all; ``limit == N`` produces
  exactly N.
- Sort keys are emitted one per entry, in the order given. Keys are never
  reordered or deduplicated; a repeated field is passed to the store as-is.
- Filter and projection are not interpreted. Shape errors surface from the
  store at execution time.
"""

from __future__ import annotations

from typing import Any

from mongo_query.domain.value_objects import CompiledQuery, QueryOptions, SortSpec


class QueryCompiler:
    """Compiles decoded options into a store-facing query."""

    def compile(
        self,
        filter: Any,
        options: QueryOptions,
        projection: Any = None,
    ) -> CompiledQuery:
        """Compile a find.

        Args:
            filter: Caller predicate, passed through.
            options: Decoded query options.
            projection: Caller projection, passed through.

        Returns:
            The compiled query.
        """
        return CompiledQuery(
            filter=filter,
            limit=options.limit if options.limit != 0 else None,
            sort_spec=self._compile_sort(options),
            projection=projection,
        )

    @staticmethod
    def _compile_sort(options: QueryOptions) -> SortSpec | None:
        if not options.sort:
            return None
        return tuple((key.field, key.direction) for key in options.sort)


def compile_query(filter: Any, options: QueryOptions, projection: Any = None) -> CompiledQuery:
    """Module-level shorthand for QueryCompiler().compile(...)."""
    return QueryCompiler().compile(filter, options, projection)
