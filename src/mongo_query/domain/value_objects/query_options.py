"""Typed query options decoded from caller-supplied configuration.

The models are strict: unknown keys are rejected and no type coercion is
performed, so a typo such as ``{"limt": 5}`` or ``{"limit": "5"}`` fails
instead of silently producing an unbounded query.
"""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr


# Largest value a BSON int64 can carry
MAX_LIMIT = 2**63 - 1


class SortDirection(IntEnum):
    """Sort direction as understood by the store (matches pymongo constants)."""

    ASCENDING = 1
    DESCENDING = -1


class SortKey(BaseModel):
    """A single sort key.

    Attributes:
        field: Document field to sort on (dotted paths allowed).
        asc: True for ascending, False for descending.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    field: StrictStr
    asc: StrictBool

    @property
    def direction(self) -> SortDirection:
        return SortDirection.ASCENDING if self.asc else SortDirection.DESCENDING


class QueryOptions(BaseModel):
    """Decoded query options.

    Attributes:
        limit: Maximum number of documents; 0 means unbounded.
        sort: Sort keys in precedence order (first entry is primary).

    Example:
        >>> QueryOptions(limit=10, sort=[SortKey(field="age", asc=False)])
        QueryOptions(limit=10, sort=[SortKey(field='age', asc=False)])
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    limit: StrictInt = Field(default=0, ge=0, le=MAX_LIMIT)
    sort: list[SortKey] = Field(default_factory=list)
