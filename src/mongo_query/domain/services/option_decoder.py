"""Option decoder: free-form options value to QueryOptions.

Decoding is strict. Any key outside the schema, any value of the wrong
type and any malformed nesting is rejected with a DecodeError; a
partially decoded value is never returned.

Accepted shape::

    {
        "limit": 10,
        "sort": [{"field": "age", "asc": False}, {"field": "name", "asc": True}],
    }

Both keys are optional. ``None`` and ``{}`` decode to ``limit=0, sort=[]``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from mongo_query.domain.value_objects import QueryOptions
from mongo_query.infrastructure.logging import get_logger
from mongo_query.ports.inbound import DecodeError, DecodeErrorKind


logger = get_logger(__name__)


# pydantic error types mapped onto the decode taxonomy; anything not listed
# is treated as a malformed structure
_ERROR_KINDS: dict[str, DecodeErrorKind] = {
    "extra_forbidden": DecodeErrorKind.UNKNOWN_FIELD,
    "int_type": DecodeErrorKind.TYPE_MISMATCH,
    "int_parsing": DecodeErrorKind.TYPE_MISMATCH,
    "int_from_float": DecodeErrorKind.TYPE_MISMATCH,
    "bool_type": DecodeErrorKind.TYPE_MISMATCH,
    "bool_parsing": DecodeErrorKind.TYPE_MISMATCH,
    "string_type": DecodeErrorKind.TYPE_MISMATCH,
    "list_type": DecodeErrorKind.TYPE_MISMATCH,
}


def _format_location(loc: tuple[int | str, ...]) -> str:
    return ".".join(str(part) for part in loc)


class OptionDecoder:
    """Decodes caller-supplied options into a typed QueryOptions."""

    def decode(self, raw: Any) -> QueryOptions:
        """Decode a free-form options value.

        Args:
            raw: Mapping (or None) supplied by the caller.

        Returns:
            The decoded options.

        Raises:
            DecodeError: On an unknown field, a type mismatch, or a
                malformed structure.
        """
        if raw is None:
            return QueryOptions()

        if not isinstance(raw, Mapping):
            raise DecodeError(
                DecodeErrorKind.MALFORMED,
                f"options must be a mapping, got {type(raw).__name__}",
            )

        try:
            options = QueryOptions.model_validate(dict(raw))
        except ValidationError as e:
            error = self._to_decode_error(e)
            logger.warning(
                "options_rejected",
                kind=error.kind.value,
                location=error.location,
                reason=error.reason,
            )
            raise error from e

        logger.debug(
            "options_decoded",
            limit=options.limit,
            sort=[(key.field, key.asc) for key in options.sort],
        )
        return options

    @staticmethod
    def _to_decode_error(exc: ValidationError) -> DecodeError:
        """Report the first validation failure as a DecodeError."""
        first = exc.errors()[0]
        kind = _ERROR_KINDS.get(first["type"], DecodeErrorKind.MALFORMED)
        return DecodeError(kind, first["msg"], _format_location(first["loc"]))


def decode_options(raw: Any) -> QueryOptions:
    """Module-level shorthand for OptionDecoder().decode(raw)."""
    return OptionDecoder().decode(raw)
