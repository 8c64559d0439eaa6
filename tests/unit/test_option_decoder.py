"""Unit tests for the option decoder."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any

import pytest

from mongo_query.domain.services import OptionDecoder, decode_options
from mongo_query.domain.value_objects import MAX_LIMIT, QueryOptions, SortDirection, SortKey
from mongo_query.ports.inbound import DecodeError, DecodeErrorKind, QueryError


@pytest.fixture
def decoder() -> OptionDecoder:
    return OptionDecoder()


@pytest.mark.unit
class TestDecodeValid:
    """Payloads that decode successfully."""

    def test_empty_mapping_gives_defaults(self, decoder: OptionDecoder) -> None:
        options = decoder.decode({})

        assert options.limit == 0
        assert options.sort == []

    def test_none_gives_defaults(self, decoder: OptionDecoder) -> None:
        assert decoder.decode(None) == QueryOptions()

    def test_limit_only(self, decoder: OptionDecoder) -> None:
        assert decoder.decode({"limit": 25}).limit == 25

    def test_largest_int64_limit(self, decoder: OptionDecoder) -> None:
        assert decoder.decode({"limit": MAX_LIMIT}).limit == 2**63 - 1

    def test_sort_order_is_preserved(self, decoder: OptionDecoder) -> None:
        options = decoder.decode(
            {
                "sort": [
                    {"field": "age", "asc": False},
                    {"field": "name", "asc": True},
                    {"field": "city", "asc": False},
                ]
            }
        )

        assert [key.field for key in options.sort] == ["age", "name", "city"]
        assert [key.direction for key in options.sort] == [
            SortDirection.DESCENDING,
            SortDirection.ASCENDING,
            SortDirection.DESCENDING,
        ]

    def test_repeated_sort_field_kept(self, decoder: OptionDecoder) -> None:
        options = decoder.decode(
            {"sort": [{"field": "a", "asc": True}, {"field": "a", "asc": False}]}
        )

        assert options.sort == [SortKey(field="a", asc=True), SortKey(field="a", asc=False)]

    def test_any_mapping_type_accepted(self, decoder: OptionDecoder) -> None:
        options = decoder.decode(MappingProxyType({"limit": 3}))

        assert options.limit == 3

    def test_module_shorthand(self) -> None:
        assert decode_options({"limit": 7}).limit == 7


@pytest.mark.unit
class TestDecodeErrors:
    """Payloads that must be rejected."""

    def test_unknown_top_level_key(self, decoder: OptionDecoder) -> None:
        with pytest.raises(DecodeError) as exc_info:
            decoder.decode({"limit": 5, "bogus": True})

        assert exc_info.value.kind is DecodeErrorKind.UNKNOWN_FIELD
        assert exc_info.value.location == "bogus"

    def test_unknown_key_in_sort_entry(self, decoder: OptionDecoder) -> None:
        with pytest.raises(DecodeError) as exc_info:
            decoder.decode({"sort": [{"field": "a", "asc": True, "nulls": "first"}]})

        assert exc_info.value.kind is DecodeErrorKind.UNKNOWN_FIELD
        assert exc_info.value.location == "sort.0.nulls"

    @pytest.mark.parametrize(
        "payload",
        [
            {"limit": "5"},
            {"limit": 5.0},
            {"limit": True},
            {"sort": [{"field": "a", "asc": "yes"}]},
            {"sort": [{"field": "a", "asc": 1}]},
            {"sort": [{"field": 42, "asc": True}]},
            {"sort": "age"},
        ],
    )
    def test_type_mismatch(self, decoder: OptionDecoder, payload: dict[str, Any]) -> None:
        with pytest.raises(DecodeError) as exc_info:
            decoder.decode(payload)

        assert exc_info.value.kind is DecodeErrorKind.TYPE_MISMATCH

    @pytest.mark.parametrize(
        "payload",
        [
            {"sort": [5]},
            {"sort": [{"field": "a"}]},
            {"limit": -1},
            {"limit": MAX_LIMIT + 1},
            {"limit": 2**70},
        ],
    )
    def test_malformed_structure(self, decoder: OptionDecoder, payload: dict[str, Any]) -> None:
        with pytest.raises(DecodeError) as exc_info:
            decoder.decode(payload)

        assert exc_info.value.kind is DecodeErrorKind.MALFORMED

    @pytest.mark.parametrize("payload", [[], "limit=5", 10])
    def test_non_mapping_payload(self, decoder: OptionDecoder, payload: Any) -> None:
        with pytest.raises(DecodeError) as exc_info:
            decoder.decode(payload)

        assert exc_info.value.kind is DecodeErrorKind.MALFORMED

    @pytest.mark.parametrize(
        ("payload", "location"),
        [
            ({"Limit": 5}, "Limit"),
            ({"SORT": []}, "SORT"),
            ({"sort": [{"Field": "a", "asc": True}]}, "sort.0.Field"),
        ],
    )
    def test_keys_are_case_sensitive(
        self, decoder: OptionDecoder, payload: dict[str, Any], location: str
    ) -> None:
        with pytest.raises(DecodeError) as exc_info:
            decoder.decode(payload)

        assert exc_info.value.kind is DecodeErrorKind.UNKNOWN_FIELD
        assert exc_info.value.location == location

    def test_decode_error_is_query_error(self, decoder: OptionDecoder) -> None:
        with pytest.raises(QueryError):
            decoder.decode({"limt": 5})

    def test_message_names_location(self, decoder: OptionDecoder) -> None:
        with pytest.raises(DecodeError, match="limt"):
            decoder.decode({"limt": 5})
