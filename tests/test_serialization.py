"""Tests for swapkeeper.core.serialization — canonical bytes and content hashing."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from hypothesis import given
from hypothesis import strategies as st

from swapkeeper.core.result import Err, Ok, unwrap
from swapkeeper.core.serialization import canonical_bytes, content_hash
from swapkeeper.core.types import Address, UtcDatetime


class _Colour(Enum):
    RED = "Red"


@dataclass(frozen=True)
class _Pair:
    b: int
    a: str


class TestCanonicalBytesBasic:
    def test_none(self) -> None:
        assert unwrap(canonical_bytes(None)) == b"null"

    def test_bool_not_int(self) -> None:
        assert unwrap(canonical_bytes(True)) == b"true"

    def test_int(self) -> None:
        assert unwrap(canonical_bytes(42)) == b"42"

    def test_tuple(self) -> None:
        assert unwrap(canonical_bytes((1, 2, 3))) == b"[1,2,3]"

    def test_enum_value(self) -> None:
        assert unwrap(canonical_bytes(_Colour.RED)) == b'"Red"'

    def test_address_as_string(self) -> None:
        assert unwrap(canonical_bytes(Address(value="alice"))) == b'"alice"'

    def test_utc_datetime_iso(self) -> None:
        ts = UtcDatetime(value=datetime(2025, 6, 15, 10, 0, tzinfo=UTC))
        assert unwrap(canonical_bytes(ts)) == b'"2025-06-15T10:00:00+00:00"'


class TestCanonicalBytesStructures:
    def test_dict_keys_sorted(self) -> None:
        assert unwrap(canonical_bytes({"b": 1, "a": 2})) == b'{"a":2,"b":1}'

    def test_dataclass_tagged_and_sorted(self) -> None:
        decoded = json.loads(unwrap(canonical_bytes(_Pair(b=1, a="x"))))
        assert decoded == {"_type": "_Pair", "a": "x", "b": 1}

    def test_naive_datetime_is_err(self) -> None:
        assert isinstance(canonical_bytes(datetime(2025, 1, 1)), Err)

    def test_unsupported_type_is_err(self) -> None:
        result = canonical_bytes(object())
        assert isinstance(result, Err)
        assert "Unsupported type" in result.error


class TestContentHash:
    def test_hex_digest(self) -> None:
        h = unwrap(content_hash({"a": 1}))
        assert len(h) == 64
        int(h, 16)

    def test_key_order_irrelevant(self) -> None:
        assert content_hash({"a": 1, "b": 2}) == content_hash({"b": 2, "a": 1})

    @given(st.dictionaries(st.text(max_size=5), st.integers(), max_size=5))
    def test_deterministic(self, d: dict[str, int]) -> None:
        first = content_hash(d)
        assert isinstance(first, Ok)
        assert first == content_hash(dict(reversed(list(d.items()))))
