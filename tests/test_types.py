"""Tests for swapkeeper.core.types — UtcDatetime, Address, TokenAmount."""

from __future__ import annotations

import dataclasses
from datetime import UTC, datetime, timedelta, timezone

import pytest
from hypothesis import given
from hypothesis import strategies as st

from swapkeeper.core.result import Err, Ok, unwrap
from swapkeeper.core.types import Address, TokenAmount, UtcDatetime


class TestUtcDatetime:
    def test_rejects_naive(self) -> None:
        with pytest.raises(TypeError):
            UtcDatetime(value=datetime(2025, 1, 1))

    def test_parse_naive_is_err(self) -> None:
        assert isinstance(UtcDatetime.parse(datetime(2025, 1, 1)), Err)

    def test_parse_converts_to_utc(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        parsed = unwrap(UtcDatetime.parse(datetime(2025, 1, 1, 12, tzinfo=plus_two)))
        assert parsed.value == datetime(2025, 1, 1, 10, tzinfo=UTC)

    def test_now_is_aware(self) -> None:
        assert UtcDatetime.now().value.tzinfo is not None


class TestAddress:
    def test_parse_valid(self) -> None:
        assert Address.parse("alice") == Ok(Address(value="alice"))

    def test_parse_empty(self) -> None:
        assert isinstance(Address.parse(""), Err)

    def test_parse_non_string(self) -> None:
        assert isinstance(Address.parse(42), Err)  # type: ignore[arg-type]

    def test_constructor_rejects_empty(self) -> None:
        with pytest.raises(TypeError):
            Address(value="")

    def test_str(self) -> None:
        assert str(Address(value="bob")) == "bob"

    def test_is_frozen(self) -> None:
        a = Address(value="bob")
        with pytest.raises(dataclasses.FrozenInstanceError):
            a.value = "eve"  # type: ignore[misc]


class TestTokenAmount:
    def test_zero_allowed(self) -> None:
        assert unwrap(TokenAmount.parse(0)).value == 0

    def test_negative_rejected(self) -> None:
        assert isinstance(TokenAmount.parse(-1), Err)

    def test_bool_rejected(self) -> None:
        assert isinstance(TokenAmount.parse(True), Err)

    def test_float_rejected(self) -> None:
        assert isinstance(TokenAmount.parse(1.5), Err)  # type: ignore[arg-type]

    def test_constructor_rejects_negative(self) -> None:
        with pytest.raises(TypeError):
            TokenAmount(value=-3)

    @given(st.integers(min_value=0))
    def test_non_negative_ints_parse(self, n: int) -> None:
        assert unwrap(TokenAmount.parse(n)).value == n

    @given(st.integers(max_value=-1))
    def test_negative_ints_fail(self, n: int) -> None:
        assert isinstance(TokenAmount.parse(n), Err)
