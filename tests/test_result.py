"""Tests for swapkeeper.core.result — Ok / Err values."""

from __future__ import annotations

import dataclasses

import pytest
from hypothesis import given
from hypothesis import strategies as st

from swapkeeper.core.result import Err, Ok, unwrap


class TestOkBasics:
    def test_ok_holds_value(self) -> None:
        assert Ok(42).value == 42

    def test_ok_is_frozen(self) -> None:
        ok = Ok(42)
        with pytest.raises(dataclasses.FrozenInstanceError):
            ok.value = 99  # type: ignore[misc]

    def test_pattern_match_ok(self) -> None:
        match Ok(42):
            case Ok(v):
                assert v == 42
            case _:
                pytest.fail("Should match Ok")


class TestErrBasics:
    def test_err_holds_error(self) -> None:
        assert Err("fail").error == "fail"

    def test_pattern_match_err(self) -> None:
        match Err("fail"):
            case Err(e):
                assert e == "fail"
            case _:
                pytest.fail("Should match Err")

    def test_err_is_not_ok(self) -> None:
        assert not isinstance(Err("fail"), Ok)


def _positive(x: int) -> Ok[int] | Err[str]:
    if x <= 0:
        return Err("not positive")
    return Ok(x)


class TestCombinators:
    def test_ok_map(self) -> None:
        assert Ok(5).map(lambda x: x * 2) == Ok(10)

    def test_err_map_passthrough(self) -> None:
        assert Err("fail").map(lambda x: x * 2) == Err("fail")

    def test_and_then(self) -> None:
        assert Ok(5).and_then(_positive) == Ok(5)
        assert Ok(0).and_then(_positive) == Err("not positive")
        assert Err("e").and_then(_positive) == Err("e")


class TestUnwrap:
    def test_ok_unwrap(self) -> None:
        assert Ok(42).unwrap() == 42

    def test_err_unwrap_raises(self) -> None:
        with pytest.raises(RuntimeError, match="Called unwrap on Err"):
            Err("fail").unwrap()

    def test_free_unwrap(self) -> None:
        assert unwrap(Ok(1)) == 1
        with pytest.raises(RuntimeError, match="unwrap on Err"):
            unwrap(Err("fail"))

    def test_free_unwrap_rejects_other(self) -> None:
        with pytest.raises(TypeError):
            unwrap(42)  # type: ignore[arg-type]


class TestProperties:
    @given(st.integers())
    def test_map_identity(self, x: int) -> None:
        assert Ok(x).map(lambda v: v) == Ok(x)
