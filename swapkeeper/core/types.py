"""Refined value types shared by every pillar: UtcDatetime, Address, TokenAmount."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import final

from swapkeeper.core.result import Err, Ok


@final
@dataclass(frozen=True, slots=True)
class UtcDatetime:
    """Timezone-aware UTC datetime. Naive datetimes are rejected."""

    value: datetime

    def __post_init__(self) -> None:
        if self.value.tzinfo is None:
            raise TypeError("UtcDatetime requires timezone-aware datetime, got naive")

    @staticmethod
    def parse(raw: datetime) -> Ok[UtcDatetime] | Err[str]:
        if raw.tzinfo is None:
            return Err("UtcDatetime requires timezone-aware datetime, got naive")
        return Ok(UtcDatetime(value=raw.astimezone(UTC)))

    @staticmethod
    def now() -> UtcDatetime:
        return UtcDatetime(value=datetime.now(tz=UTC))


@final
@dataclass(frozen=True, slots=True)
class Address:
    """Account identity on the asset registries. Non-empty, compared exactly."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value:
            raise TypeError(f"Address requires non-empty string, got {self.value!r}")

    @staticmethod
    def parse(raw: str) -> Ok[Address] | Err[str]:
        if not isinstance(raw, str):
            return Err(f"Address requires str, got {type(raw).__name__}")
        if not raw:
            return Err("Address requires non-empty string")
        return Ok(Address(value=raw))

    def __str__(self) -> str:
        return self.value


@final
@dataclass(frozen=True, slots=True)
class TokenAmount:
    """Integer quantity in a registry's smallest unit, constrained to be >= 0."""

    value: int

    def __post_init__(self) -> None:
        # bool is an int subclass; a flag is never a quantity
        if isinstance(self.value, bool) or not isinstance(self.value, int) or self.value < 0:
            raise TypeError(f"TokenAmount requires int >= 0, got {self.value!r}")

    @staticmethod
    def parse(raw: int) -> Ok[TokenAmount] | Err[str]:
        if isinstance(raw, bool) or not isinstance(raw, int):
            return Err(f"TokenAmount requires int, got {type(raw).__name__}")
        if raw < 0:
            return Err(f"TokenAmount requires >= 0, got {raw}")
        return Ok(TokenAmount(value=raw))
