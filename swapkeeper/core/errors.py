"""Error value hierarchy — escrow operations return these, they never raise them.

Every error is a frozen dataclass value carried inside Err. Base class
SwapkeeperError, one @final subclass per failure family of the escrow.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import final

from swapkeeper.core.types import UtcDatetime


@dataclass(frozen=True, slots=True)
class SwapkeeperError:
    """Base error value. NOT @final — has subclasses."""

    message: str
    code: str
    timestamp: UtcDatetime
    source: str  # "module.function" that produced this error

    def with_context(self, context: str) -> SwapkeeperError:
        """Return a copy with context prepended to message."""
        return replace(self, message=f"{context}: {self.message}")

    def to_dict(self) -> dict[str, object]:
        return {
            "message": self.message,
            "code": self.code,
            "timestamp": self.timestamp.value.isoformat(),
            "source": self.source,
        }


@final
@dataclass(frozen=True, slots=True)
class AuthorizationError(SwapkeeperError):
    """Caller lacks the capability the operation requires."""

    caller: str
    required: str  # "configurator" | "trader" | "configurator-or-trader"

    def to_dict(self) -> dict[str, object]:
        return {**SwapkeeperError.to_dict(self), "caller": self.caller, "required": self.required}


@final
@dataclass(frozen=True, slots=True)
class StateError(SwapkeeperError):
    """Operation is not valid in the current trade state."""

    state: str
    operation: str

    def to_dict(self) -> dict[str, object]:
        return {**SwapkeeperError.to_dict(self), "state": self.state, "operation": self.operation}


@final
@dataclass(frozen=True, slots=True)
class LengthMismatchError(SwapkeeperError):
    """Two paired configuration lists differ in length."""

    left: str
    right: str
    left_len: int
    right_len: int

    def to_dict(self) -> dict[str, object]:
        return {
            **SwapkeeperError.to_dict(self),
            "left": self.left,
            "right": self.right,
            "left_len": self.left_len,
            "right_len": self.right_len,
        }


@final
@dataclass(frozen=True, slots=True)
class InsufficientBalanceError(SwapkeeperError):
    """Native withdrawal exceeds the recorded balance."""

    address: str
    requested: int
    available: int

    def to_dict(self) -> dict[str, object]:
        return {
            **SwapkeeperError.to_dict(self),
            "address": self.address,
            "requested": self.requested,
            "available": self.available,
        }


@final
@dataclass(frozen=True, slots=True)
class ExternalCallFailure(SwapkeeperError):
    """An asset registry rejected a call or answered unexpectedly."""

    registry: str
    call: str
    reason: str

    def to_dict(self) -> dict[str, object]:
        return {
            **SwapkeeperError.to_dict(self),
            "registry": self.registry,
            "call": self.call,
            "reason": self.reason,
        }


@final
@dataclass(frozen=True, slots=True)
class FieldViolation:
    """Describes a single field validation failure."""

    path: str  # e.g. "quantities[2]"
    constraint: str  # e.g. "must be >= 0"
    actual_value: str


@final
@dataclass(frozen=True, slots=True)
class ValidationError(SwapkeeperError):
    """One or more inputs are malformed."""

    fields: tuple[FieldViolation, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            **SwapkeeperError.to_dict(self),
            "fields": [
                {"path": f.path, "constraint": f.constraint, "actual_value": f.actual_value}
                for f in self.fields
            ],
        }


@final
@dataclass(frozen=True, slots=True)
class IllegalTransitionError(SwapkeeperError):
    """State transition is not in the transition table."""

    from_state: str
    to_state: str

    def to_dict(self) -> dict[str, object]:
        return {
            **SwapkeeperError.to_dict(self),
            "from_state": self.from_state,
            "to_state": self.to_state,
        }


@final
@dataclass(frozen=True, slots=True)
class PersistenceError(SwapkeeperError):
    """Event bus or storage operation failed."""

    operation: str

    def to_dict(self) -> dict[str, object]:
        return {**SwapkeeperError.to_dict(self), "operation": self.operation}
