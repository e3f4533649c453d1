"""Workflow data types for hosting escrow trades on Temporal.

Commands go in, outputs come out. All types are
@final @dataclass(frozen=True, slots=True) and carry only primitives,
tuples and enums so the data converter can round-trip them.
__post_init__ rejects shapes that cannot describe a real command.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import final

from swapkeeper.ledger.assets import Role
from swapkeeper.trade.state import TradeState

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class CommandKind(Enum):
    """One per public controller operation. Exhaustive."""

    CONFIGURE_PARTICIPANT = "ConfigureParticipant"
    CLOSE_SETUP = "CloseSetup"
    DEPOSIT_ASSETS = "DepositAssets"
    WITHDRAW_ASSETS = "WithdrawAssets"
    CANCEL_TRADE = "CancelTrade"
    DEPOSIT_NATIVE = "DepositNative"
    WITHDRAW_NATIVE = "WithdrawNative"


_AMOUNT_KINDS: frozenset[CommandKind] = frozenset({
    CommandKind.DEPOSIT_NATIVE,
    CommandKind.WITHDRAW_NATIVE,
})


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class ParticipantTerms:
    """Arguments of configure_participant, minus the caller."""

    role: Role
    address: str
    nft_registries: tuple[str, ...] = ()
    item_ids: tuple[int, ...] = ()
    ft_registries: tuple[str, ...] = ()
    quantities: tuple[int, ...] = ()


@final
@dataclass(frozen=True, slots=True)
class TradeCommand:
    """A single controller operation addressed to one trade.

    ``terms`` is present exactly for CONFIGURE_PARTICIPANT; ``amount`` is
    only read for the native deposit and withdrawal kinds.
    """

    trade_id: str
    kind: CommandKind
    caller: str
    terms: ParticipantTerms | None = None
    amount: int = 0

    def __post_init__(self) -> None:
        needs_terms = self.kind is CommandKind.CONFIGURE_PARTICIPANT
        if needs_terms != (self.terms is not None):
            raise TypeError(
                f"TradeCommand {self.kind.value}: terms must be "
                f"{'given' if needs_terms else 'omitted'}"
            )
        if self.amount and self.kind not in _AMOUNT_KINDS:
            raise TypeError(f"TradeCommand {self.kind.value} takes no amount")


@final
@dataclass(frozen=True, slots=True)
class CommandOutput:
    """Outcome of one command: the new state, or the error that aborted it."""

    trade_id: str
    kind: CommandKind
    state: TradeState | None = None
    error_code: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if (self.state is None) == (self.error is None):
            raise TypeError(
                "CommandOutput must have exactly one of state or error"
            )

    @property
    def ok(self) -> bool:
        return self.error is None


# ---------------------------------------------------------------------------
# Workflow input / output
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class EscrowInput:
    """Workflow entry point. trade_id doubles as the Temporal workflow id."""

    trade_id: str
    configurator: str
    command_timeout_s: int = 60

    def __post_init__(self) -> None:
        if not self.trade_id:
            raise TypeError("EscrowInput.trade_id must be non-empty")
        if self.command_timeout_s <= 0:
            raise TypeError(
                f"EscrowInput.command_timeout_s must be > 0, got {self.command_timeout_s}"
            )


@final
@dataclass(frozen=True, slots=True)
class OpenTradeOutput:
    """Output of the open_trade activity."""

    trade_id: str
    state: TradeState | None = None
    error_code: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if (self.state is None) == (self.error is None):
            raise TypeError(
                "OpenTradeOutput must have exactly one of state or error"
            )


@final
@dataclass(frozen=True, slots=True)
class ReleaseOutput:
    """Output of the release_trade activity; a kept trade carries the reason."""

    trade_id: str
    released: bool
    error_code: str | None = None
    error: str | None = None


@final
@dataclass(frozen=True, slots=True)
class EscrowResult:
    """Returned once the workflow is closed and its command queue is drained."""

    trade_id: str
    final_state: TradeState | None
    outputs: tuple[CommandOutput, ...] = ()
    released: bool = False
    error_code: str | None = None
    error: str | None = None
