"""Trade lifecycle states, the transition table, and deposit-phase recomputation.

The deposit phase is never patched incrementally: after each deposit the
phase is re-derived from the two completeness flags by recompute_state().
Withdrawals can make a side incomplete again, so the open phases
(PendingOffer, ProposerDeposited, ReceiverDeposited) may move between each
other in any direction.
"""

from __future__ import annotations

from enum import Enum

from swapkeeper.core.errors import IllegalTransitionError
from swapkeeper.core.result import Err, Ok
from swapkeeper.core.types import UtcDatetime


class TradeState(Enum):
    ASSET_SETUP = "AssetSetup"
    PENDING_OFFER = "PendingOffer"
    PROPOSER_DEPOSITED = "ProposerDeposited"
    RECEIVER_DEPOSITED = "ReceiverDeposited"
    BOTH_DEPOSITED = "BothDeposited"
    ASSETS_TRANSFERRED = "AssetsTransferred"
    TRADE_CANCELLED = "TradeCancelled"


OPEN_FOR_DEPOSIT: frozenset[TradeState] = frozenset({
    TradeState.PENDING_OFFER,
    TradeState.PROPOSER_DEPOSITED,
    TradeState.RECEIVER_DEPOSITED,
})

TERMINAL: frozenset[TradeState] = frozenset({
    TradeState.ASSETS_TRANSFERRED,
    TradeState.TRADE_CANCELLED,
})

type TransitionTable = frozenset[tuple[TradeState, TradeState]]

TRADE_TRANSITIONS: TransitionTable = frozenset(
    {(TradeState.ASSET_SETUP, TradeState.PENDING_OFFER)}
    | {(a, b) for a in OPEN_FOR_DEPOSIT for b in OPEN_FOR_DEPOSIT if a is not b}
    | {(a, TradeState.BOTH_DEPOSITED) for a in OPEN_FOR_DEPOSIT}
    | {(TradeState.BOTH_DEPOSITED, TradeState.ASSETS_TRANSFERRED)}
    | {(a, TradeState.TRADE_CANCELLED) for a in TradeState if a not in TERMINAL}
)


def recompute_state(proposer_complete: bool, receiver_complete: bool) -> TradeState:
    """Deposit-phase state as a pure function of the two completeness flags."""
    if proposer_complete and receiver_complete:
        return TradeState.BOTH_DEPOSITED
    if proposer_complete:
        return TradeState.PROPOSER_DEPOSITED
    if receiver_complete:
        return TradeState.RECEIVER_DEPOSITED
    return TradeState.PENDING_OFFER


def check_transition(
    from_state: TradeState,
    to_state: TradeState,
    transitions: TransitionTable = TRADE_TRANSITIONS,
) -> Ok[None] | Err[IllegalTransitionError]:
    """Validate a state transition against a transition table."""
    if (from_state, to_state) in transitions:
        return Ok(None)
    return Err(IllegalTransitionError(
        message=f"Invalid transition: {from_state.value} -> {to_state.value}",
        code="ILLEGAL_TRANSITION",
        timestamp=UtcDatetime.now(),
        source="trade.state.check_transition",
        from_state=from_state.value,
        to_state=to_state.value,
    ))
