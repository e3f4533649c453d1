"""Trade events and per-operation receipts.

A receipt is produced only for a committed operation and lists, in order,
every event that operation caused. Aborted operations leave no receipt.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import final

from swapkeeper.core.types import UtcDatetime
from swapkeeper.ledger.assets import Role
from swapkeeper.trade.state import TradeState


class TradeEventKind(Enum):
    PARTICIPANT_CONFIGURED = "ParticipantConfigured"
    SETUP_CLOSED = "SetupClosed"
    ASSET_DEPOSITED = "AssetDeposited"
    ASSET_RETURNED = "AssetReturned"
    ASSET_SWAPPED = "AssetSwapped"
    STATE_CHANGED = "StateChanged"
    NATIVE_DEPOSITED = "NativeDeposited"
    NATIVE_WITHDRAWN = "NativeWithdrawn"
    NATIVE_REFUNDED = "NativeRefunded"


@final
@dataclass(frozen=True, slots=True)
class TradeEvent:
    """One observable effect.

    ``value`` is an item id for non-fungible movements and an amount
    otherwise; ``address`` is the counterparty of the movement.
    """

    kind: TradeEventKind
    role: Role | None = None
    address: str = ""
    registry: str = ""
    value: int = 0
    detail: str = ""


@final
@dataclass(frozen=True, slots=True)
class TradeReceipt:
    trade_id: str
    sequence: int
    operation: str
    caller: str
    from_state: TradeState
    to_state: TradeState
    events: tuple[TradeEvent, ...]
    timestamp: UtcDatetime
