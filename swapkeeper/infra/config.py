"""Escrow and Temporal configuration.

Pure configuration data. Nothing here reads the environment or connects
anywhere; callers construct these and pass them in.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

# ---------------------------------------------------------------------------
# Topic names
# ---------------------------------------------------------------------------

TOPIC_TRADE_RECEIPTS: str = "swapkeeper.trade.receipts"

TOPICS: tuple[str, ...] = (TOPIC_TRADE_RECEIPTS,)


# ---------------------------------------------------------------------------
# Escrow
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class EscrowConfig:
    """Settings shared by every trade a process hosts.

    custody_address is the identity the escrow holds assets under on every
    registry; participants grant their approvals and allowances to it.
    """

    custody_address: str = "swapkeeper:custody"
    receipt_topic: str = TOPIC_TRADE_RECEIPTS

    def __post_init__(self) -> None:
        if not self.custody_address:
            raise TypeError("EscrowConfig.custody_address must be non-empty")


# ---------------------------------------------------------------------------
# Temporal
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class TemporalConfig:
    """Where the escrow worker connects and which queue it serves."""

    target_host: str = "localhost:7233"
    namespace: str = "default"
    task_queue: str = "swapkeeper-escrow"
    command_timeout_s: int = 60
