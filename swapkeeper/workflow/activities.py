"""Activity implementations for the trade escrow workflow.

Activities are thin IO wrappers. All escrow logic lives in TradeController;
the activities only locate the trade on the desk and report the outcome.

Each activity:
- Is a bound method of EscrowActivities, decorated with @activity.defn
- Takes a single frozen-dataclass input
- Returns a frozen-dataclass output (errors carried in an error field)
- Never raises for a domain failure, so Temporal never retries one
"""

from __future__ import annotations

from typing import final

from temporalio import activity

from swapkeeper.core.result import Err, Ok
from swapkeeper.workflow.desk import TradeDesk
from swapkeeper.workflow.types import (
    CommandOutput,
    EscrowInput,
    OpenTradeOutput,
    ReleaseOutput,
    TradeCommand,
)


@final
class EscrowActivities:
    """Activities bound to one TradeDesk. Register the bound methods on a worker."""

    def __init__(self, desk: TradeDesk) -> None:
        self._desk = desk

    # -----------------------------------------------------------------------
    # 1. open_trade
    # -----------------------------------------------------------------------

    @activity.defn(name="open_trade")
    async def open_trade(self, inp: EscrowInput) -> OpenTradeOutput:
        """Create the trade on the desk.

        Timeout: command_timeout_s | Retries: none
        Idempotent: yes (reopening with the same configurator is a no-op)
        """
        activity.logger.info("Opening trade %s", inp.trade_id)
        match self._desk.open_trade(inp.trade_id, inp.configurator):
            case Ok(controller):
                return OpenTradeOutput(trade_id=inp.trade_id, state=controller.state)
            case Err(error):
                return OpenTradeOutput(
                    trade_id=inp.trade_id, error_code=error.code, error=error.message,
                )

    # -----------------------------------------------------------------------
    # 2. apply_trade_command
    # -----------------------------------------------------------------------

    @activity.defn(name="apply_trade_command")
    async def apply_trade_command(self, command: TradeCommand) -> CommandOutput:
        """Run one controller operation.

        Timeout: command_timeout_s | Retries: none
        An aborted operation leaves nothing behind, so a failed attempt is
        reported, not retried.
        """
        activity.logger.info(
            "Applying %s by %s to trade %s",
            command.kind.value, command.caller, command.trade_id,
        )
        output = self._desk.dispatch(command)
        if output.error is not None:
            activity.logger.warning(
                "%s on trade %s failed: %s", command.kind.value, command.trade_id, output.error,
            )
        return output

    # -----------------------------------------------------------------------
    # 3. release_trade
    # -----------------------------------------------------------------------

    @activity.defn(name="release_trade")
    async def release_trade(self, inp: EscrowInput) -> ReleaseOutput:
        """Drop the trade from the desk once it is finished.

        Timeout: command_timeout_s | Retries: none
        A trade that is still open or holds native balance is kept.
        """
        match self._desk.release_trade(inp.trade_id):
            case Ok(_):
                return ReleaseOutput(trade_id=inp.trade_id, released=True)
            case Err(error):
                activity.logger.info("Keeping trade %s: %s", inp.trade_id, error.message)
                return ReleaseOutput(
                    trade_id=inp.trade_id, released=False,
                    error_code=error.code, error=error.message,
                )
