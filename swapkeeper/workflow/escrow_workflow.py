"""Durable workflow hosting one escrow trade.

Steps: open trade -> (wait for command -> apply) x N -> closed and drained
-> release the trade from the desk if it is finished.
Commands are applied strictly one at a time, in arrival order, which is
the only concurrency the escrow supports.

Determinism contract: this module contains NO I/O, NO randomness,
NO system clock access, NO mutable globals. Every controller operation
runs inside the apply_trade_command activity.
"""

from __future__ import annotations

from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy

with workflow.unsafe.imports_passed_through():
    from swapkeeper.trade.state import TradeState
    from swapkeeper.workflow.activities import EscrowActivities
    from swapkeeper.workflow.types import (
        CommandOutput,
        EscrowInput,
        EscrowResult,
        TradeCommand,
    )

# Commands are applied at most once.
COMMAND_RETRY = RetryPolicy(maximum_attempts=1)


@workflow.defn(name="TradeEscrow")
class TradeEscrowWorkflow:
    """One workflow per trade; the trade id is the workflow id.

    Invariants maintained:
    - At most one controller operation in flight
    - Commands are applied in signal order
    - Commands addressed to another trade are refused without an activity
    - The workflow ends only after close() and an empty queue
    """

    def __init__(self) -> None:
        self._pending: list[TradeCommand] = []
        self._outputs: list[CommandOutput] = []
        self._state: TradeState | None = None
        self._closed: bool = False

    # -- Signals --

    @workflow.signal
    async def submit(self, command: TradeCommand) -> None:
        """Queue a command for the trade."""
        self._pending.append(command)

    @workflow.signal
    async def close(self) -> None:
        """Stop accepting work once the queue drains."""
        self._closed = True

    # -- Queries --

    @workflow.query
    def get_state(self) -> TradeState | None:
        """Trade state after the last applied command."""
        return self._state

    @workflow.query
    def get_outputs(self) -> tuple[CommandOutput, ...]:
        """Outputs of every applied command, in order."""
        return tuple(self._outputs)

    # -- Main workflow --

    @workflow.run
    async def run(self, inp: EscrowInput) -> EscrowResult:
        timeout = timedelta(seconds=inp.command_timeout_s)

        opened = await workflow.execute_activity_method(
            EscrowActivities.open_trade,
            inp,
            start_to_close_timeout=timeout,
            retry_policy=COMMAND_RETRY,
        )
        if opened.error is not None:
            return EscrowResult(
                trade_id=inp.trade_id, final_state=None,
                error_code=opened.error_code, error=opened.error,
            )
        self._state = opened.state

        while True:
            await workflow.wait_condition(lambda: bool(self._pending) or self._closed)
            if not self._pending:
                break
            command = self._pending.pop(0)

            if command.trade_id != inp.trade_id:
                workflow.logger.warning(
                    "Refusing %s for trade %s on workflow %s",
                    command.kind.value, command.trade_id, inp.trade_id,
                )
                self._outputs.append(CommandOutput(
                    trade_id=command.trade_id, kind=command.kind,
                    error_code="WRONG_TRADE",
                    error=f"Command for {command.trade_id} sent to {inp.trade_id}",
                ))
                continue

            output = await workflow.execute_activity_method(
                EscrowActivities.apply_trade_command,
                command,
                start_to_close_timeout=timeout,
                retry_policy=COMMAND_RETRY,
            )
            self._outputs.append(output)
            if output.state is not None:
                self._state = output.state

        release = await workflow.execute_activity_method(
            EscrowActivities.release_trade,
            inp,
            start_to_close_timeout=timeout,
            retry_policy=COMMAND_RETRY,
        )

        return EscrowResult(
            trade_id=inp.trade_id,
            final_state=self._state,
            outputs=tuple(self._outputs),
            released=release.released,
        )
