"""Integration tests for TradeEscrowWorkflow.

Uses Temporal's time-skipping test environment -- no real server needed.
The real EscrowActivities run against an in-memory desk.
"""

from __future__ import annotations

import pytest
from temporalio.testing import WorkflowEnvironment

from swapkeeper.infra.config import EscrowConfig
from swapkeeper.ledger.assets import Role
from swapkeeper.registry.memory_adapter import (
    InMemoryFungibleRegistry,
    InMemoryNativeCurrency,
    InMemoryNonFungibleRegistry,
    InMemoryRegistryDirectory,
)
from swapkeeper.trade.state import TradeState
from swapkeeper.workflow.converter import SWAPKEEPER_DATA_CONVERTER
from swapkeeper.workflow.desk import TradeDesk
from swapkeeper.workflow.escrow_workflow import TradeEscrowWorkflow
from swapkeeper.workflow.types import (
    CommandKind,
    EscrowInput,
    ParticipantTerms,
    TradeCommand,
)
from swapkeeper.workflow.worker import build_worker

# ---------------------------------------------------------------------------
# Test helpers
# ---------------------------------------------------------------------------

TASK_QUEUE = "test-escrow"
CUSTODY = "workflow:custody"


async def _start_env() -> WorkflowEnvironment:
    """Start a time-skipping Temporal test environment with the swapkeeper converter."""
    return await WorkflowEnvironment.start_time_skipping(
        data_converter=SWAPKEEPER_DATA_CONVERTER,
    )


def _desk() -> tuple[TradeDesk, InMemoryNonFungibleRegistry, InMemoryFungibleRegistry]:
    art = InMemoryNonFungibleRegistry("art")
    art.mint("alice", 7)
    art.set_approval_for_all("alice", CUSTODY)
    gold = InMemoryFungibleRegistry("gold")
    gold.mint("bob", 30)
    gold.approve("bob", CUSTODY, 30)
    directory = InMemoryRegistryDirectory(non_fungibles=(art,), fungibles=(gold,))
    desk = TradeDesk(
        directory, InMemoryNativeCurrency(), config=EscrowConfig(custody_address=CUSTODY),
    )
    return desk, art, gold


def _swap_commands(trade_id: str) -> list[TradeCommand]:
    return [
        TradeCommand(
            trade_id=trade_id, kind=CommandKind.CONFIGURE_PARTICIPANT, caller="carol",
            terms=ParticipantTerms(
                role=Role.PROPOSER, address="alice", nft_registries=("art",), item_ids=(7,),
            ),
        ),
        TradeCommand(
            trade_id=trade_id, kind=CommandKind.CONFIGURE_PARTICIPANT, caller="carol",
            terms=ParticipantTerms(
                role=Role.RECEIVER, address="bob", ft_registries=("gold",), quantities=(30,),
            ),
        ),
        TradeCommand(trade_id=trade_id, kind=CommandKind.CLOSE_SETUP, caller="carol"),
        TradeCommand(trade_id=trade_id, kind=CommandKind.DEPOSIT_ASSETS, caller="alice"),
        TradeCommand(trade_id=trade_id, kind=CommandKind.DEPOSIT_ASSETS, caller="bob"),
    ]


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_happy_path() -> None:
    """Configure both sides -> close setup -> both deposit -> swapped."""
    desk, art, gold = _desk()
    async with await _start_env() as env:
        async with build_worker(env.client, desk, TASK_QUEUE):
            handle = await env.client.start_workflow(
                TradeEscrowWorkflow.run,
                EscrowInput(trade_id="T-HAPPY", configurator="carol"),
                id="T-HAPPY",
                task_queue=TASK_QUEUE,
            )
            for command in _swap_commands("T-HAPPY"):
                await handle.signal(TradeEscrowWorkflow.submit, command)
            await handle.signal(TradeEscrowWorkflow.close)

            result = await handle.result()
            assert result.error is None
            assert result.final_state is TradeState.ASSETS_TRANSFERRED
            assert [o.state for o in result.outputs] == [
                TradeState.ASSET_SETUP,
                TradeState.ASSET_SETUP,
                TradeState.PENDING_OFFER,
                TradeState.PROPOSER_DEPOSITED,
                TradeState.ASSETS_TRANSFERRED,
            ]
            assert result.released
    assert art.owner_of(7) == "bob"
    assert gold.balance_of("alice") == 30


@pytest.mark.asyncio
async def test_refused_command_is_reported() -> None:
    """A stranger's command fails, later commands still run."""
    desk, _, _ = _desk()
    async with await _start_env() as env:
        async with build_worker(env.client, desk, TASK_QUEUE):
            handle = await env.client.start_workflow(
                TradeEscrowWorkflow.run,
                EscrowInput(trade_id="T-REFUSED", configurator="carol"),
                id="T-REFUSED",
                task_queue=TASK_QUEUE,
            )
            await handle.signal(
                TradeEscrowWorkflow.submit,
                TradeCommand(trade_id="T-REFUSED", kind=CommandKind.CLOSE_SETUP, caller="mallory"),
            )
            await handle.signal(
                TradeEscrowWorkflow.submit,
                TradeCommand(trade_id="T-REFUSED", kind=CommandKind.CANCEL_TRADE, caller="carol"),
            )
            await handle.signal(TradeEscrowWorkflow.close)

            result = await handle.result()
            refused, cancelled = result.outputs
            assert refused.error_code == "UNAUTHORIZED"
            assert cancelled.state is TradeState.TRADE_CANCELLED
            assert result.final_state is TradeState.TRADE_CANCELLED
            assert result.released
    assert desk.trade_ids == ()


@pytest.mark.asyncio
async def test_command_for_other_trade() -> None:
    """Commands addressed to another trade never reach the desk."""
    desk, _, _ = _desk()
    async with await _start_env() as env:
        async with build_worker(env.client, desk, TASK_QUEUE):
            handle = await env.client.start_workflow(
                TradeEscrowWorkflow.run,
                EscrowInput(trade_id="T-MINE", configurator="carol"),
                id="T-MINE",
                task_queue=TASK_QUEUE,
            )
            await handle.signal(
                TradeEscrowWorkflow.submit,
                TradeCommand(trade_id="T-OTHER", kind=CommandKind.CLOSE_SETUP, caller="carol"),
            )
            await handle.signal(TradeEscrowWorkflow.close)

            result = await handle.result()
            (output,) = result.outputs
            assert output.error_code == "WRONG_TRADE"
            assert result.final_state is TradeState.ASSET_SETUP
            assert not result.released
    assert desk.trade_ids == ("T-MINE",)


@pytest.mark.asyncio
async def test_open_conflict() -> None:
    """Opening an existing trade under another configurator ends the workflow."""
    desk, _, _ = _desk()
    desk.open_trade("T-TAKEN", "carol")
    async with await _start_env() as env:
        async with build_worker(env.client, desk, TASK_QUEUE):
            result = await env.client.execute_workflow(
                TradeEscrowWorkflow.run,
                EscrowInput(trade_id="T-TAKEN", configurator="mallory"),
                id="T-TAKEN",
                task_queue=TASK_QUEUE,
            )
            assert result.final_state is None
            assert result.error is not None
            assert result.error_code == "TRADE_EXISTS"
            assert result.outputs == ()
