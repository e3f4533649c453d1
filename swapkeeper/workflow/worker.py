"""Worker configuration for the trade escrow workflow.

Starts a Temporal worker with TradeEscrowWorkflow and the activities of
one TradeDesk registered on the configured task queue.

Usage::

    import asyncio
    from swapkeeper.registry import InMemoryRegistryDirectory
    from swapkeeper.workflow.desk import TradeDesk
    from swapkeeper.workflow.worker import run_worker

    asyncio.run(run_worker(TradeDesk(InMemoryRegistryDirectory())))
"""

from __future__ import annotations

import logging

from temporalio.client import Client
from temporalio.worker import Worker

from swapkeeper.infra.config import TemporalConfig
from swapkeeper.workflow.activities import EscrowActivities
from swapkeeper.workflow.converter import SWAPKEEPER_DATA_CONVERTER
from swapkeeper.workflow.desk import TradeDesk
from swapkeeper.workflow.escrow_workflow import TradeEscrowWorkflow

logger = logging.getLogger(__name__)


def build_worker(client: Client, desk: TradeDesk, task_queue: str) -> Worker:
    """Worker serving TradeEscrowWorkflow with ``desk``'s activities."""
    activities = EscrowActivities(desk)
    return Worker(
        client,
        task_queue=task_queue,
        workflows=[TradeEscrowWorkflow],
        activities=[
            activities.open_trade,
            activities.apply_trade_command,
            activities.release_trade,
        ],
    )


async def run_worker(desk: TradeDesk, config: TemporalConfig | None = None) -> None:
    """Connect to Temporal and run the worker until interrupted."""
    config = config if config is not None else TemporalConfig()
    client = await Client.connect(
        config.target_host, namespace=config.namespace,
        data_converter=SWAPKEEPER_DATA_CONVERTER,
    )
    logger.info(
        "Serving task queue %s on %s/%s",
        config.task_queue, config.target_host, config.namespace,
    )
    await build_worker(client, desk, config.task_queue).run()
