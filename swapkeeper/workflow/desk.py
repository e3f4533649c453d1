"""TradeDesk — the process-local home of every hosted TradeController.

Activities are thin IO wrappers around a desk; the desk maps commands
onto controller operations and turns their Ok | Err into CommandOutput.
"""

from __future__ import annotations

import logging
from typing import final

from swapkeeper.core.errors import FieldViolation, StateError, SwapkeeperError, ValidationError
from swapkeeper.core.result import Err, Ok
from swapkeeper.core.types import UtcDatetime
from swapkeeper.gateway.transfer import AssetTransferGateway
from swapkeeper.infra.config import EscrowConfig
from swapkeeper.infra.protocols import EventBus
from swapkeeper.registry.protocols import NativeCurrency, RegistryDirectory
from swapkeeper.trade.controller import OperationResult, TradeController
from swapkeeper.trade.state import TERMINAL
from swapkeeper.workflow.types import CommandKind, CommandOutput, TradeCommand

logger = logging.getLogger(__name__)


@final
class TradeDesk:
    """Trades keyed by id, all holding custody under one escrow address."""

    def __init__(
        self,
        directory: RegistryDirectory,
        native: NativeCurrency | None = None,
        *,
        event_bus: EventBus | None = None,
        config: EscrowConfig | None = None,
    ) -> None:
        self._directory = directory
        self._native = native
        self._event_bus = event_bus
        self._config = config if config is not None else EscrowConfig()
        self._trades: dict[str, TradeController] = {}

    @property
    def trade_ids(self) -> tuple[str, ...]:
        return tuple(self._trades)

    def open_trade(
        self, trade_id: str, configurator: str,
    ) -> Ok[TradeController] | Err[ValidationError]:
        """Create a trade. Reopening with the same configurator returns the existing one."""
        existing = self._trades.get(trade_id)
        if existing is not None:
            if existing.configurator == configurator:
                return Ok(existing)
            return Err(_invalid(
                "TRADE_EXISTS", f"Trade {trade_id} already open under another configurator",
                "configurator", configurator,
            ))
        if not trade_id:
            return Err(_invalid("INVALID_TRADE_ID", "trade_id must be non-empty", "trade_id", trade_id))
        if not configurator:
            return Err(_invalid(
                "INVALID_CONFIGURATOR", "configurator must be non-empty", "configurator", configurator,
            ))
        gateway = AssetTransferGateway(self._config.custody_address, self._directory, self._native)
        controller = TradeController(
            trade_id, configurator, gateway, event_bus=self._event_bus, config=self._config,
        )
        self._trades[trade_id] = controller
        logger.info("Opened trade %s for configurator %s", trade_id, configurator)
        return Ok(controller)

    def controller(self, trade_id: str) -> TradeController | None:
        return self._trades.get(trade_id)

    def release_trade(self, trade_id: str) -> Ok[None] | Err[SwapkeeperError]:
        """Drop a finished trade from the desk.

        Only terminal trades holding no native balance are released; any
        other trade stays so its participants can still reach it.
        """
        trade = self._trades.get(trade_id)
        if trade is None:
            return Err(_invalid(
                "UNKNOWN_TRADE", f"No trade {trade_id}", "trade_id", trade_id,
                operation="release_trade", constraint="must be open on this desk",
            ))
        if trade.state not in TERMINAL:
            return Err(_kept(trade, "TRADE_ACTIVE", f"Trade {trade_id} is still {trade.state.value}"))
        held = sum(amount for _, amount in trade.snapshot().native_balances)
        if held:
            return Err(_kept(trade, "NATIVE_HELD", f"Trade {trade_id} still holds {held} native"))
        del self._trades[trade_id]
        logger.info("Released trade %s in state %s", trade_id, trade.state.value)
        return Ok(None)

    def dispatch(self, command: TradeCommand) -> CommandOutput:
        """Run one command against its trade."""
        trade = self._trades.get(command.trade_id)
        if trade is None:
            return CommandOutput(
                trade_id=command.trade_id, kind=command.kind,
                error_code="UNKNOWN_TRADE", error=f"No trade {command.trade_id}",
            )
        return _output(command, _apply(trade, command))


def _apply(trade: TradeController, command: TradeCommand) -> OperationResult:
    caller = command.caller
    match command.kind:
        case CommandKind.CONFIGURE_PARTICIPANT:
            terms = command.terms
            assert terms is not None  # enforced by TradeCommand.__post_init__
            return trade.configure_participant(
                caller, terms.role, terms.address,
                terms.nft_registries, terms.item_ids,
                terms.ft_registries, terms.quantities,
            )
        case CommandKind.CLOSE_SETUP:
            return trade.close_setup(caller)
        case CommandKind.DEPOSIT_ASSETS:
            return trade.deposit_assets(caller)
        case CommandKind.WITHDRAW_ASSETS:
            return trade.withdraw_assets(caller)
        case CommandKind.CANCEL_TRADE:
            return trade.cancel_trade(caller)
        case CommandKind.DEPOSIT_NATIVE:
            return trade.deposit_native(caller, command.amount)
        case CommandKind.WITHDRAW_NATIVE:
            return trade.withdraw_native(caller, command.amount)


def _output(command: TradeCommand, result: OperationResult) -> CommandOutput:
    match result:
        case Ok(state):
            return CommandOutput(trade_id=command.trade_id, kind=command.kind, state=state)
        case Err(error):
            return _error_output(command, error)


def _error_output(command: TradeCommand, error: SwapkeeperError) -> CommandOutput:
    return CommandOutput(
        trade_id=command.trade_id, kind=command.kind,
        error_code=error.code, error=error.message,
    )


def _invalid(
    code: str, message: str, path: str, actual: str,
    *, operation: str = "open_trade", constraint: str = "non-empty, unique per trade",
) -> ValidationError:
    return ValidationError(
        message=message,
        code=code,
        timestamp=UtcDatetime.now(),
        source=f"workflow.desk.TradeDesk.{operation}",
        fields=(FieldViolation(path=path, constraint=constraint, actual_value=repr(actual)),),
    )


def _kept(trade: TradeController, code: str, message: str) -> StateError:
    return StateError(
        message=message,
        code=code,
        timestamp=UtcDatetime.now(),
        source="workflow.desk.TradeDesk.release_trade",
        state=trade.state.value,
        operation="release_trade",
    )
