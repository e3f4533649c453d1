"""TradeController — the escrow state machine for one two-party trade.

Owns the trade state, the asset ledger and the native side ledger, and
drives AssetTransferGateway to configure, deposit, swap, withdraw and
cancel.

Every public operation is a transaction (see ``_transact``):

  1. Refuse re-entry: a registry calling back mid-operation gets StateError.
  2. Resolve the caller's role once and check the capability.
  3. Take rollback points of the ledgers and the state; open the gateway journal.
  4. Run the operation body. Per item, the ledger flag is written
     immediately before the registry call (effects, then interaction).
  5. Build the receipt and publish it to the event bus, if one is wired.
  6. On any Err: restore the rollback points and compensate every
     registry movement of this call. Nothing of the call remains.

Operations return Ok(new TradeState) or Err(error value); they do not raise.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import final

from swapkeeper.core.errors import (
    AuthorizationError,
    FieldViolation,
    LengthMismatchError,
    PersistenceError,
    StateError,
    SwapkeeperError,
    ValidationError,
)
from swapkeeper.core.result import Err, Ok
from swapkeeper.core.serialization import canonical_bytes, content_hash
from swapkeeper.core.types import Address, TokenAmount, UtcDatetime
from swapkeeper.gateway.transfer import NATIVE_REGISTRY, AssetTransferGateway
from swapkeeper.infra.config import EscrowConfig
from swapkeeper.infra.protocols import EventBus
from swapkeeper.ledger.assets import (
    AssetLedger,
    FungibleAsset,
    NonFungibleAsset,
    Participant,
    Role,
)
from swapkeeper.ledger.native import NativeSideLedger
from swapkeeper.trade.events import TradeEvent, TradeEventKind, TradeReceipt
from swapkeeper.trade.state import (
    OPEN_FOR_DEPOSIT,
    TERMINAL,
    TradeState,
    check_transition,
    recompute_state,
)

logger = logging.getLogger(__name__)

type OperationResult = Ok[TradeState] | Err[SwapkeeperError]


class Capability(Enum):
    CONFIGURATOR = "configurator"
    TRADER = "trader"
    CONFIGURATOR_OR_TRADER = "configurator-or-trader"


@final
@dataclass(frozen=True, slots=True)
class TradeSnapshot:
    """Complete durable state of a trade at one point in time."""

    trade_id: str
    state: TradeState
    configurator: str
    proposer: Participant
    receiver: Participant
    native_balances: tuple[tuple[str, int], ...]


@dataclass(slots=True)
class _Operation:
    """Scratch state of the operation in flight."""

    name: str
    caller: str
    role: Role | None
    from_state: TradeState
    events: list[TradeEvent] = field(default_factory=list)


type _Body = Callable[[_Operation], Ok[None] | Err[SwapkeeperError]]


@final
class TradeController:
    """One trade between a proposer and a receiver, set up by a configurator."""

    def __init__(
        self,
        trade_id: str,
        configurator: str,
        gateway: AssetTransferGateway,
        *,
        event_bus: EventBus | None = None,
        config: EscrowConfig | None = None,
    ) -> None:
        self._trade_id = trade_id
        self._configurator = configurator
        self._gateway = gateway
        self._event_bus = event_bus
        self._config = config if config is not None else EscrowConfig()
        self._state = TradeState.ASSET_SETUP
        self._ledger = AssetLedger()
        self._native = NativeSideLedger()
        self._receipts: list[TradeReceipt] = []
        self._busy = False

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def trade_id(self) -> str:
        return self._trade_id

    @property
    def configurator(self) -> str:
        return self._configurator

    @property
    def state(self) -> TradeState:
        return self._state

    @property
    def receipts(self) -> tuple[TradeReceipt, ...]:
        return tuple(self._receipts)

    def participant(self, role: Role) -> Participant:
        return self._ledger.participant(role)

    def is_complete(self, role: Role) -> bool:
        return self._ledger.is_complete(role)

    def native_balance(self, address: str) -> int:
        return self._native.balance_of(address)

    def snapshot(self) -> TradeSnapshot:
        addresses = sorted({
            a.value for a in (self._ledger.address(r) for r in Role) if a is not None
        })
        return TradeSnapshot(
            trade_id=self._trade_id,
            state=self._state,
            configurator=self._configurator,
            proposer=self._ledger.participant(Role.PROPOSER),
            receiver=self._ledger.participant(Role.RECEIVER),
            native_balances=tuple((a, self._native.balance_of(a)) for a in addresses),
        )

    def fingerprint(self) -> Ok[str] | Err[str]:
        """SHA-256 of the canonical snapshot; equal fingerprints mean equal trade state."""
        return content_hash(self.snapshot())

    # ------------------------------------------------------------------
    # Configurator operations
    # ------------------------------------------------------------------

    def configure_participant(
        self,
        caller: str,
        role: Role,
        address: str,
        nft_registries: Sequence[str],
        item_ids: Sequence[int],
        ft_registries: Sequence[str],
        quantities: Sequence[int],
    ) -> OperationResult:
        """Set the address of ``role`` and append its committed assets.

        Repeated calls append; they never replace earlier entries.
        """
        def body(op: _Operation) -> Ok[None] | Err[SwapkeeperError]:
            if self._state is not TradeState.ASSET_SETUP:
                return self._state_error(op)
            for left, right, lv, rv in (
                ("nft_registries", "item_ids", nft_registries, item_ids),
                ("ft_registries", "quantities", ft_registries, quantities),
            ):
                if len(lv) != len(rv):
                    return Err(LengthMismatchError(
                        message=f"{left} has {len(lv)} entries, {right} has {len(rv)}",
                        code="LENGTH_MISMATCH",
                        timestamp=UtcDatetime.now(),
                        source=self._source(op),
                        left=left, right=right, left_len=len(lv), right_len=len(rv),
                    ))
            violations = _configuration_violations(
                address, nft_registries, item_ids, ft_registries, quantities,
            )
            if violations:
                return Err(ValidationError(
                    message=f"{len(violations)} invalid configuration field(s)",
                    code="INVALID_CONFIGURATION",
                    timestamp=UtcDatetime.now(),
                    source=self._source(op),
                    fields=violations,
                ))

            self._ledger.set_address(role, Address(value=address))
            for registry, item_id in zip(nft_registries, item_ids, strict=True):
                self._ledger.append_non_fungible(role, registry, item_id)
            for registry, quantity in zip(ft_registries, quantities, strict=True):
                self._ledger.append_fungible(role, registry, quantity)
            op.events.append(TradeEvent(
                kind=TradeEventKind.PARTICIPANT_CONFIGURED, role=role, address=address,
                detail=f"+{len(item_ids)} non-fungible, +{len(quantities)} fungible",
            ))
            return Ok(None)

        return self._transact("configure_participant", caller, Capability.CONFIGURATOR, body)

    def close_setup(self, caller: str) -> OperationResult:
        """Admit the trade to the deposit phase.

        Both roles must have an address; their asset lists are not
        validated and may be empty.
        """
        def body(op: _Operation) -> Ok[None] | Err[SwapkeeperError]:
            if self._state is not TradeState.ASSET_SETUP:
                return self._state_error(op)
            for role in Role:
                if self._ledger.address(role) is None:
                    return self._missing_participant(op, role)
            op.events.append(TradeEvent(kind=TradeEventKind.SETUP_CLOSED))
            return self._advance(op, TradeState.PENDING_OFFER)

        return self._transact("close_setup", caller, Capability.CONFIGURATOR, body)

    # ------------------------------------------------------------------
    # Trader operations
    # ------------------------------------------------------------------

    def deposit_assets(self, caller: str) -> OperationResult:
        """Pull every not-yet-deposited asset of the caller into custody.

        Already-deposited entries are skipped, so a repeat call only moves
        entries that are new or failed before. If both sides end up complete
        the swap runs inside this same call.
        """
        return self._transact("deposit_assets", caller, Capability.TRADER, self._deposit)

    def withdraw_assets(self, caller: str) -> OperationResult:
        """Return the caller's deposited assets. The trade state is left as is."""
        def body(op: _Operation) -> Ok[None] | Err[SwapkeeperError]:
            if self._state in TERMINAL:
                return self._state_error(op)
            assert op.role is not None  # guaranteed by Capability.TRADER
            return self._return_deposits(op, op.role)

        return self._transact("withdraw_assets", caller, Capability.TRADER, body)

    def deposit_native(self, caller: str, amount: int) -> OperationResult:
        """Add ``amount`` of native currency to the caller's side balance."""
        def body(op: _Operation) -> Ok[None] | Err[SwapkeeperError]:
            if self._state is TradeState.ASSET_SETUP:
                return self._state_error(op)
            match self._parse_amount(op, amount):
                case Err() as e:
                    return e
                case Ok(_):
                    pass
            self._native.credit(caller, amount)
            match self._gateway.pull_native(caller, amount):
                case Err() as e:
                    return e
                case Ok(_):
                    pass
            op.events.append(TradeEvent(
                kind=TradeEventKind.NATIVE_DEPOSITED, role=op.role, address=caller,
                registry=NATIVE_REGISTRY, value=amount,
            ))
            return Ok(None)

        return self._transact("deposit_native", caller, Capability.TRADER, body)

    def withdraw_native(self, caller: str, amount: int) -> OperationResult:
        """Send ``amount`` of the caller's side balance back. Allowed in every state."""
        def body(op: _Operation) -> Ok[None] | Err[SwapkeeperError]:
            match self._parse_amount(op, amount):
                case Err() as e:
                    return e
                case Ok(_):
                    pass
            match self._native.debit(caller, amount):
                case Err() as e:
                    return e
                case Ok(_):
                    pass
            match self._gateway.push_native(caller, amount):
                case Err() as e:
                    return e
                case Ok(_):
                    pass
            op.events.append(TradeEvent(
                kind=TradeEventKind.NATIVE_WITHDRAWN, role=op.role, address=caller,
                registry=NATIVE_REGISTRY, value=amount,
            ))
            return Ok(None)

        return self._transact("withdraw_native", caller, Capability.TRADER, body)

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def cancel_trade(self, caller: str) -> OperationResult:
        """Cancel, return every deposited asset, refund the proposer's native balance.

        The receiver's native balance is not refunded here; the receiver
        withdraws it with withdraw_native.
        """
        def body(op: _Operation) -> Ok[None] | Err[SwapkeeperError]:
            if self._state in TERMINAL:
                return self._state_error(op)
            match self._advance(op, TradeState.TRADE_CANCELLED):
                case Err() as e:
                    return e
                case Ok(_):
                    pass
            for role in Role:
                match self._return_deposits(op, role):
                    case Err() as e:
                        return e
                    case Ok(_):
                        pass
            proposer = self._ledger.address(Role.PROPOSER)
            if proposer is not None:
                refund = self._native.clear(proposer.value)
                if refund:
                    match self._gateway.push_native(proposer.value, refund):
                        case Err() as e:
                            return e
                        case Ok(_):
                            pass
                    op.events.append(TradeEvent(
                        kind=TradeEventKind.NATIVE_REFUNDED, role=Role.PROPOSER,
                        address=proposer.value, registry=NATIVE_REGISTRY, value=refund,
                    ))
            logger.info("Trade %s cancelled by %s", self._trade_id, caller)
            return Ok(None)

        return self._transact(
            "cancel_trade", caller, Capability.CONFIGURATOR_OR_TRADER, body,
        )

    # ------------------------------------------------------------------
    # Deposit, swap and return
    # ------------------------------------------------------------------

    def _deposit(self, op: _Operation) -> Ok[None] | Err[SwapkeeperError]:
        if self._state not in OPEN_FOR_DEPOSIT:
            return self._state_error(op)
        role = op.role
        assert role is not None  # guaranteed by Capability.TRADER
        owner = op.caller
        for ref in self._ledger.refs(role, deposited=False):
            asset = self._ledger.asset(ref)
            self._ledger.mark(ref, True)
            match self._gateway.pull(asset, owner):
                case Err() as e:
                    return e
                case Ok(_):
                    pass
            op.events.append(_movement(TradeEventKind.ASSET_DEPOSITED, role, owner, asset))

        new_state = recompute_state(
            self._ledger.is_complete(Role.PROPOSER),
            self._ledger.is_complete(Role.RECEIVER),
        )
        if new_state is not self._state:
            match self._advance(op, new_state):
                case Err() as e:
                    return e
                case Ok(_):
                    pass
        if new_state is TradeState.BOTH_DEPOSITED:
            return self._swap(op)
        return Ok(None)

    def _swap(self, op: _Operation) -> Ok[None] | Err[SwapkeeperError]:
        """Send every deposited asset to the counterparty. Entered only from BothDeposited."""
        for role in Role:
            recipient = self._ledger.address(role.counterparty)
            if recipient is None:
                return self._missing_participant(op, role.counterparty)
            for ref in self._ledger.refs(role, deposited=True):
                asset = self._ledger.asset(ref)
                self._ledger.mark(ref, False)
                match self._gateway.push(asset, recipient.value):
                    case Err() as e:
                        return e
                    case Ok(_):
                        pass
                op.events.append(
                    _movement(TradeEventKind.ASSET_SWAPPED, role, recipient.value, asset)
                )
        match self._advance(op, TradeState.ASSETS_TRANSFERRED):
            case Err() as e:
                return e
            case Ok(_):
                pass
        swapped = sum(1 for e in op.events if e.kind is TradeEventKind.ASSET_SWAPPED)
        logger.info("Trade %s swapped %d asset(s)", self._trade_id, swapped)
        return Ok(None)

    def _return_deposits(self, op: _Operation, role: Role) -> Ok[None] | Err[SwapkeeperError]:
        owner = self._ledger.address(role)
        if owner is None:
            return Ok(None)
        for ref in self._ledger.refs(role, deposited=True):
            asset = self._ledger.asset(ref)
            self._ledger.mark(ref, False)
            match self._gateway.push(asset, owner.value):
                case Err() as e:
                    return e
                case Ok(_):
                    pass
            op.events.append(_movement(TradeEventKind.ASSET_RETURNED, role, owner.value, asset))
        return Ok(None)

    # ------------------------------------------------------------------
    # Transaction machinery
    # ------------------------------------------------------------------

    def _transact(
        self, name: str, caller: str, required: Capability, body: _Body,
    ) -> OperationResult:
        if self._busy:
            return Err(StateError(
                message=f"{name} called while another operation is in progress",
                code="REENTRANT_CALL",
                timestamp=UtcDatetime.now(),
                source=f"trade.controller.TradeController.{name}",
                state=self._state.value,
                operation=name,
            ))
        role = self._ledger.role_of(caller)
        match self._authorize(name, caller, role, required):
            case Err() as e:
                return e
            case Ok(_):
                pass

        self._busy = True
        ledger_point = self._ledger.clone()
        native_point = self._native.clone()
        state_point = self._state
        op = _Operation(name=name, caller=caller, role=role, from_state=self._state)
        self._gateway.begin()
        try:
            outcome = body(op)
            if isinstance(outcome, Ok):
                outcome = self._publish(op)
        except BaseException:
            self._ledger, self._native, self._state = ledger_point, native_point, state_point
            self._gateway.rollback()
            raise
        finally:
            self._busy = False

        match outcome:
            case Ok(receipt):
                self._gateway.commit()
                self._receipts.append(receipt)
                logger.debug(
                    "Trade %s: %s by %s committed (%s -> %s)",
                    self._trade_id, name, caller, op.from_state.value, self._state.value,
                )
                return Ok(self._state)
            case Err(error):
                self._ledger, self._native, self._state = ledger_point, native_point, state_point
                stranded = self._gateway.rollback()
                if stranded:
                    error = error.with_context(
                        f"{len(stranded)} compensating transfer(s) failed during abort"
                    )
                logger.debug(
                    "Trade %s: %s by %s aborted: %s", self._trade_id, name, caller, error.code,
                )
                return Err(error)

    def _authorize(
        self, name: str, caller: str, role: Role | None, required: Capability,
    ) -> Ok[None] | Err[AuthorizationError]:
        is_configurator = caller == self._configurator
        is_trader = role is not None
        match required:
            case Capability.CONFIGURATOR:
                allowed = is_configurator
            case Capability.TRADER:
                allowed = is_trader
            case Capability.CONFIGURATOR_OR_TRADER:
                allowed = is_configurator or is_trader
        if allowed:
            return Ok(None)
        return Err(AuthorizationError(
            message=f"{caller!r} may not call {name}: {required.value} only",
            code="UNAUTHORIZED",
            timestamp=UtcDatetime.now(),
            source=f"trade.controller.TradeController.{name}",
            caller=caller,
            required=required.value,
        ))

    def _advance(self, op: _Operation, to_state: TradeState) -> Ok[None] | Err[SwapkeeperError]:
        """The only place the trade state is assigned."""
        match check_transition(self._state, to_state):
            case Err() as e:
                return e
            case Ok(_):
                pass
        op.events.append(TradeEvent(
            kind=TradeEventKind.STATE_CHANGED,
            detail=f"{self._state.value}->{to_state.value}",
        ))
        self._state = to_state
        return Ok(None)

    def _publish(self, op: _Operation) -> Ok[TradeReceipt] | Err[SwapkeeperError]:
        receipt = TradeReceipt(
            trade_id=self._trade_id,
            sequence=len(self._receipts) + 1,
            operation=op.name,
            caller=op.caller,
            from_state=op.from_state,
            to_state=self._state,
            events=tuple(op.events),
            timestamp=UtcDatetime.now(),
        )
        if self._event_bus is None:
            return Ok(receipt)
        match canonical_bytes(receipt):
            case Err(reason):
                return Err(self._persistence_error(op, reason))
            case Ok(payload):
                pass
        match self._event_bus.publish(self._config.receipt_topic, self._trade_id, payload):
            case Err(error):
                return Err(error.with_context(f"trade {self._trade_id}"))
            case Ok(_):
                return Ok(receipt)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _source(self, op: _Operation) -> str:
        return f"trade.controller.TradeController.{op.name}"

    def _state_error(self, op: _Operation) -> Err[StateError]:
        return Err(StateError(
            message=f"{op.name} is not allowed in state {self._state.value}",
            code="INVALID_STATE",
            timestamp=UtcDatetime.now(),
            source=self._source(op),
            state=self._state.value,
            operation=op.name,
        ))

    def _missing_participant(self, op: _Operation, role: Role) -> Err[StateError]:
        return Err(StateError(
            message=f"{op.name}: no address configured for {role.value}",
            code="PARTICIPANT_MISSING",
            timestamp=UtcDatetime.now(),
            source=self._source(op),
            state=self._state.value,
            operation=op.name,
        ))

    def _parse_amount(self, op: _Operation, amount: int) -> Ok[TokenAmount] | Err[ValidationError]:
        match TokenAmount.parse(amount):
            case Err(reason):
                return Err(ValidationError(
                    message=f"{op.name}: {reason}",
                    code="INVALID_AMOUNT",
                    timestamp=UtcDatetime.now(),
                    source=self._source(op),
                    fields=(FieldViolation(
                        path="amount", constraint="int >= 0", actual_value=repr(amount),
                    ),),
                ))
            case Ok(parsed):
                return Ok(parsed)

    def _persistence_error(self, op: _Operation, detail: str) -> PersistenceError:
        return PersistenceError(
            message=detail,
            code="PERSISTENCE_ERROR",
            timestamp=UtcDatetime.now(),
            source=self._source(op),
            operation="publish",
        )


def _movement(
    kind: TradeEventKind, role: Role, address: str, asset: NonFungibleAsset | FungibleAsset,
) -> TradeEvent:
    match asset:
        case NonFungibleAsset(registry=registry, item_id=item_id):
            return TradeEvent(kind=kind, role=role, address=address, registry=registry, value=item_id)
        case FungibleAsset(registry=registry, quantity=quantity):
            return TradeEvent(kind=kind, role=role, address=address, registry=registry, value=quantity)


def _configuration_violations(
    address: str,
    nft_registries: Sequence[str],
    item_ids: Sequence[int],
    ft_registries: Sequence[str],
    quantities: Sequence[int],
) -> tuple[FieldViolation, ...]:
    violations: list[FieldViolation] = []
    if isinstance(Address.parse(address), Err):
        violations.append(FieldViolation(
            path="address", constraint="must be non-empty string", actual_value=repr(address),
        ))
    for name, registries in (("nft_registries", nft_registries), ("ft_registries", ft_registries)):
        for i, registry in enumerate(registries):
            if not isinstance(registry, str) or not registry:
                violations.append(FieldViolation(
                    path=f"{name}[{i}]", constraint="must be non-empty string",
                    actual_value=repr(registry),
                ))
    for name, values in (("item_ids", item_ids), ("quantities", quantities)):
        for i, value in enumerate(values):
            if isinstance(TokenAmount.parse(value), Err):
                violations.append(FieldViolation(
                    path=f"{name}[{i}]", constraint="int >= 0", actual_value=repr(value),
                ))
    return tuple(violations)
