"""AssetTransferGateway — the only code path that calls asset registries.

Every call is atomic from the controller's point of view:

  1. The registry call either succeeds and passes its post-check, or the
     gateway returns Err[ExternalCallFailure]. Exceptions raised by a
     registry never escape.
  2. Each successful movement is appended to the journal of the current
     operation. rollback() replays the inverse movements newest-first so an
     aborted operation leaves registry ownership as it found it.

Post-checks: a non-fungible transfer must leave ``owner_of(item)`` equal
to the recipient; a fungible or native transfer must return exactly True.
Anything else is treated as a misbehaving registry.

Compensations move assets back on the authority of whoever received them,
which is what reverting the enclosing transaction amounts to.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import final

from swapkeeper.core.errors import ExternalCallFailure
from swapkeeper.core.result import Err, Ok
from swapkeeper.core.types import UtcDatetime
from swapkeeper.ledger.assets import Asset, FungibleAsset, NonFungibleAsset
from swapkeeper.registry.protocols import (
    NativeCurrency,
    RegistryDirectory,
    RegistryRejection,
)

logger = logging.getLogger(__name__)

NATIVE_REGISTRY = "native"


class TransferFamily(Enum):
    NON_FUNGIBLE = "NonFungible"
    FUNGIBLE = "Fungible"
    NATIVE = "Native"


@final
@dataclass(frozen=True, slots=True)
class Transfer:
    """One completed custody movement. ``value`` is the item id or the amount."""

    family: TransferFamily
    registry: str
    source: str
    destination: str
    value: int


type TransferResult = Ok[Transfer] | Err[ExternalCallFailure]


def _failure(registry: str, call: str, reason: str) -> Err[ExternalCallFailure]:
    return Err(ExternalCallFailure(
        message=f"{registry}.{call} failed: {reason}",
        code="EXTERNAL_CALL_FAILURE",
        timestamp=UtcDatetime.now(),
        source="gateway.transfer.AssetTransferGateway",
        registry=registry,
        call=call,
        reason=reason,
    ))


def _guarded[T](registry: str, call: str, fn: Callable[[], T]) -> Ok[T] | Err[ExternalCallFailure]:
    """Run one registry call, turning any raised exception into an Err."""
    try:
        return Ok(fn())
    except RegistryRejection as exc:
        return _failure(registry, call, f"rejected: {exc}")
    except Exception as exc:  # noqa: BLE001
        return _failure(registry, call, f"unexpected {type(exc).__name__}: {exc}")


@final
class AssetTransferGateway:
    """Moves assets between participants and the custody address."""

    def __init__(
        self,
        custody: str,
        directory: RegistryDirectory,
        native: NativeCurrency | None = None,
    ) -> None:
        self._custody = custody
        self._directory = directory
        self._native = native
        self._journal: list[Transfer] = []

    @property
    def custody(self) -> str:
        return self._custody

    @property
    def journal(self) -> tuple[Transfer, ...]:
        """Movements made since the last begin()."""
        return tuple(self._journal)

    # -- operation boundaries --

    def begin(self) -> None:
        self._journal = []

    def commit(self) -> tuple[Transfer, ...]:
        done = tuple(self._journal)
        self._journal = []
        return done

    def rollback(self) -> tuple[Transfer, ...]:
        """Undo journalled movements newest-first. Returns those that could not be undone."""
        stranded: list[Transfer] = []
        for transfer in reversed(self._journal):
            match self._undo(transfer):
                case Err(error):
                    logger.error(
                        "Compensation failed for %s %s %s->%s: %s",
                        transfer.family.value, transfer.registry,
                        transfer.source, transfer.destination, error.reason,
                    )
                    stranded.append(transfer)
                case Ok(_):
                    pass
        self._journal = []
        return tuple(stranded)

    # -- asset-level entry points used by the controller --

    def pull(self, asset: Asset, owner: str) -> TransferResult:
        """Move one committed asset from its owner into custody."""
        match asset:
            case NonFungibleAsset(registry=registry, item_id=item_id):
                return self.pull_non_fungible(registry, owner, item_id)
            case FungibleAsset(registry=registry, quantity=quantity):
                return self.pull_fungible(registry, owner, quantity)

    def push(self, asset: Asset, recipient: str) -> TransferResult:
        """Move one custodied asset out to recipient."""
        match asset:
            case NonFungibleAsset(registry=registry, item_id=item_id):
                return self.push_non_fungible(registry, recipient, item_id)
            case FungibleAsset(registry=registry, quantity=quantity):
                return self.push_fungible(registry, recipient, quantity)

    # -- non-fungible --

    def pull_non_fungible(self, registry_id: str, owner: str, item_id: int) -> TransferResult:
        return self._move_non_fungible(registry_id, owner, self._custody, item_id)

    def push_non_fungible(self, registry_id: str, recipient: str, item_id: int) -> TransferResult:
        return self._move_non_fungible(registry_id, self._custody, recipient, item_id)

    def _move_non_fungible(
        self, registry_id: str, source: str, destination: str, item_id: int,
        *, operator: str | None = None, journal: bool = True,
    ) -> TransferResult:
        registry = self._directory.non_fungible(registry_id)
        if registry is None:
            return _failure(registry_id, "transfer_from", "unknown non-fungible registry")
        acting = operator if operator is not None else self._custody
        match _guarded(registry_id, "transfer_from",
                       lambda: registry.transfer_from(acting, source, destination, item_id)):
            case Err() as e:
                return e
            case Ok(_):
                pass
        match _guarded(registry_id, "owner_of", lambda: registry.owner_of(item_id)):
            case Err() as e:
                return e
            case Ok(owner) if owner != destination:
                return _failure(
                    registry_id, "transfer_from",
                    f"item {item_id} owned by {owner} after transfer, expected {destination}",
                )
            case Ok(_):
                pass
        return self._record(Transfer(
            family=TransferFamily.NON_FUNGIBLE, registry=registry_id,
            source=source, destination=destination, value=item_id,
        ), journal)

    # -- fungible --

    def pull_fungible(self, registry_id: str, owner: str, amount: int) -> TransferResult:
        """Authorized pull: consumes the owner's allowance to custody."""
        registry = self._directory.fungible(registry_id)
        if registry is None:
            return _failure(registry_id, "transfer_from", "unknown fungible registry")
        match _guarded(registry_id, "transfer_from",
                       lambda: registry.transfer_from(self._custody, owner, self._custody, amount)):
            case Err() as e:
                return e
            case Ok(accepted) if accepted is not True:
                return _failure(registry_id, "transfer_from", f"returned {accepted!r}")
            case Ok(_):
                pass
        return self._record(Transfer(
            family=TransferFamily.FUNGIBLE, registry=registry_id,
            source=owner, destination=self._custody, value=amount,
        ), True)

    def push_fungible(self, registry_id: str, recipient: str, amount: int) -> TransferResult:
        return self._send_fungible(registry_id, self._custody, recipient, amount)

    def _send_fungible(
        self, registry_id: str, sender: str, recipient: str, amount: int,
        *, journal: bool = True,
    ) -> TransferResult:
        registry = self._directory.fungible(registry_id)
        if registry is None:
            return _failure(registry_id, "transfer", "unknown fungible registry")
        match _guarded(registry_id, "transfer",
                       lambda: registry.transfer(sender, recipient, amount)):
            case Err() as e:
                return e
            case Ok(accepted) if accepted is not True:
                return _failure(registry_id, "transfer", f"returned {accepted!r}")
            case Ok(_):
                pass
        return self._record(Transfer(
            family=TransferFamily.FUNGIBLE, registry=registry_id,
            source=sender, destination=recipient, value=amount,
        ), journal)

    # -- native --

    def pull_native(self, owner: str, amount: int) -> TransferResult:
        return self._send_native(owner, self._custody, amount)

    def push_native(self, recipient: str, amount: int) -> TransferResult:
        return self._send_native(self._custody, recipient, amount)

    def _send_native(
        self, sender: str, recipient: str, amount: int, *, journal: bool = True,
    ) -> TransferResult:
        native = self._native
        if native is None:
            return _failure(NATIVE_REGISTRY, "transfer", "no native currency configured")
        match _guarded(NATIVE_REGISTRY, "transfer",
                       lambda: native.transfer(sender, recipient, amount)):
            case Err() as e:
                return e
            case Ok(accepted) if accepted is not True:
                return _failure(NATIVE_REGISTRY, "transfer", f"returned {accepted!r}")
            case Ok(_):
                pass
        return self._record(Transfer(
            family=TransferFamily.NATIVE, registry=NATIVE_REGISTRY,
            source=sender, destination=recipient, value=amount,
        ), journal)

    # -- journal --

    def _record(self, transfer: Transfer, journal: bool) -> Ok[Transfer]:
        if journal:
            self._journal.append(transfer)
        return Ok(transfer)

    def _undo(self, transfer: Transfer) -> TransferResult:
        match transfer.family:
            case TransferFamily.NON_FUNGIBLE:
                return self._move_non_fungible(
                    transfer.registry, transfer.destination, transfer.source, transfer.value,
                    operator=transfer.destination, journal=False,
                )
            case TransferFamily.FUNGIBLE:
                return self._send_fungible(
                    transfer.registry, transfer.destination, transfer.source, transfer.value,
                    journal=False,
                )
            case TransferFamily.NATIVE:
                return self._send_native(
                    transfer.destination, transfer.source, transfer.value, journal=False,
                )
