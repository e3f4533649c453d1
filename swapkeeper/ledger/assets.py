"""Asset ledger: what each participant committed and what is in custody.

Pure bookkeeping. No registry calls happen here; the controller drives
AssetTransferGateway and records the outcome through mark().

Asset entries are frozen values. A flag change replaces the entry at its
index, so a clone() shares no mutable state with the original.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import final

from swapkeeper.core.types import Address


class Role(Enum):
    """The two fixed trade roles."""

    PROPOSER = "Proposer"
    RECEIVER = "Receiver"

    @property
    def counterparty(self) -> Role:
        return Role.RECEIVER if self is Role.PROPOSER else Role.PROPOSER


class AssetKind(Enum):
    NON_FUNGIBLE = "NonFungible"
    FUNGIBLE = "Fungible"


@final
@dataclass(frozen=True, slots=True)
class NonFungibleAsset:
    """One uniquely identified item held by an external registry."""

    registry: str
    item_id: int
    deposited: bool = False


@final
@dataclass(frozen=True, slots=True)
class FungibleAsset:
    """A quantity of an interchangeable kind. Same-registry entries are not merged."""

    registry: str
    quantity: int
    deposited: bool = False


type Asset = NonFungibleAsset | FungibleAsset


@final
@dataclass(frozen=True, slots=True)
class AssetRef:
    """Position of one entry in the ledger: (role, category, insertion index)."""

    role: Role
    kind: AssetKind
    index: int


@final
@dataclass(frozen=True, slots=True)
class Participant:
    """Read-only view of one side of the trade."""

    role: Role
    address: Address | None
    non_fungibles: tuple[NonFungibleAsset, ...]
    fungibles: tuple[FungibleAsset, ...]

    @property
    def complete(self) -> bool:
        return all(a.deposited for a in self.non_fungibles) and all(
            a.deposited for a in self.fungibles
        )


@final
class AssetLedger:
    """Per-role committed assets and their deposited flags.

    Mutable, like the rest of the trade state; clone() gives the controller
    a rollback point before each operation.
    """

    def __init__(self) -> None:
        self._addresses: dict[Role, Address | None] = {role: None for role in Role}
        self._non_fungibles: dict[Role, list[NonFungibleAsset]] = {role: [] for role in Role}
        self._fungibles: dict[Role, list[FungibleAsset]] = {role: [] for role in Role}

    # -- configuration --

    def set_address(self, role: Role, address: Address) -> None:
        self._addresses[role] = address

    def address(self, role: Role) -> Address | None:
        return self._addresses[role]

    def append_non_fungible(self, role: Role, registry: str, item_id: int) -> AssetRef:
        entries = self._non_fungibles[role]
        entries.append(NonFungibleAsset(registry=registry, item_id=item_id))
        return AssetRef(role=role, kind=AssetKind.NON_FUNGIBLE, index=len(entries) - 1)

    def append_fungible(self, role: Role, registry: str, quantity: int) -> AssetRef:
        entries = self._fungibles[role]
        entries.append(FungibleAsset(registry=registry, quantity=quantity))
        return AssetRef(role=role, kind=AssetKind.FUNGIBLE, index=len(entries) - 1)

    # -- lookup --

    def role_of(self, address: str) -> Role | None:
        """Resolve a caller to its role. The proposer wins if both share an address."""
        for role in Role:
            configured = self._addresses[role]
            if configured is not None and configured.value == address:
                return role
        return None

    def asset(self, ref: AssetRef) -> Asset:
        if ref.kind is AssetKind.NON_FUNGIBLE:
            return self._non_fungibles[ref.role][ref.index]
        return self._fungibles[ref.role][ref.index]

    def refs(self, role: Role, *, deposited: bool) -> tuple[AssetRef, ...]:
        """Entries of role whose flag equals ``deposited``, non-fungibles first."""
        nft = tuple(
            AssetRef(role=role, kind=AssetKind.NON_FUNGIBLE, index=i)
            for i, a in enumerate(self._non_fungibles[role])
            if a.deposited is deposited
        )
        ft = tuple(
            AssetRef(role=role, kind=AssetKind.FUNGIBLE, index=i)
            for i, a in enumerate(self._fungibles[role])
            if a.deposited is deposited
        )
        return nft + ft

    def is_complete(self, role: Role) -> bool:
        """True when every entry of role is deposited. Empty lists are complete."""
        for nft in self._non_fungibles[role]:
            if not nft.deposited:
                return False
        for ft in self._fungibles[role]:
            if not ft.deposited:
                return False
        return True

    def participant(self, role: Role) -> Participant:
        return Participant(
            role=role,
            address=self._addresses[role],
            non_fungibles=tuple(self._non_fungibles[role]),
            fungibles=tuple(self._fungibles[role]),
        )

    # -- mutation --

    def mark(self, ref: AssetRef, deposited: bool) -> None:
        """Set the deposited flag of one entry."""
        if ref.kind is AssetKind.NON_FUNGIBLE:
            nfts = self._non_fungibles[ref.role]
            nfts[ref.index] = replace(nfts[ref.index], deposited=deposited)
        else:
            fts = self._fungibles[ref.role]
            fts[ref.index] = replace(fts[ref.index], deposited=deposited)

    def clone(self) -> AssetLedger:
        """Independent copy for rollback."""
        new = AssetLedger()
        new._addresses = dict(self._addresses)
        new._non_fungibles = {role: list(entries) for role, entries in self._non_fungibles.items()}
        new._fungibles = {role: list(entries) for role, entries in self._fungibles.items()}
        return new
