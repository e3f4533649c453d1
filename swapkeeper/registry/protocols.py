"""Asset registry protocols consumed by the escrow.

The registries own the assets; the escrow only asks them to move custody.
These are boundary contracts with untrusted code, so they follow the
registries' own conventions rather than Result: a non-fungible transfer
raises RegistryRejection on refusal, fungible and native transfers report
success as a bool. AssetTransferGateway is the only caller and turns
every outcome into Ok | Err.

``operator``/``sender`` is the address on whose authority the call is
made (the chain's message sender).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


class RegistryRejection(Exception):
    """A registry refused a call (the equivalent of a reverted transaction)."""


@runtime_checkable
class NonFungibleRegistry(Protocol):
    """Per-item ownership registry.

    Invariants:
      - owner_of() raises RegistryRejection for an unknown item.
      - transfer_from() succeeds completely or raises; ``operator`` must be
        ``from_`` itself or approved by ``from_``.
    """

    @property
    def registry_id(self) -> str: ...

    def owner_of(self, item_id: int) -> str: ...

    def transfer_from(self, operator: str, from_: str, to: str, item_id: int) -> None: ...


@runtime_checkable
class FungibleRegistry(Protocol):
    """Balance registry for an interchangeable asset kind.

    transfer_from() is a pull that consumes an allowance granted by
    ``from_`` to ``operator``.
    """

    @property
    def registry_id(self) -> str: ...

    def balance_of(self, owner: str) -> int: ...

    def transfer(self, sender: str, to: str, amount: int) -> bool: ...

    def transfer_from(self, operator: str, from_: str, to: str, amount: int) -> bool: ...


@runtime_checkable
class NativeCurrency(Protocol):
    """The chain's own currency. A transfer from the caller models value sent with a call."""

    def balance_of(self, owner: str) -> int: ...

    def transfer(self, sender: str, to: str, amount: int) -> bool: ...


@runtime_checkable
class RegistryDirectory(Protocol):
    """Resolves the registry identities recorded in the asset ledger."""

    def non_fungible(self, registry_id: str) -> NonFungibleRegistry | None: ...

    def fungible(self, registry_id: str) -> FungibleRegistry | None: ...
