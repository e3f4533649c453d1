"""In-memory registries implementing the registry protocols.

Test doubles and local-run stand-ins for real asset registries. They fail
the way real ones do: non-fungible refusals raise RegistryRejection,
fungible and native refusals return False. None of them are production code.
"""

from __future__ import annotations

from typing import final

from swapkeeper.registry.protocols import (
    FungibleRegistry,
    NonFungibleRegistry,
    RegistryRejection,
)


@final
class InMemoryNonFungibleRegistry:
    """Item ownership with per-item and per-owner operator approvals."""

    def __init__(self, registry_id: str) -> None:
        self._registry_id = registry_id
        self._owners: dict[int, str] = {}
        self._item_approvals: dict[int, str] = {}
        self._operators: set[tuple[str, str]] = set()  # (owner, operator)

    @property
    def registry_id(self) -> str:
        return self._registry_id

    def mint(self, owner: str, item_id: int) -> None:
        """Test-only helper."""
        if item_id in self._owners:
            raise RegistryRejection(f"{self._registry_id}: item {item_id} already exists")
        self._owners[item_id] = owner

    def approve(self, owner: str, operator: str, item_id: int) -> None:
        if self._owners.get(item_id) != owner:
            raise RegistryRejection(f"{self._registry_id}: {owner} does not own item {item_id}")
        self._item_approvals[item_id] = operator

    def set_approval_for_all(self, owner: str, operator: str, approved: bool = True) -> None:
        if approved:
            self._operators.add((owner, operator))
        else:
            self._operators.discard((owner, operator))

    def owner_of(self, item_id: int) -> str:
        try:
            return self._owners[item_id]
        except KeyError:
            raise RegistryRejection(f"{self._registry_id}: unknown item {item_id}") from None

    def transfer_from(self, operator: str, from_: str, to: str, item_id: int) -> None:
        owner = self.owner_of(item_id)
        if owner != from_:
            raise RegistryRejection(
                f"{self._registry_id}: item {item_id} is owned by {owner}, not {from_}"
            )
        authorized = (
            operator == owner
            or self._item_approvals.get(item_id) == operator
            or (owner, operator) in self._operators
        )
        if not authorized:
            raise RegistryRejection(
                f"{self._registry_id}: {operator} is not approved for item {item_id}"
            )
        self._item_approvals.pop(item_id, None)
        self._owners[item_id] = to


@final
class InMemoryFungibleRegistry:
    """Balances and allowances. Refusals return False instead of raising."""

    def __init__(self, registry_id: str) -> None:
        self._registry_id = registry_id
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}  # (owner, spender)

    @property
    def registry_id(self) -> str:
        return self._registry_id

    def mint(self, owner: str, amount: int) -> None:
        """Test-only helper."""
        self._balances[owner] = self.balance_of(owner) + amount

    def approve(self, owner: str, spender: str, amount: int) -> None:
        self._allowances[(owner, spender)] = amount

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def balance_of(self, owner: str) -> int:
        return self._balances.get(owner, 0)

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        if amount < 0 or self.balance_of(sender) < amount:
            return False
        self._balances[sender] = self.balance_of(sender) - amount
        self._balances[to] = self.balance_of(to) + amount
        return True

    def transfer_from(self, operator: str, from_: str, to: str, amount: int) -> bool:
        allowed = self.allowance(from_, operator)
        if allowed < amount:
            return False
        if not self.transfer(from_, to, amount):
            return False
        self._allowances[(from_, operator)] = allowed - amount
        return True


@final
class InMemoryNativeCurrency:
    def __init__(self) -> None:
        self._balances: dict[str, int] = {}

    def fund(self, owner: str, amount: int) -> None:
        """Test-only helper."""
        self._balances[owner] = self.balance_of(owner) + amount

    def balance_of(self, owner: str) -> int:
        return self._balances.get(owner, 0)

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        if amount < 0 or self.balance_of(sender) < amount:
            return False
        self._balances[sender] = self.balance_of(sender) - amount
        self._balances[to] = self.balance_of(to) + amount
        return True


@final
class InMemoryRegistryDirectory:
    """Registry lookup by identity. Registration order does not matter."""

    def __init__(
        self,
        non_fungibles: tuple[NonFungibleRegistry, ...] = (),
        fungibles: tuple[FungibleRegistry, ...] = (),
    ) -> None:
        self._non_fungibles: dict[str, NonFungibleRegistry] = {}
        self._fungibles: dict[str, FungibleRegistry] = {}
        for nft in non_fungibles:
            self.add_non_fungible(nft)
        for ft in fungibles:
            self.add_fungible(ft)

    def add_non_fungible(self, registry: NonFungibleRegistry) -> None:
        self._non_fungibles[registry.registry_id] = registry

    def add_fungible(self, registry: FungibleRegistry) -> None:
        self._fungibles[registry.registry_id] = registry

    def non_fungible(self, registry_id: str) -> NonFungibleRegistry | None:
        return self._non_fungibles.get(registry_id)

    def fungible(self, registry_id: str) -> FungibleRegistry | None:
        return self._fungibles.get(registry_id)
