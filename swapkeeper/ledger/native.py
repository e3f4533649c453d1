"""Native-currency side balances held in custody per address.

Independent of the trade assets: a good-faith deposit, not swap
consideration. Amounts are integers in the chain's smallest unit.
"""

from __future__ import annotations

from typing import final

from swapkeeper.core.errors import InsufficientBalanceError
from swapkeeper.core.result import Err, Ok
from swapkeeper.core.types import UtcDatetime


@final
class NativeSideLedger:
    def __init__(self) -> None:
        self._balances: dict[str, int] = {}

    def balance_of(self, address: str) -> int:
        return self._balances.get(address, 0)

    def credit(self, address: str, amount: int) -> int:
        """Add amount to address and return the new balance. No upper bound."""
        self._balances[address] = self.balance_of(address) + amount
        return self._balances[address]

    def debit(self, address: str, amount: int) -> Ok[int] | Err[InsufficientBalanceError]:
        """Subtract amount, refusing to go below zero."""
        available = self.balance_of(address)
        if amount > available:
            return Err(InsufficientBalanceError(
                message=f"Withdrawal of {amount} exceeds balance {available}",
                code="INSUFFICIENT_BALANCE",
                timestamp=UtcDatetime.now(),
                source="ledger.native.NativeSideLedger.debit",
                address=address,
                requested=amount,
                available=available,
            ))
        self._balances[address] = available - amount
        return Ok(self._balances[address])

    def clear(self, address: str) -> int:
        """Zero the balance of address and return what it held."""
        held = self.balance_of(address)
        if held:
            self._balances[address] = 0
        return held

    def clone(self) -> NativeSideLedger:
        new = NativeSideLedger()
        new._balances = dict(self._balances)
        return new
