"""Tests for swapkeeper.ledger.assets — committed assets and deposited flags."""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from swapkeeper.core.types import Address
from swapkeeper.ledger.assets import (
    AssetKind,
    AssetLedger,
    AssetRef,
    FungibleAsset,
    NonFungibleAsset,
    Role,
)


def _ledger() -> AssetLedger:
    ledger = AssetLedger()
    ledger.set_address(Role.PROPOSER, Address(value="alice"))
    ledger.set_address(Role.RECEIVER, Address(value="bob"))
    ledger.append_non_fungible(Role.PROPOSER, "art", 7)
    ledger.append_fungible(Role.PROPOSER, "gold", 100)
    ledger.append_fungible(Role.RECEIVER, "silver", 50)
    return ledger


class TestRole:
    def test_counterparty(self) -> None:
        assert Role.PROPOSER.counterparty is Role.RECEIVER
        assert Role.RECEIVER.counterparty is Role.PROPOSER


class TestAppend:
    def test_refs_are_insertion_positions(self) -> None:
        ledger = AssetLedger()
        first = ledger.append_fungible(Role.RECEIVER, "gold", 1)
        second = ledger.append_fungible(Role.RECEIVER, "gold", 2)
        assert first == AssetRef(role=Role.RECEIVER, kind=AssetKind.FUNGIBLE, index=0)
        assert second.index == 1
        assert ledger.asset(second) == FungibleAsset(registry="gold", quantity=2)

    def test_same_registry_not_merged(self) -> None:
        ledger = AssetLedger()
        ledger.append_fungible(Role.PROPOSER, "gold", 1)
        ledger.append_fungible(Role.PROPOSER, "gold", 1)
        assert len(ledger.participant(Role.PROPOSER).fungibles) == 2

    @given(st.lists(st.integers(min_value=0, max_value=10**6), max_size=8))
    def test_appends_concatenate(self, ids: list[int]) -> None:
        ledger = AssetLedger()
        for item_id in ids:
            ledger.append_non_fungible(Role.PROPOSER, "art", item_id)
        p = ledger.participant(Role.PROPOSER)
        assert [a.item_id for a in p.non_fungibles] == ids
        assert not any(a.deposited for a in p.non_fungibles)


class TestRoleOf:
    def test_resolves_addresses(self) -> None:
        ledger = _ledger()
        assert ledger.role_of("alice") is Role.PROPOSER
        assert ledger.role_of("bob") is Role.RECEIVER
        assert ledger.role_of("mallory") is None

    def test_unconfigured_ledger(self) -> None:
        assert AssetLedger().role_of("alice") is None

    def test_shared_address_resolves_to_proposer(self) -> None:
        ledger = AssetLedger()
        ledger.set_address(Role.PROPOSER, Address(value="same"))
        ledger.set_address(Role.RECEIVER, Address(value="same"))
        assert ledger.role_of("same") is Role.PROPOSER


class TestFlags:
    def test_refs_filter_by_flag(self) -> None:
        ledger = _ledger()
        pending = ledger.refs(Role.PROPOSER, deposited=False)
        assert [r.kind for r in pending] == [AssetKind.NON_FUNGIBLE, AssetKind.FUNGIBLE]
        ledger.mark(pending[0], True)
        assert ledger.refs(Role.PROPOSER, deposited=True) == (pending[0],)
        assert ledger.refs(Role.PROPOSER, deposited=False) == (pending[1],)

    def test_completeness(self) -> None:
        ledger = _ledger()
        assert not ledger.is_complete(Role.PROPOSER)
        for ref in ledger.refs(Role.PROPOSER, deposited=False):
            ledger.mark(ref, True)
        assert ledger.is_complete(Role.PROPOSER)
        assert ledger.participant(Role.PROPOSER).complete
        assert not ledger.is_complete(Role.RECEIVER)

    def test_empty_side_is_complete(self) -> None:
        assert AssetLedger().is_complete(Role.RECEIVER)

    def test_mark_replaces_entry(self) -> None:
        ledger = _ledger()
        ref = ledger.refs(Role.PROPOSER, deposited=False)[0]
        ledger.mark(ref, True)
        assert ledger.asset(ref) == NonFungibleAsset(registry="art", item_id=7, deposited=True)


class TestClone:
    def test_clone_is_independent(self) -> None:
        ledger = _ledger()
        copy = ledger.clone()
        ref = ledger.refs(Role.RECEIVER, deposited=False)[0]
        ledger.mark(ref, True)
        ledger.append_fungible(Role.RECEIVER, "silver", 1)
        assert not copy.is_complete(Role.RECEIVER)
        assert len(copy.participant(Role.RECEIVER).fungibles) == 1
        assert copy.address(Role.RECEIVER) == Address(value="bob")
