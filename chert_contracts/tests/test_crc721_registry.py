# -*- coding: utf-8 -*-
"""
CRC-721 core: lifecycle, authorization (owner / token-approved / operator),
approvals, burn semantics and enumeration.
"""
from __future__ import annotations

import pytest

from chert_contracts.crc721.registry import OwnershipRegistry
from silica_vm.config import load_config
from silica_vm.errors import (
    AlreadyExists,
    AlreadyInitialized,
    InvalidArgument,
    NotFound,
    NotInitialized,
    Unauthorized,
)
from silica_vm.runtime.events_api import Event, EventSink

from .conftest import ALICE, BOB, CAROL, DEPLOYER, MALLORY

X, Y, Z = ALICE, BOB, CAROL


def test_scenario(collection: OwnershipRegistry, sink: EventSink):
    collection.mint(DEPLOYER, X, 1, "a")
    assert collection.owner_of(1) == X
    assert collection.balance_of(X) == 1
    assert collection.token_by_index(0) == 1
    assert collection.token_uri(1) == "ipfs://chert/a"

    collection.approve(X, Y, 1)
    assert collection.get_approved(1) == Y
    collection.transfer_from(Y, X, Z, 1)
    assert collection.owner_of(1) == Z
    assert collection.balance_of(X) == 0
    assert collection.balance_of(Z) == 1
    assert collection.get_approved(1) == ""

    collection.burn(Z, 1)
    assert collection.owner_of(1) == "0x0"
    assert collection.balance_of(Z) == 0
    assert collection.token_uri(1) == ""

    assert sink.events == (
        Event("Transfer", {"from": "0x0", "to": X, "token_id": 1}),
        Event("Approval", {"owner": X, "approved": Y, "token_id": 1}),
        Event("Transfer", {"from": X, "to": Z, "token_id": 1}),
        Event("Transfer", {"from": Z, "to": "0x0", "token_id": 1}),
    )


def test_initialize(registry: OwnershipRegistry, sink: EventSink):
    assert not registry.is_initialized()
    assert registry.get_collection_info() == ""
    registry.initialize(DEPLOYER, "Chert Collectibles", "CHC", "ipfs://chert/")
    assert registry.is_initialized()
    assert registry.get_collection_info() == "Chert Collectibles|CHC|ipfs://chert/|0"
    assert sink.events == (
        Event(
            "CollectionInitialized",
            {"name": "Chert Collectibles", "symbol": "CHC", "base_uri": "ipfs://chert/", "owner": DEPLOYER},
        ),
    )
    with pytest.raises(AlreadyInitialized):
        registry.initialize(MALLORY, "X", "X", "x/")
    assert registry.get_collection_info().startswith("Chert Collectibles|")


@pytest.mark.parametrize("field", ["name", "symbol", "base_uri"])
def test_initialize_requires_all_fields(registry: OwnershipRegistry, field):
    args = {"name": "N", "symbol": "S", "base_uri": "u/"}
    args[field] = ""
    with pytest.raises(InvalidArgument) as ei:
        registry.initialize(DEPLOYER, **args)
    assert ei.value.field == field
    assert not registry.is_initialized()


def test_mutations_require_initialization(registry: OwnershipRegistry):
    with pytest.raises(NotInitialized):
        registry.mint(DEPLOYER, X, 1, "a")
    with pytest.raises(NotInitialized):
        registry.set_approval_for_all(X, Y, True)


def test_mint_rules(collection: OwnershipRegistry, sink: EventSink):
    with pytest.raises(Unauthorized):
        collection.mint(MALLORY, MALLORY, 1, "a")
    collection.mint(DEPLOYER, X, 1, "a")
    with pytest.raises(AlreadyExists):
        collection.mint(DEPLOYER, Y, 1, "b")
    assert collection.owner_of(1) == X
    assert collection.total_supply() == 1
    assert len(sink) == 1


def test_mint_requires_metadata_uri(collection: OwnershipRegistry, sink: EventSink):
    with pytest.raises(InvalidArgument) as ei:
        collection.mint(DEPLOYER, X, 1, "")
    assert ei.value.field == "metadata_uri"
    assert collection.owner_of(1) == "0x0"
    assert collection.total_supply() == 0
    assert len(sink) == 0


def test_burned_id_cannot_be_reminted(collection: OwnershipRegistry):
    collection.mint(DEPLOYER, X, 1, "a")
    collection.burn(X, 1)
    with pytest.raises(AlreadyExists):
        collection.mint(DEPLOYER, X, 1, "a")


def test_transfer_authorization(collection: OwnershipRegistry):
    collection.mint(DEPLOYER, X, 1, "a")

    with pytest.raises(Unauthorized):
        collection.transfer_from(MALLORY, X, MALLORY, 1)
    with pytest.raises(Unauthorized):
        # correct caller, wrong claimed owner
        collection.transfer_from(X, Y, Z, 1)
    with pytest.raises(NotFound):
        collection.transfer_from(X, X, Y, 2)
    assert collection.owner_of(1) == X

    collection.set_approval_for_all(X, Y, True)
    assert collection.is_approved_for_all(X, Y)
    collection.transfer_from(Y, X, Z, 1)
    assert collection.owner_of(1) == Z

    # operator approval is per-owner: Y is not Z's operator
    with pytest.raises(Unauthorized):
        collection.transfer_from(Y, Z, Y, 1)


def test_transfer_clears_token_approval(collection: OwnershipRegistry):
    collection.mint(DEPLOYER, X, 1, "a")
    collection.approve(X, Y, 1)
    collection.transfer_from(X, X, Z, 1)
    assert collection.get_approved(1) == ""
    with pytest.raises(Unauthorized):
        collection.transfer_from(Y, Z, Y, 1)


def test_self_transfer_keeps_counts(collection: OwnershipRegistry):
    collection.mint(DEPLOYER, X, 1, "a")
    collection.transfer_from(X, X, X, 1)
    assert collection.balance_of(X) == 1
    assert collection.token_of_owner_by_index(X, 0) == 1


def test_approve_rules(collection: OwnershipRegistry, sink: EventSink):
    collection.mint(DEPLOYER, X, 1, "a")
    sink.clear()
    with pytest.raises(Unauthorized):
        collection.approve(Y, Y, 1)
    with pytest.raises(InvalidArgument):
        collection.approve(X, X, 1)
    with pytest.raises(NotFound):
        collection.approve(X, Y, 5)

    collection.approve(X, Y, 1)
    collection.approve(X, "", 1)
    assert collection.get_approved(1) == ""
    collection.approve(X, Z, 1)
    collection.approve(X, "0x0", 1)
    assert collection.get_approved(1) == ""
    assert [e.fields["approved"] for e in sink.events] == [Y, "0x0", Z, "0x0"]


def test_set_approval_for_all_rules(collection: OwnershipRegistry, sink: EventSink):
    with pytest.raises(InvalidArgument):
        collection.set_approval_for_all(X, X, True)
    with pytest.raises(InvalidArgument):
        collection.set_approval_for_all(X, Y, 1)
    collection.set_approval_for_all(X, Y, True)
    collection.set_approval_for_all(X, Y, False)
    assert not collection.is_approved_for_all(X, Y)
    assert sink.events[-1] == Event("ApprovalForAll", {"owner": X, "operator": Y, "approved": False})


def test_burn_rules(collection: OwnershipRegistry):
    collection.mint(DEPLOYER, X, 1, "a")
    collection.mint(DEPLOYER, X, 2, "b")
    with pytest.raises(Unauthorized):
        collection.burn(MALLORY, 1)
    with pytest.raises(NotFound):
        collection.burn(X, 3)

    collection.approve(X, Y, 1)
    collection.burn(Y, 1)
    with pytest.raises(NotFound):
        collection.burn(X, 1)
    with pytest.raises(NotFound):
        collection.transfer_from(X, X, Y, 1)

    assert collection.total_supply() == 2
    assert collection.token_by_index(0) == 1
    assert collection.token_by_index(1) == 2
    assert collection.balance_of(X) == 1
    assert collection.token_of_owner_by_index(X, 0) == 2
    assert collection.token_of_owner_by_index(X, 1) == 0
    assert collection.get_approved(1) == ""


def test_operator_can_burn(collection: OwnershipRegistry):
    collection.mint(DEPLOYER, X, 1, "a")
    collection.set_approval_for_all(X, Z, True)
    collection.burn(Z, 1)
    assert collection.owner_of(1) == "0x0"


def test_owner_index_swap_and_pop(collection: OwnershipRegistry):
    for tid in (1, 2, 3):
        collection.mint(DEPLOYER, X, tid, str(tid))
    collection.transfer_from(X, X, Y, 1)

    owned = {collection.token_of_owner_by_index(X, i) for i in range(collection.balance_of(X))}
    assert owned == {2, 3}
    assert collection.token_of_owner_by_index(X, 0) == 3
    assert collection.token_of_owner_by_index(Y, 0) == 1
    assert [collection.token_by_index(i) for i in range(3)] == [1, 2, 3]


def test_reads_return_sentinels(collection: OwnershipRegistry):
    assert collection.owner_of(42) == "0x0"
    assert collection.owner_of(-1) == "0x0"
    assert collection.balance_of("") == 0
    assert collection.get_approved(42) == ""
    assert collection.is_approved_for_all("", X) is False
    assert collection.token_uri(42) == ""
    assert collection.token_by_index(0) == 0
    assert collection.token_by_index(-1) == 0
    assert collection.token_of_owner_by_index(X, 0) == 0
    assert collection.token_of_owner_by_index("", 0) == 0


def test_safe_transfer_from(collection: OwnershipRegistry):
    collection.mint(DEPLOYER, X, 1, "a")
    collection.safe_transfer_from(X, X, Y, 1, b"\x01\x02")
    assert collection.owner_of(1) == Y
    with pytest.raises(InvalidArgument):
        collection.safe_transfer_from(Y, Y, X, 1, "not-bytes")


def test_collection_info_tracks_ever_minted(collection: OwnershipRegistry):
    collection.mint(DEPLOYER, X, 7, "seven")
    collection.burn(X, 7)
    assert collection.get_collection_info() == "Chert Collectibles|CHC|ipfs://chert/|1"


def test_operator_approval_between_longest_addresses(collection: OwnershipRegistry):
    limit = load_config().address_limit
    owner, operator = "a" * limit, "b" * limit
    collection.mint(DEPLOYER, owner, 1, "a")
    collection.set_approval_for_all(owner, operator, True)
    assert collection.is_approved_for_all(owner, operator)
    collection.transfer_from(operator, owner, operator, 1)
    assert collection.token_of_owner_by_index(operator, 0) == 1

    too_long = "a" * (limit + 1)
    with pytest.raises(InvalidArgument):
        collection.set_approval_for_all(too_long, operator, True)
    assert collection.is_approved_for_all(too_long, operator) is False
    assert collection.balance_of(too_long) == 0
    assert collection.token_of_owner_by_index(too_long, 0) == 0
