# -*- coding: utf-8 -*-
"""
chert_contracts.tests.conftest
==============================

Fixtures for the ledger tests.

- Core fixtures (``ledger``, ``registry``) bind a core to a fresh in-memory
  storage and an event sink, so tests can call operations directly with an
  explicit caller and inspect ``sink.events``.
- ``crc20`` / ``crc721`` are ``Client``s that drive the real entry points
  through a ``Host`` (CBOR call data, journal rollback, sentinel reads).

Usage (inside a test file):
    def test_flow(crc20):
        assert crc20.call("initialize", DEPLOYER, name="Chert Token", symbol="CHT",
                          decimals=18, initial_supply=1000).ok
        assert crc20.value("balance_of", "anyone", account=DEPLOYER) == 1000
"""
from __future__ import annotations

import os
from typing import Any, Dict, Mapping

import pytest

from chert_contracts.crc20 import contract as crc20_contract
from chert_contracts.crc20.ledger import FungibleLedger
from chert_contracts.crc721 import contract as crc721_contract
from chert_contracts.crc721.registry import OwnershipRegistry
from silica_vm.runtime.events_api import EventSink
from silica_vm.runtime.host import Host, InvocationResult
from silica_vm.runtime.storage_api import MemoryBackend, Storage

os.environ.setdefault("PYTHONHASHSEED", "0")
os.environ.setdefault("TZ", "UTC")

DEPLOYER = "deployer"
ALICE = "alice"
BOB = "bob"
CAROL = "carol"
DAVE = "dave"
ERIN = "erin"
MALLORY = "mallory"


class Client:
    """Drives one contract's entry points through a Host."""

    def __init__(self, entry_points: Mapping[str, Any], contract: str) -> None:
        self.backend = MemoryBackend()
        self.host = Host(self.backend, contract=contract)
        self.entry_points = entry_points

    def call(self, method: str, sender: str, **args: Any) -> InvocationResult:
        return self.host.invoke(self.entry_points, method, sender, args)

    def value(self, method: str, sender: str = "reader", **args: Any) -> Any:
        res = self.call(method, sender, **args)
        assert res.ok, res.error
        return res.value

    def snapshot(self) -> Dict[bytes, bytes]:
        return dict(self.backend.items())


@pytest.fixture
def storage() -> Storage:
    return Storage(MemoryBackend())


@pytest.fixture
def sink() -> EventSink:
    return EventSink()


@pytest.fixture
def ledger(storage: Storage, sink: EventSink) -> FungibleLedger:
    return FungibleLedger(storage, sink)


@pytest.fixture
def cht(ledger: FungibleLedger, sink: EventSink) -> FungibleLedger:
    """Ledger initialized as Chert Token / CHT / 18 / 1000 owned by DEPLOYER."""
    ledger.initialize(DEPLOYER, "Chert Token", "CHT", 18, 1000)
    sink.clear()
    return ledger


@pytest.fixture
def registry(storage: Storage, sink: EventSink) -> OwnershipRegistry:
    return OwnershipRegistry(storage, sink)


@pytest.fixture
def collection(registry: OwnershipRegistry, sink: EventSink) -> OwnershipRegistry:
    """Registry initialized by DEPLOYER with base URI ipfs://chert/."""
    registry.initialize(DEPLOYER, "Chert Collectibles", "CHC", "ipfs://chert/")
    sink.clear()
    return registry


@pytest.fixture
def crc20() -> Client:
    return Client(crc20_contract.ENTRY_POINTS, "crc20")


@pytest.fixture
def crc721() -> Client:
    return Client(crc721_contract.ENTRY_POINTS, "crc721")
