# -*- coding: utf-8 -*-
"""
CRC-20 fungible ledger
======================

Deterministic, storage-backed fungible token core. The API takes an explicit
``caller`` on every mutating call; entry points (``crc20.contract``) read it
from the call context.

Storage layout (values are canonical CBOR)
------------------------------------------
- ``"metadata"``                  -> {name, symbol, decimals, total_supply, owner}
- ``("balances", addr)``          -> u64
- ``("allowances", (owner, sp))`` -> u64
- ``"reentrancy_lock"``           -> present only during a guarded call

Events
------
- ``Transfer``  {from, to, amount}     (mint: from="0x0", burn: to="0x0")
- ``Approval``  {owner, spender, amount}

Every mutating operation runs: validate → (guard) → load → check → compute all
new values → write → emit. A raised error therefore never leaves a partial
write behind, and events are only emitted once all writes are done.
"""

from __future__ import annotations

from typing import Any, Dict, Final, Optional

from silica_vm.errors import AlreadyInitialized, InsufficientBalance, NotInitialized, Unauthorized
from silica_vm.runtime.events_api import EventSink
from silica_vm.runtime.storage_api import Map, Storage

from ..stdlib.control.reentrancy import ReentrancyGuard
from ..stdlib.math.safe_uint import add, sub
from ..stdlib.validation import (
    ZERO_ADDRESS,
    require_not_zero,
    validate_address,
    validate_non_empty,
    validate_positive_amount,
    validate_u8,
    validate_u64,
)

K_METADATA: Final[str] = "metadata"
MAP_BALANCES: Final[str] = "balances"
MAP_ALLOWANCES: Final[str] = "allowances"

EVT_TRANSFER: Final[str] = "Transfer"
EVT_APPROVAL: Final[str] = "Approval"


class FungibleLedger:
    def __init__(self, storage: Storage, events: EventSink) -> None:
        self.storage = storage
        self.events = events
        self.balances = Map(storage, MAP_BALANCES)
        self.allowances = Map(storage, MAP_ALLOWANCES)
        self.guard = ReentrancyGuard(storage)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _metadata(self) -> Optional[Dict[str, Any]]:
        return self.storage.get(K_METADATA)

    def _require_metadata(self) -> Dict[str, Any]:
        meta = self._metadata()
        if meta is None:
            raise NotInitialized("token")
        return meta

    def _balance(self, addr: str) -> int:
        return self.balances.get(addr, 0)

    def _emit_transfer(self, src: str, dst: str, amount: int) -> None:
        self.events.emit(EVT_TRANSFER, {"from": src, "to": dst, "amount": amount})

    def _move(self, src: str, dst: str, amount: int) -> Dict[str, int]:
        """
        New balances for moving ``amount`` from ``src`` to ``dst``.
        Nothing is written; a self-move nets to the current balance.
        """
        available = self._balance(src)
        if available < amount:
            raise InsufficientBalance(amount, available)
        new_src = sub(available, amount)
        if dst == src:
            return {src: add(new_src, amount)}
        return {src: new_src, dst: add(self._balance(dst), amount)}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, caller: str, name: str, symbol: str, decimals: int, initial_supply: int) -> None:
        validate_address(caller, "caller")
        validate_non_empty(name, "name")
        validate_non_empty(symbol, "symbol")
        validate_u8(decimals, "decimals")
        validate_u64(initial_supply, "initial_supply")

        if self.storage.has(K_METADATA):
            raise AlreadyInitialized("token")

        self.storage.set(
            K_METADATA,
            {
                "name": name,
                "symbol": symbol,
                "decimals": decimals,
                "total_supply": initial_supply,
                "owner": caller,
            },
        )
        self.balances.set(caller, initial_supply)
        self._emit_transfer(ZERO_ADDRESS, caller, initial_supply)

    # ------------------------------------------------------------------
    # Transfers & allowances
    # ------------------------------------------------------------------

    def transfer(self, caller: str, to: str, amount: int) -> None:
        validate_address(caller, "caller")
        validate_address(to, "to")
        require_not_zero(to, "to")
        validate_positive_amount(amount)

        with self.guard.enter():
            self._require_metadata()
            updates = self._move(caller, to, amount)
            for addr, bal in updates.items():
                self.balances.set(addr, bal)
            self._emit_transfer(caller, to, amount)

    def approve(self, caller: str, spender: str, amount: int) -> None:
        validate_address(caller, "caller")
        validate_address(spender, "spender")
        validate_u64(amount, "amount")

        self._require_metadata()
        self.allowances.set((caller, spender), amount)
        self.events.emit(EVT_APPROVAL, {"owner": caller, "spender": spender, "amount": amount})

    def transfer_from(self, caller: str, from_: str, to: str, amount: int) -> None:
        validate_address(caller, "caller")
        validate_address(from_, "from")
        validate_address(to, "to")
        require_not_zero(to, "to")
        validate_positive_amount(amount)

        with self.guard.enter():
            self._require_metadata()
            allowed = self.allowances.get((from_, caller), 0)
            if allowed < amount:
                raise InsufficientBalance(amount, allowed)
            new_allowance = sub(allowed, amount)
            updates = self._move(from_, to, amount)

            self.allowances.set((from_, caller), new_allowance)
            for addr, bal in updates.items():
                self.balances.set(addr, bal)
            self._emit_transfer(from_, to, amount)

    # ------------------------------------------------------------------
    # Supply control
    # ------------------------------------------------------------------

    def mint(self, caller: str, to: str, amount: int) -> None:
        validate_address(caller, "caller")
        validate_address(to, "to")
        require_not_zero(to, "to")
        validate_positive_amount(amount)

        with self.guard.enter():
            meta = self._require_metadata()
            if caller != meta["owner"]:
                raise Unauthorized("only the token owner can mint", caller=caller)
            new_supply = add(meta["total_supply"], amount)
            new_balance = add(self._balance(to), amount)

            self.storage.set(K_METADATA, {**meta, "total_supply": new_supply})
            self.balances.set(to, new_balance)
            self._emit_transfer(ZERO_ADDRESS, to, amount)

    def burn(self, caller: str, amount: int) -> None:
        """Destroy ``amount`` of the caller's own balance."""
        validate_address(caller, "caller")
        validate_positive_amount(amount)

        with self.guard.enter():
            meta = self._require_metadata()
            available = self._balance(caller)
            if available < amount:
                raise InsufficientBalance(amount, available)
            new_balance = sub(available, amount)
            new_supply = sub(meta["total_supply"], amount)

            self.balances.set(caller, new_balance)
            self.storage.set(K_METADATA, {**meta, "total_supply": new_supply})
            self._emit_transfer(caller, ZERO_ADDRESS, amount)

    # ------------------------------------------------------------------
    # Queries (never mutate)
    # ------------------------------------------------------------------

    def is_initialized(self) -> bool:
        return self.storage.has(K_METADATA)

    def balance_of(self, account: str) -> int:
        validate_address(account, "account")
        self._require_metadata()
        return self._balance(account)

    def allowance(self, owner: str, spender: str) -> int:
        validate_address(owner, "owner")
        validate_address(spender, "spender")
        self._require_metadata()
        return self.allowances.get((owner, spender), 0)

    def total_supply(self) -> int:
        return self._require_metadata()["total_supply"]

    def decimals(self) -> int:
        return self._require_metadata()["decimals"]

    def name(self) -> str:
        return self._require_metadata()["name"]

    def symbol(self) -> str:
        return self._require_metadata()["symbol"]

    def owner(self) -> str:
        return self._require_metadata()["owner"]


__all__ = ["FungibleLedger", "K_METADATA", "MAP_BALANCES", "MAP_ALLOWANCES", "EVT_TRANSFER", "EVT_APPROVAL"]
