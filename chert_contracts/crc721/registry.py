# -*- coding: utf-8 -*-
"""
CRC-721 unique-asset registry
=============================

Storage-backed ownership registry with per-token and per-operator delegation
and enumeration. Explicit ``caller`` on every mutating call.

Token lifecycle: Unminted → Active(owner) → Active(new owner)… → Burned.
Burned is terminal; the record is kept with ``owner="0x0"``.

Storage layout (values are canonical CBOR)
------------------------------------------
- ``"collection_metadata"``             -> {name, symbol, base_uri, total_supply, owner, initialized}
- ``("tokens", id)``                    -> {token_id, owner, metadata_uri, burned}
- ``("token_approvals", id)``           -> address (absent = none)
- ``("operator_approvals", (own, op))`` -> True (absent = not approved)
- ``("nft_balances", addr)``            -> u64 count of live tokens owned
- ``("all_tokens", i)``                 -> id minted i-th; length is total_supply
- ``("owner_tokens", (addr, i))``       -> i-th id currently owned by addr; length is the balance
- ``("owner_token_pos", id)``           -> position of id in its owner's index

The per-owner index removes by swapping the last entry into the vacated slot,
so its order is not stable across transfers.

Events
------
- ``CollectionInitialized`` {name, symbol, base_uri, owner}
- ``Transfer``       {from, to, token_id}     (mint: from="0x0", burn: to="0x0")
- ``Approval``       {owner, approved, token_id}
- ``ApprovalForAll`` {owner, operator, approved}
"""

from __future__ import annotations

from typing import Any, Dict, Final, List, Optional, Tuple

from silica_vm.errors import (
    AlreadyExists,
    AlreadyInitialized,
    InvalidArgument,
    NotFound,
    NotInitialized,
    Unauthorized,
)
from silica_vm.runtime.events_api import EventSink
from silica_vm.runtime.storage_api import Map, Storage

from ..stdlib.control.reentrancy import ReentrancyGuard
from ..stdlib.math.safe_uint import decrement, increment, is_u64
from ..stdlib.validation import (
    ZERO_ADDRESS,
    require_not_zero,
    validate_address,
    validate_non_empty,
    validate_u64,
)

K_COLLECTION: Final[str] = "collection_metadata"

EVT_COLLECTION_INITIALIZED: Final[str] = "CollectionInitialized"
EVT_TRANSFER: Final[str] = "Transfer"
EVT_APPROVAL: Final[str] = "Approval"
EVT_APPROVAL_FOR_ALL: Final[str] = "ApprovalForAll"

# A planned write: (map, key, value); value None means delete.
_Write = Tuple[Map, Any, Any]


def _is_address(addr: object) -> bool:
    try:
        validate_address(addr)
    except InvalidArgument:
        return False
    return True


class OwnershipRegistry:
    def __init__(self, storage: Storage, events: EventSink) -> None:
        self.storage = storage
        self.events = events
        self.tokens = Map(storage, "tokens")
        self.token_approvals = Map(storage, "token_approvals")
        self.operator_approvals = Map(storage, "operator_approvals")
        self.balances = Map(storage, "nft_balances")
        self.all_tokens = Map(storage, "all_tokens")
        self.owner_tokens = Map(storage, "owner_tokens")
        self.owner_token_pos = Map(storage, "owner_token_pos")
        self.guard = ReentrancyGuard(storage)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _metadata(self) -> Optional[Dict[str, Any]]:
        return self.storage.get(K_COLLECTION)

    def _require_metadata(self) -> Dict[str, Any]:
        meta = self._metadata()
        if meta is None or not meta.get("initialized"):
            raise NotInitialized("collection")
        return meta

    def _live_record(self, token_id: int) -> Dict[str, Any]:
        rec = self.tokens.get(token_id)
        if rec is None:
            raise NotFound(f"token {token_id} does not exist", data={"token_id": token_id})
        if rec["burned"]:
            raise NotFound(f"token {token_id} is burned", data={"token_id": token_id})
        return rec

    def _count(self, owner: str) -> int:
        return self.balances.get(owner, 0)

    def _is_authorized(self, caller: str, owner: str, token_id: int) -> bool:
        if caller == owner:
            return True
        if self.token_approvals.get(token_id) == caller:
            return True
        return bool(self.operator_approvals.get((owner, caller), False))

    def _plan_index_remove(self, owner: str, token_id: int, count: int) -> List[_Write]:
        """Swap-and-pop ``token_id`` out of ``owner``'s index of length ``count``."""
        pos = self.owner_token_pos.get(token_id)
        last = count - 1
        if pos is None or last < 0:
            return []
        writes: List[_Write] = []
        if pos != last:
            moved = self.owner_tokens.get((owner, last))
            writes.append((self.owner_tokens, (owner, pos), moved))
            writes.append((self.owner_token_pos, moved, pos))
        writes.append((self.owner_tokens, (owner, last), None))
        writes.append((self.owner_token_pos, token_id, None))
        return writes

    def _plan_index_append(self, owner: str, token_id: int, count: int) -> List[_Write]:
        return [
            (self.owner_tokens, (owner, count), token_id),
            (self.owner_token_pos, token_id, count),
        ]

    @staticmethod
    def _apply(writes: List[_Write]) -> None:
        for m, key, value in writes:
            if value is None:
                m.delete(key)
            else:
                m.set(key, value)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, caller: str, name: str, symbol: str, base_uri: str) -> None:
        validate_address(caller, "caller")
        validate_non_empty(name, "name")
        validate_non_empty(symbol, "symbol")
        validate_non_empty(base_uri, "base_uri")

        if self.storage.has(K_COLLECTION):
            raise AlreadyInitialized("collection")

        self.storage.set(
            K_COLLECTION,
            {
                "name": name,
                "symbol": symbol,
                "base_uri": base_uri,
                "total_supply": 0,
                "owner": caller,
                "initialized": True,
            },
        )
        self.events.emit(
            EVT_COLLECTION_INITIALIZED,
            {"name": name, "symbol": symbol, "base_uri": base_uri, "owner": caller},
        )

    # ------------------------------------------------------------------
    # Mint / transfer / burn (guarded)
    # ------------------------------------------------------------------

    def mint(self, caller: str, to: str, token_id: int, metadata_uri: str) -> None:
        validate_address(caller, "caller")
        validate_address(to, "to")
        require_not_zero(to, "to")
        validate_u64(token_id, "token_id")
        validate_non_empty(metadata_uri, "metadata_uri")

        with self.guard.enter():
            meta = self._require_metadata()
            if caller != meta["owner"]:
                raise Unauthorized("only the collection owner can mint", caller=caller)
            if self.tokens.has(token_id):
                raise AlreadyExists(f"token {token_id} already minted", data={"token_id": token_id})

            count = self._count(to)
            new_count = increment(count)
            supply = meta["total_supply"]
            new_supply = increment(supply)
            writes = self._plan_index_append(to, token_id, count)

            self.tokens.set(
                token_id,
                {"token_id": token_id, "owner": to, "metadata_uri": metadata_uri, "burned": False},
            )
            self.balances.set(to, new_count)
            self.all_tokens.set(supply, token_id)
            self._apply(writes)
            self.storage.set(K_COLLECTION, {**meta, "total_supply": new_supply})
            self.events.emit(EVT_TRANSFER, {"from": ZERO_ADDRESS, "to": to, "token_id": token_id})

    def transfer_from(self, caller: str, from_: str, to: str, token_id: int) -> None:
        validate_address(caller, "caller")
        validate_address(from_, "from")
        validate_address(to, "to")
        require_not_zero(to, "to")
        validate_u64(token_id, "token_id")

        with self.guard.enter():
            self._require_metadata()
            rec = self._live_record(token_id)
            owner = rec["owner"]
            if from_ != owner:
                raise Unauthorized("from is not the token owner", caller=caller)
            if not self._is_authorized(caller, owner, token_id):
                raise Unauthorized("caller is not owner, approved or operator", caller=caller)

            writes: List[_Write] = []
            if to != from_:
                from_count = self._count(from_)
                to_count = self._count(to)
                new_from_count = decrement(from_count)
                new_to_count = increment(to_count)
                writes += self._plan_index_remove(from_, token_id, from_count)
                writes += self._plan_index_append(to, token_id, to_count)
                writes.append((self.balances, from_, new_from_count))
                writes.append((self.balances, to, new_to_count))

            self.tokens.set(token_id, {**rec, "owner": to})
            self.token_approvals.delete(token_id)
            self._apply(writes)
            self.events.emit(EVT_TRANSFER, {"from": from_, "to": to, "token_id": token_id})

    def safe_transfer_from(self, caller: str, from_: str, to: str, token_id: int, data: bytes = b"") -> None:
        """``transfer_from`` that accepts an opaque payload; no receiver callback is made."""
        if not isinstance(data, (bytes, bytearray)):
            raise InvalidArgument("must be bytes", field="data")
        self.transfer_from(caller, from_, to, token_id)

    def burn(self, caller: str, token_id: int) -> None:
        validate_address(caller, "caller")
        validate_u64(token_id, "token_id")

        with self.guard.enter():
            self._require_metadata()
            rec = self._live_record(token_id)
            owner = rec["owner"]
            if not self._is_authorized(caller, owner, token_id):
                raise Unauthorized("caller is not owner, approved or operator", caller=caller)

            count = self._count(owner)
            new_count = decrement(count) if count > 0 else 0
            writes = self._plan_index_remove(owner, token_id, count)

            self.tokens.set(token_id, {**rec, "owner": ZERO_ADDRESS, "burned": True})
            self.balances.set(owner, new_count)
            self.token_approvals.delete(token_id)
            self._apply(writes)
            self.events.emit(EVT_TRANSFER, {"from": owner, "to": ZERO_ADDRESS, "token_id": token_id})

    # ------------------------------------------------------------------
    # Approvals
    # ------------------------------------------------------------------

    def approve(self, caller: str, to: str, token_id: int) -> None:
        validate_address(caller, "caller")
        clearing = to in ("", ZERO_ADDRESS)
        if not clearing:
            validate_address(to, "to")
        validate_u64(token_id, "token_id")

        self._require_metadata()
        rec = self._live_record(token_id)
        owner = rec["owner"]
        if caller != owner:
            raise Unauthorized("only the token owner can approve", caller=caller)
        if to == owner:
            raise InvalidArgument("cannot approve the current owner", field="to")

        if clearing:
            self.token_approvals.delete(token_id)
        else:
            self.token_approvals.set(token_id, to)
        self.events.emit(
            EVT_APPROVAL,
            {"owner": owner, "approved": ZERO_ADDRESS if clearing else to, "token_id": token_id},
        )

    def set_approval_for_all(self, caller: str, operator: str, approved: bool) -> None:
        validate_address(caller, "caller")
        validate_address(operator, "operator")
        if not isinstance(approved, bool):
            raise InvalidArgument("must be a bool", field="approved")
        if operator == caller:
            raise InvalidArgument("cannot set approval for self", field="operator")

        self._require_metadata()
        if approved:
            self.operator_approvals.set((caller, operator), True)
        else:
            self.operator_approvals.delete((caller, operator))
        self.events.emit(EVT_APPROVAL_FOR_ALL, {"owner": caller, "operator": operator, "approved": approved})

    # ------------------------------------------------------------------
    # Reads: never mutate, never raise for missing data
    # ------------------------------------------------------------------

    def is_initialized(self) -> bool:
        meta = self._metadata()
        return bool(meta and meta.get("initialized"))

    def owner_of(self, token_id: int) -> str:
        rec = self.tokens.get(token_id) if is_u64(token_id) else None
        if rec is None or rec["burned"]:
            return ZERO_ADDRESS
        return rec["owner"]

    def balance_of(self, owner: str) -> int:
        if not _is_address(owner):
            return 0
        return self._count(owner)

    def get_approved(self, token_id: int) -> str:
        if not is_u64(token_id):
            return ""
        return self.token_approvals.get(token_id, "")

    def is_approved_for_all(self, owner: str, operator: str) -> bool:
        if not (_is_address(owner) and _is_address(operator)):
            return False
        return bool(self.operator_approvals.get((owner, operator), False))

    def token_uri(self, token_id: int) -> str:
        meta = self._metadata()
        rec = self.tokens.get(token_id) if is_u64(token_id) else None
        if meta is None or rec is None or rec["burned"]:
            return ""
        return f"{meta['base_uri']}{rec['metadata_uri']}"

    def total_supply(self) -> int:
        meta = self._metadata()
        return meta["total_supply"] if meta else 0

    def token_by_index(self, index: int) -> int:
        if not is_u64(index) or index >= self.total_supply():
            return 0
        return self.all_tokens.get(index, 0)

    def token_of_owner_by_index(self, owner: str, index: int) -> int:
        if not _is_address(owner) or not is_u64(index):
            return 0
        if index >= self._count(owner):
            return 0
        return self.owner_tokens.get((owner, index), 0)

    def get_collection_info(self) -> str:
        meta = self._metadata()
        if meta is None:
            return ""
        return f"{meta['name']}|{meta['symbol']}|{meta['base_uri']}|{meta['total_supply']}"


__all__ = [
    "OwnershipRegistry",
    "K_COLLECTION",
    "EVT_COLLECTION_INITIALIZED",
    "EVT_TRANSFER",
    "EVT_APPROVAL",
    "EVT_APPROVAL_FOR_ALL",
]
