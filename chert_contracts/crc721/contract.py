# -*- coding: utf-8 -*-
"""
CRC-721 entry points.

ABI sketch
----------
initialize(name: str, symbol: str, base_uri: str) -> bool
mint(to: str, token_id: int, metadata_uri: str) -> bool
transfer_from(from: str, to: str, token_id: int) -> bool
safe_transfer_from(from: str, to: str, token_id: int, data: bytes) -> bool
approve(to: str, token_id: int) -> bool
set_approval_for_all(operator: str, approved: bool) -> bool
burn(token_id: int) -> bool
owner_of(token_id: int) -> str                  # "0x0" if missing/burned
balance_of(owner: str) -> int
get_approved(token_id: int) -> str              # "" if none
is_approved_for_all(owner: str, operator: str) -> bool
token_uri(token_id: int) -> str                 # "" if missing/burned
total_supply() -> int                           # ever minted
token_by_index(index: int) -> int               # 0 if out of range
token_of_owner_by_index(owner: str, index: int) -> int
get_collection_info() -> str                    # "name|symbol|base_uri|total_supply"
"""

from __future__ import annotations

from typing import Any, Dict

from silica_vm.runtime.context import Env

from ..stdlib.entry import EntryPoint, mutation, query
from ..stdlib.validation import ZERO_ADDRESS
from .registry import OwnershipRegistry

CONTRACT = "crc721"


def _registry(env: Env) -> OwnershipRegistry:
    return OwnershipRegistry(env.storage, env.events)


@mutation(CONTRACT, "Initialize", {"name": str, "symbol": str, "base_uri": str})
def initialize(env: Env, args: Dict[str, Any]) -> None:
    _registry(env).initialize(env.caller, args["name"], args["symbol"], args["base_uri"])


@mutation(CONTRACT, "Mint", {"to": str, "token_id": int, "metadata_uri": str})
def mint(env: Env, args: Dict[str, Any]) -> None:
    _registry(env).mint(env.caller, args["to"], args["token_id"], args["metadata_uri"])


@mutation(CONTRACT, "TransferFrom", {"from": str, "to": str, "token_id": int})
def transfer_from(env: Env, args: Dict[str, Any]) -> None:
    _registry(env).transfer_from(env.caller, args["from"], args["to"], args["token_id"])


@mutation(CONTRACT, "SafeTransferFrom", {"from": str, "to": str, "token_id": int, "data": bytes})
def safe_transfer_from(env: Env, args: Dict[str, Any]) -> None:
    _registry(env).safe_transfer_from(env.caller, args["from"], args["to"], args["token_id"], args["data"])


@mutation(CONTRACT, "Approve", {"to": str, "token_id": int})
def approve(env: Env, args: Dict[str, Any]) -> None:
    _registry(env).approve(env.caller, args["to"], args["token_id"])


@mutation(CONTRACT, "SetApprovalForAll", {"operator": str, "approved": bool})
def set_approval_for_all(env: Env, args: Dict[str, Any]) -> None:
    _registry(env).set_approval_for_all(env.caller, args["operator"], args["approved"])


@mutation(CONTRACT, "Burn", {"token_id": int})
def burn(env: Env, args: Dict[str, Any]) -> None:
    _registry(env).burn(env.caller, args["token_id"])


@query(CONTRACT, "OwnerOf", {"token_id": int}, default=ZERO_ADDRESS)
def owner_of(env: Env, args: Dict[str, Any]) -> str:
    return _registry(env).owner_of(args["token_id"])


@query(CONTRACT, "BalanceOf", {"owner": str}, default=0)
def balance_of(env: Env, args: Dict[str, Any]) -> int:
    return _registry(env).balance_of(args["owner"])


@query(CONTRACT, "GetApproved", {"token_id": int}, default="")
def get_approved(env: Env, args: Dict[str, Any]) -> str:
    return _registry(env).get_approved(args["token_id"])


@query(CONTRACT, "IsApprovedForAll", {"owner": str, "operator": str}, default=False)
def is_approved_for_all(env: Env, args: Dict[str, Any]) -> bool:
    return _registry(env).is_approved_for_all(args["owner"], args["operator"])


@query(CONTRACT, "TokenUri", {"token_id": int}, default="")
def token_uri(env: Env, args: Dict[str, Any]) -> str:
    return _registry(env).token_uri(args["token_id"])


@query(CONTRACT, "TotalSupply", {}, default=0)
def total_supply(env: Env, args: Dict[str, Any]) -> int:
    return _registry(env).total_supply()


@query(CONTRACT, "TokenByIndex", {"index": int}, default=0)
def token_by_index(env: Env, args: Dict[str, Any]) -> int:
    return _registry(env).token_by_index(args["index"])


@query(CONTRACT, "TokenOfOwnerByIndex", {"owner": str, "index": int}, default=0)
def token_of_owner_by_index(env: Env, args: Dict[str, Any]) -> int:
    return _registry(env).token_of_owner_by_index(args["owner"], args["index"])


@query(CONTRACT, "GetCollectionInfo", {}, default="")
def get_collection_info(env: Env, args: Dict[str, Any]) -> str:
    info = _registry(env).get_collection_info()
    if info:
        env.log(f"Collection: {info}")
    return info


ENTRY_POINTS: Dict[str, EntryPoint] = {
    "initialize": initialize,
    "mint": mint,
    "transfer_from": transfer_from,
    "safe_transfer_from": safe_transfer_from,
    "approve": approve,
    "set_approval_for_all": set_approval_for_all,
    "burn": burn,
    "owner_of": owner_of,
    "balance_of": balance_of,
    "get_approved": get_approved,
    "is_approved_for_all": is_approved_for_all,
    "token_uri": token_uri,
    "total_supply": total_supply,
    "token_by_index": token_by_index,
    "token_of_owner_by_index": token_of_owner_by_index,
    "get_collection_info": get_collection_info,
}

__all__ = ["CONTRACT", "ENTRY_POINTS"] + sorted(ENTRY_POINTS)
