# -*- coding: utf-8 -*-
"""
CRC-20 entry points.

Each entry point has the shape ``fn(env) -> None``: it decodes its CBOR call
data, runs one ``FungibleLedger`` operation with ``caller = env.caller`` and
responds with a CBOR value. Mutations respond ``True``/``False``; reads
respond with the value, or ``0`` / ``""`` when the ledger cannot answer.

ABI sketch
----------
initialize(name: str, symbol: str, decimals: int, initial_supply: int) -> bool
transfer(to: str, amount: int) -> bool
approve(spender: str, amount: int) -> bool
transfer_from(from: str, to: str, amount: int) -> bool
mint(to: str, amount: int) -> bool
burn(amount: int) -> bool
balance_of(account: str) -> int
allowance(owner: str, spender: str) -> int
total_supply() -> int
decimals() -> int
name() -> str
symbol() -> str
"""

from __future__ import annotations

from typing import Any, Dict

from silica_vm.runtime.context import Env

from ..stdlib.entry import EntryPoint, mutation, query
from .ledger import FungibleLedger

CONTRACT = "crc20"


def _ledger(env: Env) -> FungibleLedger:
    return FungibleLedger(env.storage, env.events)


@mutation(CONTRACT, "Initialize", {"name": str, "symbol": str, "decimals": int, "initial_supply": int})
def initialize(env: Env, args: Dict[str, Any]) -> None:
    _ledger(env).initialize(env.caller, args["name"], args["symbol"], args["decimals"], args["initial_supply"])


@mutation(CONTRACT, "Transfer", {"to": str, "amount": int})
def transfer(env: Env, args: Dict[str, Any]) -> None:
    _ledger(env).transfer(env.caller, args["to"], args["amount"])


@mutation(CONTRACT, "Approve", {"spender": str, "amount": int})
def approve(env: Env, args: Dict[str, Any]) -> None:
    _ledger(env).approve(env.caller, args["spender"], args["amount"])


@mutation(CONTRACT, "TransferFrom", {"from": str, "to": str, "amount": int})
def transfer_from(env: Env, args: Dict[str, Any]) -> None:
    _ledger(env).transfer_from(env.caller, args["from"], args["to"], args["amount"])


@mutation(CONTRACT, "Mint", {"to": str, "amount": int})
def mint(env: Env, args: Dict[str, Any]) -> None:
    _ledger(env).mint(env.caller, args["to"], args["amount"])


@mutation(CONTRACT, "Burn", {"amount": int})
def burn(env: Env, args: Dict[str, Any]) -> None:
    _ledger(env).burn(env.caller, args["amount"])


@query(CONTRACT, "BalanceOf", {"account": str}, default=0)
def balance_of(env: Env, args: Dict[str, Any]) -> int:
    return _ledger(env).balance_of(args["account"])


@query(CONTRACT, "Allowance", {"owner": str, "spender": str}, default=0)
def allowance(env: Env, args: Dict[str, Any]) -> int:
    return _ledger(env).allowance(args["owner"], args["spender"])


@query(CONTRACT, "TotalSupply", {}, default=0)
def total_supply(env: Env, args: Dict[str, Any]) -> int:
    return _ledger(env).total_supply()


@query(CONTRACT, "Decimals", {}, default=0)
def decimals(env: Env, args: Dict[str, Any]) -> int:
    return _ledger(env).decimals()


@query(CONTRACT, "Name", {}, default="")
def name(env: Env, args: Dict[str, Any]) -> str:
    return _ledger(env).name()


@query(CONTRACT, "Symbol", {}, default="")
def symbol(env: Env, args: Dict[str, Any]) -> str:
    return _ledger(env).symbol()


ENTRY_POINTS: Dict[str, EntryPoint] = {
    "initialize": initialize,
    "transfer": transfer,
    "approve": approve,
    "transfer_from": transfer_from,
    "mint": mint,
    "burn": burn,
    "balance_of": balance_of,
    "allowance": allowance,
    "total_supply": total_supply,
    "decimals": decimals,
    "name": name,
    "symbol": symbol,
}

__all__ = ["CONTRACT", "ENTRY_POINTS"] + sorted(ENTRY_POINTS)
