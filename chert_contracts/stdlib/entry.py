# -*- coding: utf-8 -*-
"""
chert_contracts.stdlib.entry
============================

Decorators that turn a core method call into an entry point ``fn(env)``.

- ``mutation(contract, op, fields)``: decodes the call data, runs the body and
  responds ``True``. A ``ContractError`` is logged as ``"<op> failed: <err>"``
  (to the invocation log and the module logger), the response is ``False``
  and the invocation is marked failed so the host rolls it back.
- ``query(contract, op, fields, default)``: same decoding, responds with the
  body's return value. On a ``ContractError`` the failure is logged and the
  documented sentinel ``default`` is returned; the invocation is not marked
  failed since reads have nothing to roll back.

``FatalError``s are never caught here.

    @mutation("crc20", "Transfer", {"to": str, "amount": int})
    def transfer(env, args):
        FungibleLedger(env.storage, env.events).transfer(env.caller, args["to"], args["amount"])
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Dict, Mapping

from silica_vm import logging as slog
from silica_vm.errors import ContractError
from silica_vm.runtime.context import Env

Body = Callable[[Env, Dict[str, Any]], Any]
EntryPoint = Callable[[Env], None]


def report_failure(env: Env, contract: str, op: str, err: ContractError) -> None:
    msg = f"{op} failed: {err}"
    env.log(msg)
    slog.get_logger(f"chert_contracts.{contract}").warning(msg, extra={"code": err.code})


def mutation(contract: str, op: str, fields: Mapping[str, type]) -> Callable[[Body], EntryPoint]:
    def deco(body: Body) -> EntryPoint:
        @functools.wraps(body)
        def entry(env: Env) -> None:
            with slog.trace_scope(slog.context().get("trace_id"), contract=contract, entry=body.__name__):
                try:
                    args = env.args(fields)
                    body(env, args)
                except ContractError as err:
                    report_failure(env, contract, op, err)
                    env.fail(err)
                    env.respond(False)
                    return
                env.respond(True)

        return entry

    return deco


def query(contract: str, op: str, fields: Mapping[str, type], default: Any) -> Callable[[Body], EntryPoint]:
    def deco(body: Body) -> EntryPoint:
        @functools.wraps(body)
        def entry(env: Env) -> None:
            with slog.trace_scope(slog.context().get("trace_id"), contract=contract, entry=body.__name__):
                try:
                    args = env.args(fields)
                    value = body(env, args)
                except ContractError as err:
                    report_failure(env, contract, op, err)
                    value = default
                env.respond(value)

        return entry

    return deco


__all__ = ["mutation", "query", "report_failure"]
