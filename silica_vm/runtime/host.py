"""
silica_vm.runtime.host — runs one entry point per invocation, atomically.

The host owns the contract's storage backend (wrapped in a write journal) and
serializes invocations. For each call it:

1. opens a journal checkpoint and builds a fresh ``Env``;
2. looks up and runs the entry point;
3. commits the checkpoint and publishes events if the call succeeded, or
   reverts the checkpoint and drops events if the entry point reported a
   failure (``env.fail``) or let a ``ContractError`` escape.

``FatalError``s (oversized call/return data, event limit) and unexpected
exceptions revert the checkpoint and propagate to the caller.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from silica_vm import logging as slog
from silica_vm.config import VMConfig, load_config
from silica_vm.errors import ContractError, InvalidArgument

from . import abi
from .context import CallContext, Env
from .events_api import Event, EventSink
from .journal import JournaledBackend
from .storage_api import MemoryBackend, Storage, StorageBackend

EntryPoint = Callable[[Env], None]

log = slog.get_logger(__name__)


@dataclass(frozen=True)
class InvocationResult:
    ok: bool
    return_data: bytes = b""
    value: Any = None
    events: Tuple[Event, ...] = ()
    logs: Tuple[str, ...] = ()
    error: Optional[Dict[str, Any]] = field(default=None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "value": self.value,
            "return_data": "0x" + self.return_data.hex(),
            "events": [e.to_dict() for e in self.events],
            "logs": list(self.logs),
            "error": self.error,
        }


class Host:
    """
    Single-contract invocation host.

        host = Host(contract="crc20")
        res = host.invoke(crc20.ENTRY_POINTS, "initialize", "alice",
                          {"name": "Chert Token", "symbol": "CHT",
                           "decimals": 18, "initial_supply": 1000})
        assert res.ok
    """

    def __init__(
        self,
        backend: Optional[StorageBackend] = None,
        *,
        contract: str = "",
        config: Optional[VMConfig] = None,
        block_height: int = 0,
        block_timestamp: int = 0,
    ) -> None:
        self.config = config or load_config()
        self.base: StorageBackend = backend if backend is not None else MemoryBackend()
        self.journal = JournaledBackend(self.base)
        self.storage = Storage(self.journal, config=self.config)
        self.contract = contract
        self.block_height = block_height
        self.block_timestamp = block_timestamp
        self._lock = threading.Lock()

    def invoke(
        self,
        entry_points: Mapping[str, EntryPoint],
        method: str,
        sender: str,
        args: Optional[Mapping[str, Any]] = None,
        *,
        call_data: Optional[bytes] = None,
    ) -> InvocationResult:
        fn = entry_points.get(method)
        if fn is None:
            err = InvalidArgument(f"unknown entry point {method!r}", field="method")
            log.warning("invoke rejected: %s", err)
            return InvocationResult(ok=False, error=err.to_dict())

        if call_data is None:
            call_data = abi.encode_args(args) if args is not None else b""

        ctx = CallContext(
            sender=sender,
            contract=self.contract,
            call_data=call_data,
            block_height=self.block_height,
            block_timestamp=self.block_timestamp,
        )

        with self._lock, slog.trace_scope(contract=self.contract, entry=method, sender=sender, height=self.block_height):
            env = Env(storage=self.storage, context=ctx, events=EventSink(config=self.config), config=self.config)
            self.journal.begin()
            try:
                fn(env)
            except ContractError as e:
                env.log(f"{method} failed: {e}")
                env.fail(e)
            except BaseException:
                self.journal.revert()
                log.exception("invocation aborted")
                raise

            value = abi.decode_result(env.return_data)
            if env.failed:
                self.journal.revert()
                log.info("invocation failed", extra={"code": env.error.code})
                return InvocationResult(
                    ok=False,
                    return_data=env.return_data,
                    value=value,
                    logs=tuple(env.logs),
                    error=env.error.to_dict(),
                )

            self.journal.commit()
            log.debug("invocation ok", extra={"events": len(env.events)})
            return InvocationResult(
                ok=True,
                return_data=env.return_data,
                value=value,
                events=env.events.events,
                logs=tuple(env.logs),
            )

    def call(self, entry_points: Mapping[str, EntryPoint], method: str, sender: str, **args: Any) -> Any:
        """Convenience wrapper returning only the decoded value."""
        return self.invoke(entry_points, method, sender, args).value


__all__ = ["Host", "InvocationResult", "EntryPoint"]
