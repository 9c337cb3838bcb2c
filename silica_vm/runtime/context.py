"""
silica_vm.runtime.context — per-invocation environment handed to entry points.

``CallContext`` is pure data (who is calling, which contract, the encoded
arguments and deterministic block metadata). ``Env`` bundles it with the
storage and event capabilities plus the invocation's log buffer and return
slot. Entry points have the shape ``fn(env) -> None``.

No wall-clock or other non-deterministic source is exposed here;
``block_timestamp`` is whatever the host passes in.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from silica_vm.config import VMConfig, load_config
from silica_vm.errors import ContractError, InvalidArgument

from . import abi
from .events_api import EventSink
from .storage_api import Storage


def _require_non_negative_int(name: str, v: Any) -> int:
    if not isinstance(v, int) or isinstance(v, bool):
        raise InvalidArgument(f"must be int, got {type(v).__name__}", field=name)
    if v < 0:
        raise InvalidArgument(f"must be non-negative, got {v}", field=name)
    return v


@dataclass(frozen=True)
class CallContext:
    """
    Fields
    ------
    sender:          Calling address (opaque string).
    contract:        Name/address of the contract being invoked.
    call_data:       Encoded call arguments (canonical CBOR map).
    block_height:    Height of the including block.
    block_timestamp: Consensus timestamp of the including block.
    """

    sender: str
    contract: str = ""
    call_data: bytes = b""
    block_height: int = 0
    block_timestamp: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.sender, str):
            raise InvalidArgument("must be str", field="sender")
        object.__setattr__(self, "call_data", bytes(self.call_data or b""))
        _require_non_negative_int("block_height", self.block_height)
        _require_non_negative_int("block_timestamp", self.block_timestamp)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["call_data"] = "0x" + self.call_data.hex()
        return d


@dataclass
class Env:
    storage: Storage
    context: CallContext
    events: EventSink
    config: VMConfig = field(default_factory=load_config)
    logs: List[str] = field(default_factory=list)
    return_data: bytes = b""
    error: Optional[ContractError] = None

    @property
    def caller(self) -> str:
        return self.context.sender

    def args(self, fields: abi.FieldSpec = ()) -> Dict[str, Any]:
        """Decode this invocation's call data against ``fields``."""
        return abi.decode_args(self.context.call_data, fields, config=self.config)

    def log(self, message: str) -> None:
        """Append a line to the invocation log (returned with the result)."""
        self.logs.append(str(message))

    def respond(self, value: Any) -> None:
        self.return_data = abi.encode_result(value, config=self.config)

    def fail(self, err: ContractError) -> None:
        """Mark the invocation as failed; the host reverts its writes."""
        self.error = err

    @property
    def failed(self) -> bool:
        return self.error is not None


__all__ = ["CallContext", "Env"]
