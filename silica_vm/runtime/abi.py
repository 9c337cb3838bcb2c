"""
silica_vm.runtime.abi — call-data and return-payload codec.

Call arguments arrive as a canonical CBOR map ``{field: value}``; results go
back as a single canonical CBOR value. Both directions are bounded by the
configured byte caps, and exceeding either cap aborts the invocation
(``CallDataTooLarge`` / ``ReturnDataTooLarge`` are ``FatalError``s).

    payload = encode_args({"to": "bob", "amount": 5})
    args = decode_args(payload, {"to": str, "amount": int})
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence, Union

import cbor2

from silica_vm.config import VMConfig, load_config
from silica_vm.errors import (
    CallDataTooLarge,
    CallDataUnavailable,
    DeserializationFailed,
    ReturnDataTooLarge,
    SerializationFailed,
)

FieldSpec = Union[Sequence[str], Mapping[str, type]]


def _cfg(config: Optional[VMConfig]) -> VMConfig:
    return config or load_config()


def _type_ok(value: Any, expected: type) -> bool:
    if expected is int:
        return isinstance(value, int) and not isinstance(value, bool)
    if expected is bytes:
        return isinstance(value, (bytes, bytearray))
    return isinstance(value, expected)


def encode_args(args: Mapping[str, Any]) -> bytes:
    """Encode call arguments (used by hosts, the CLI and tests)."""
    if not isinstance(args, Mapping):
        raise SerializationFailed("call arguments must be a mapping")
    try:
        return cbor2.dumps(dict(args), canonical=True)
    except (cbor2.CBOREncodeError, TypeError, ValueError) as e:
        raise SerializationFailed(f"cannot encode call arguments: {e}") from e


def decode_args(payload: bytes, fields: FieldSpec = (), *, config: Optional[VMConfig] = None) -> Dict[str, Any]:
    """
    Decode and check a call payload.

    ``fields`` is either a sequence of required names or a mapping of
    name → expected type. Unknown extra fields are ignored.
    """
    limit = _cfg(config).max_call_data_bytes
    payload = bytes(payload or b"")
    if len(payload) > limit:
        raise CallDataTooLarge(len(payload), limit)

    wanted: Dict[str, Optional[type]]
    if isinstance(fields, Mapping):
        wanted = dict(fields)
    else:
        wanted = {name: None for name in fields}

    if not payload:
        if wanted:
            raise CallDataUnavailable()
        return {}

    try:
        obj = cbor2.loads(payload)
    except (cbor2.CBORDecodeError, ValueError) as e:
        raise DeserializationFailed(f"malformed call data: {e}") from e
    if not isinstance(obj, dict):
        raise DeserializationFailed("call data must be a map")

    out: Dict[str, Any] = {}
    for name, expected in wanted.items():
        if name not in obj:
            raise DeserializationFailed(f"missing argument {name!r}")
        value = obj[name]
        if expected is not None and not _type_ok(value, expected):
            raise DeserializationFailed(
                f"argument {name!r} must be {expected.__name__}, got {type(value).__name__}"
            )
        out[name] = bytes(value) if expected is bytes else value
    return out


def encode_result(value: Any, *, config: Optional[VMConfig] = None) -> bytes:
    try:
        raw = cbor2.dumps(value, canonical=True)
    except (cbor2.CBOREncodeError, TypeError, ValueError) as e:
        raise SerializationFailed(f"cannot encode return value: {e}") from e
    limit = _cfg(config).max_return_bytes
    if len(raw) > limit:
        raise ReturnDataTooLarge(len(raw), limit)
    return raw


def decode_result(raw: bytes) -> Any:
    if not raw:
        return None
    try:
        return cbor2.loads(raw)
    except (cbor2.CBORDecodeError, ValueError) as e:
        raise DeserializationFailed(f"malformed return data: {e}") from e


__all__ = ["encode_args", "decode_args", "encode_result", "decode_result"]
