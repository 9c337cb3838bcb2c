from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from silica_vm.config import VMConfig, load_config
from silica_vm.errors import ContractError, FatalError

MAX_EVENT_NAME_LEN = 64
MAX_KEY_LEN = 64
MAX_BYTES_LEN = 4096
MAX_STR_LEN = 4096
MAX_INT_BITS = 256

# Names and keys must be identifier-like: letters/underscore, then letters/digits/underscore.
_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

FieldValue = Any  # str | int | bool | bytes, checked at runtime


@dataclass(frozen=True)
class Event:
    """An emitted event as recorded for the invocation result."""

    name: str
    fields: Dict[str, FieldValue] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "fields": {k: ("0x" + v.hex() if isinstance(v, bytes) else v) for k, v in self.fields.items()},
        }


class EventError(ContractError):
    def __init__(self, message: str, *, where: str, **extra: Any):
        super().__init__(message, code="EVENT_INVALID", data={"where": where, **extra})


class EventLimitExceeded(FatalError):
    def __init__(self, limit: int):
        super().__init__("too many events in one invocation", code="EVENT_LIMIT", data={"limit": limit})


class EventSink:
    """
    Per-invocation event buffer.

    The host creates one sink per call and only publishes its contents when the
    call succeeds; a failed call drops everything it emitted.
    """

    def __init__(self, *, config: Optional[VMConfig] = None) -> None:
        self._cfg = config or load_config()
        self._events: List[Event] = []

    # --- Validation helpers -------------------------------------------------

    def _check_ident(self, value: Any, *, what: str, max_len: int) -> str:
        if not isinstance(value, str):
            raise EventError(f"event {what} must be str", where=f"{what}_type")
        if not value:
            raise EventError(f"event {what} must be non-empty", where=f"{what}_empty")
        if len(value) > max_len:
            raise EventError(f"event {what} too long", where=f"{what}_length", len=len(value))
        if not _IDENT_RE.match(value):
            raise EventError(f"event {what} has invalid characters", where=f"{what}_grammar", value=value)
        return value

    def _check_value(self, value: Any) -> FieldValue:
        if isinstance(value, (bytes, bytearray)):
            b = bytes(value)
            if len(b) > MAX_BYTES_LEN:
                raise EventError("event bytes field too long", where="value_bytes_length", len=len(b))
            return b

        if isinstance(value, bool):
            # bool is a subclass of int, so check it before int.
            return value

        if isinstance(value, int):
            if value.bit_length() > MAX_INT_BITS:
                raise EventError("event int field out of range", where="value_int_bits", bits=value.bit_length())
            return int(value)

        if isinstance(value, str):
            if len(value) > MAX_STR_LEN:
                raise EventError("event str field too long", where="value_str_length", len=len(value))
            return value

        raise EventError("unsupported event field type", where="value_type", py_type=type(value).__name__)

    # --- Core sink operations -----------------------------------------------

    def emit(self, name: str, fields: Mapping[str, Any]) -> None:
        ename = self._check_ident(name, what="name", max_len=MAX_EVENT_NAME_LEN)
        if not isinstance(fields, Mapping):
            raise EventError("event fields must be a mapping", where="fields_type")

        checked: Dict[str, FieldValue] = {}
        for raw_k, raw_v in fields.items():
            k = self._check_ident(raw_k, what="key", max_len=MAX_KEY_LEN)
            checked[k] = self._check_value(raw_v)

        if len(self._events) >= self._cfg.max_events_per_call:
            raise EventLimitExceeded(self._cfg.max_events_per_call)
        self._events.append(Event(name=ename, fields=checked))

    @property
    def events(self) -> Tuple[Event, ...]:
        return tuple(self._events)

    def names(self) -> List[str]:
        return [e.name for e in self._events]

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)


__all__ = ["Event", "EventSink", "EventError", "EventLimitExceeded"]
