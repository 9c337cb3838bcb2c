"""
silica_vm.runtime.storage_api — deterministic key/value storage for contracts.

Two layers:

- a *bytes* backend (``StorageBackend``) that the host owns and may swap for a
  real state DB or a journaled overlay (see ``silica_vm.runtime.journal``);
- a *typed* facade (``Storage``) that contracts use. Keys and values are
  encoded with canonical CBOR (``cbor2``) so the byte layout is stable across
  processes and Python versions.

Keys may be ``str``, ``int`` or tuples of those. ``Map(storage, prefix)``
namespaces a logical map, e.g. ``Map(storage, "balances")["alice"]`` lives at
the encoded key ``("balances", "alice")``.

Byte caps (``max_storage_key_bytes``, ``max_storage_value_bytes``) come from
``silica_vm.config``; violating them raises ``StorageError``.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Iterator, Optional, Protocol, Tuple, Union, runtime_checkable

import cbor2

from silica_vm.config import VMConfig, load_config
from silica_vm.errors import DeserializationFailed, SerializationFailed, StorageError

KeyPart = Union[str, int]
Key = Union[KeyPart, Tuple[Any, ...]]


# ---------------------------- Backend API ---------------------------- #


@runtime_checkable
class StorageBackend(Protocol):
    """Minimal backend interface for contract storage."""

    def get(self, key: bytes) -> Optional[bytes]: ...
    def set(self, key: bytes, value: bytes) -> None: ...
    def delete(self, key: bytes) -> None: ...
    def exists(self, key: bytes) -> bool: ...


class MemoryBackend:
    """Thread-safe in-memory backend for local runs and tests."""

    def __init__(self, initial: Optional[Dict[bytes, bytes]] = None) -> None:
        self._store: Dict[bytes, bytes] = dict(initial or {})
        self._lock = threading.RLock()

    def get(self, key: bytes) -> Optional[bytes]:
        with self._lock:
            return self._store.get(key)

    def set(self, key: bytes, value: bytes) -> None:
        with self._lock:
            self._store[key] = value

    def delete(self, key: bytes) -> None:
        with self._lock:
            self._store.pop(key, None)

    def exists(self, key: bytes) -> bool:
        with self._lock:
            return key in self._store

    def items(self) -> Iterator[Tuple[bytes, bytes]]:
        """Sorted snapshot of all entries (stable iteration order)."""
        with self._lock:
            snapshot = sorted(self._store.items())
        return iter(snapshot)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


# ------------------------------ Encoding ------------------------------ #


def _check_key_part(part: Any) -> None:
    if isinstance(part, bool) or not isinstance(part, (str, int, tuple)):
        raise StorageError(
            "storage key parts must be str, int or tuple",
            data={"type": type(part).__name__},
        )
    if isinstance(part, tuple):
        for p in part:
            _check_key_part(p)


def encode_key(key: Key) -> bytes:
    """Canonical CBOR encoding of a typed storage key."""
    _check_key_part(key)
    return cbor2.dumps(key, canonical=True)


def encode_value(value: Any) -> bytes:
    try:
        return cbor2.dumps(value, canonical=True)
    except (cbor2.CBOREncodeError, TypeError, ValueError) as e:
        raise SerializationFailed(f"cannot encode storage value: {e}") from e


def decode_value(raw: bytes) -> Any:
    try:
        return cbor2.loads(raw)
    except (cbor2.CBORDecodeError, ValueError) as e:
        raise DeserializationFailed(f"corrupt storage value: {e}") from e


# --------------------------- Contract-facing API --------------------------- #


class Storage:
    """
    Typed storage facade bound to one backend.

    ``get`` returns ``None`` for absent keys; stored values are never ``None``
    (writing ``None`` is rejected so absence stays unambiguous).
    """

    def __init__(self, backend: Optional[StorageBackend] = None, *, config: Optional[VMConfig] = None) -> None:
        self.backend: StorageBackend = backend if backend is not None else MemoryBackend()
        self._cfg = config or load_config()

    def _key(self, key: Key) -> bytes:
        raw = encode_key(key)
        if len(raw) > self._cfg.max_storage_key_bytes:
            raise StorageError(
                "storage key too long",
                data={"len": len(raw), "limit": self._cfg.max_storage_key_bytes},
            )
        return raw

    def get(self, key: Key, default: Any = None) -> Any:
        raw = self.backend.get(self._key(key))
        if raw is None:
            return default
        return decode_value(raw)

    def set(self, key: Key, value: Any) -> None:
        if value is None:
            raise StorageError("cannot store None; use delete()")
        raw = encode_value(value)
        if len(raw) > self._cfg.max_storage_value_bytes:
            raise StorageError(
                "storage value too large",
                data={"len": len(raw), "limit": self._cfg.max_storage_value_bytes},
            )
        self.backend.set(self._key(key), raw)

    def has(self, key: Key) -> bool:
        return self.backend.exists(self._key(key))

    def delete(self, key: Key) -> None:
        """Delete `key` if present (no-op otherwise)."""
        self.backend.delete(self._key(key))


class Map:
    """A namespaced view over ``Storage``: ``Map(storage, "balances")``."""

    def __init__(self, storage: Storage, prefix: str) -> None:
        if not isinstance(prefix, str) or not prefix:
            raise StorageError("map prefix must be a non-empty str")
        self.storage = storage
        self.prefix = prefix

    def _k(self, key: Key) -> Tuple[Any, ...]:
        return (self.prefix, key)

    def get(self, key: Key, default: Any = None) -> Any:
        return self.storage.get(self._k(key), default)

    def set(self, key: Key, value: Any) -> None:
        self.storage.set(self._k(key), value)

    def has(self, key: Key) -> bool:
        return self.storage.has(self._k(key))

    def delete(self, key: Key) -> None:
        self.storage.delete(self._k(key))

    def __contains__(self, key: Key) -> bool:
        return self.has(key)

    def __repr__(self) -> str:
        return f"Map({self.prefix!r})"


__all__ = [
    "StorageBackend",
    "MemoryBackend",
    "Storage",
    "Map",
    "encode_key",
    "encode_value",
    "decode_value",
]
