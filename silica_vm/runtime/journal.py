"""
silica_vm.runtime.journal — journaled writes over a storage backend.

``JournaledBackend`` wraps any ``StorageBackend`` with a stack of overlays.
Writes go to the top overlay; reads consult overlays from top → base.
``commit()`` merges the top overlay into the next layer (or the base backend
if it is the last layer). ``revert()`` discards the top overlay.

    j = JournaledBackend(MemoryBackend())
    j.begin()
    j.set(b"k", b"v")
    j.revert()          # b"k" was never written to the base

With no open checkpoint, writes pass straight through to the base.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from silica_vm.errors import FatalError

from .storage_api import StorageBackend

# Deletion marker inside an overlay.
_TOMBSTONE = None


class JournalError(FatalError):
    def __init__(self, message: str):
        super().__init__(message, code="JOURNAL_STATE")


class JournaledBackend:
    def __init__(self, base: StorageBackend) -> None:
        self.base = base
        self._layers: List[Dict[bytes, Optional[bytes]]] = []

    # --- checkpoints ---

    @property
    def depth(self) -> int:
        return len(self._layers)

    def begin(self) -> int:
        """Open a checkpoint; returns the new depth."""
        self._layers.append({})
        return len(self._layers)

    def commit(self) -> None:
        if not self._layers:
            raise JournalError("commit without an open checkpoint")
        top = self._layers.pop()
        if self._layers:
            self._layers[-1].update(top)
            return
        for key in sorted(top):
            value = top[key]
            if value is _TOMBSTONE:
                self.base.delete(key)
            else:
                self.base.set(key, value)

    def revert(self) -> None:
        if not self._layers:
            raise JournalError("revert without an open checkpoint")
        self._layers.pop()

    def pending(self) -> Dict[bytes, Optional[bytes]]:
        """Flattened view of staged changes (``None`` marks a deletion)."""
        out: Dict[bytes, Optional[bytes]] = {}
        for layer in self._layers:
            out.update(layer)
        return out

    # --- StorageBackend ---

    def get(self, key: bytes) -> Optional[bytes]:
        for layer in reversed(self._layers):
            if key in layer:
                return layer[key]
        return self.base.get(key)

    def set(self, key: bytes, value: bytes) -> None:
        if self._layers:
            self._layers[-1][key] = bytes(value)
        else:
            self.base.set(key, bytes(value))

    def delete(self, key: bytes) -> None:
        if self._layers:
            self._layers[-1][key] = _TOMBSTONE
        else:
            self.base.delete(key)

    def exists(self, key: bytes) -> bool:
        return self.get(key) is not None


__all__ = ["JournaledBackend", "JournalError"]
