# -*- coding: utf-8 -*-
"""
chert_contracts.stdlib.control.reentrancy
=========================================

Storage-backed reentrancy lock.

The lock is a single key (``reentrancy_lock``) in the contract's own storage
namespace, present only while a guarded operation is in flight. Nested entry
fails with ``ReentrancyDetected``; release happens on every exit path.

Usage
-----
    guard = ReentrancyGuard(storage)

    def mint(...):
        with guard.enter():
            ...  # load, check, compute, write, emit
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Final, Iterator

from silica_vm.errors import ReentrancyDetected
from silica_vm.runtime.storage_api import Storage

LOCK_KEY: Final[str] = "reentrancy_lock"


class ReentrancyGuard:
    def __init__(self, storage: Storage, key: str = LOCK_KEY) -> None:
        self.storage = storage
        self.key = key

    @property
    def locked(self) -> bool:
        return self.storage.has(self.key)

    @contextmanager
    def enter(self) -> Iterator[None]:
        if self.storage.has(self.key):
            raise ReentrancyDetected()
        self.storage.set(self.key, True)
        try:
            yield
        finally:
            self.storage.delete(self.key)


__all__ = ["LOCK_KEY", "ReentrancyGuard"]
