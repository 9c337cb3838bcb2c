# -*- coding: utf-8 -*-
"""
silica_vm.tests.conftest
========================

Fixtures for the host runtime tests: an explicit default config (independent
of SILICA_VM_* in the caller's environment), a fresh in-memory backend, the
typed storage facade over it, an event sink and a host.
"""
from __future__ import annotations

import os

import pytest

from silica_vm.config import VMConfig
from silica_vm.runtime.context import CallContext, Env
from silica_vm.runtime.events_api import EventSink
from silica_vm.runtime.host import Host
from silica_vm.runtime.storage_api import MemoryBackend, Storage

os.environ.setdefault("PYTHONHASHSEED", "0")
os.environ.setdefault("TZ", "UTC")

DEFAULT_CFG = VMConfig(
    max_call_data_bytes=4096,
    max_return_bytes=4096,
    max_storage_key_bytes=256,
    max_storage_value_bytes=131_072,
    max_events_per_call=256,
    max_address_len=128,
)


@pytest.fixture
def cfg() -> VMConfig:
    return DEFAULT_CFG


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def storage(backend: MemoryBackend, cfg: VMConfig) -> Storage:
    return Storage(backend, config=cfg)


@pytest.fixture
def sink(cfg: VMConfig) -> EventSink:
    return EventSink(config=cfg)


@pytest.fixture
def host(backend: MemoryBackend, cfg: VMConfig) -> Host:
    return Host(backend, contract="test", config=cfg, block_height=7, block_timestamp=1_700_000_000)


@pytest.fixture
def make_env(storage: Storage, sink: EventSink, cfg: VMConfig):
    def _make(sender: str = "alice", call_data: bytes = b"") -> Env:
        ctx = CallContext(sender=sender, contract="test", call_data=call_data)
        return Env(storage=storage, context=ctx, events=sink, config=cfg)

    return _make
