"""
Silica runtime package: the host-facing capabilities a contract sees.

    from silica_vm.runtime import Host, Storage, Map, EventSink, CallContext, Env
    from silica_vm.runtime import abi, storage, events  # module namespaces
"""

from __future__ import annotations

from . import abi as abi
from . import events_api as events
from . import storage_api as storage
from .context import CallContext, Env
from .events_api import Event, EventSink
from .host import Host, InvocationResult
from .journal import JournaledBackend
from .storage_api import Map, MemoryBackend, Storage, StorageBackend

__all__ = [
    "abi",
    "events",
    "storage",
    "CallContext",
    "Env",
    "Event",
    "EventSink",
    "Host",
    "InvocationResult",
    "JournaledBackend",
    "Map",
    "MemoryBackend",
    "Storage",
    "StorageBackend",
]
