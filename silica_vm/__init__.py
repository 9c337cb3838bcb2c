"""
Silica VM (silica_vm) — deterministic host runtime for Chert contracts.

Public surface:

- __version__ / version(): semantic version string
- run_call(entry_points, method, sender, args=None, *, host=None) -> InvocationResult
    Execute one entry point against a host (a fresh in-memory one by default).

Heavier pieces (runtime, CLI) are imported lazily so that ``silica_vm.errors``
and ``silica_vm.config`` stay importable on their own.
"""

from __future__ import annotations

import importlib
from typing import Any, Mapping, Optional

from .version import __version__


def version() -> str:
    """Return the silica_vm semantic version string."""
    return __version__


def run_call(
    entry_points: Mapping[str, Any],
    method: str,
    sender: str,
    args: Optional[Mapping[str, Any]] = None,
    *,
    host: Any = None,
) -> Any:
    """Invoke ``method`` once and return the ``InvocationResult``."""
    host_mod = importlib.import_module(".runtime.host", __name__)
    h = host if host is not None else host_mod.Host()
    return h.invoke(entry_points, method, sender, args)


__all__ = ["__version__", "version", "run_call"]
