"""
silica_vm.config — runtime numeric caps for the deterministic contract host.

This module centralizes the static bounds the host and contracts enforce. It
has NO third-party deps and is safe to import very early.

Configuration precedence:
  1) Environment variables (SILICA_VM_*)
  2) Hardcoded safe defaults below

Key env vars:
  - SILICA_VM_MAX_CALL_DATA_BYTES    (int)    default: 4096
  - SILICA_VM_MAX_RETURN_BYTES       (int)    default: 4096
  - SILICA_VM_MAX_STORAGE_KEY_BYTES  (int)    default: 256
  - SILICA_VM_MAX_STORAGE_VAL_BYTES  (int)    default: 131_072   (128 KiB)
  - SILICA_VM_MAX_EVENTS_PER_CALL    (int)    default: 256
  - SILICA_VM_MAX_ADDRESS_LEN        (int)    default: 128

Addresses are also bounded by the key cap: two of them plus a map prefix must
fit in one storage key (see ``VMConfig.address_limit``).

Out-of-range values are clamped into the allowed window; unparsable values fall
back to the default.

Usage:
    from silica_vm.config import load_config
    CFG = load_config()
    if len(payload) > CFG.max_call_data_bytes: ...
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict

# Bytes reserved in a composite storage key for the CBOR array headers and a
# map prefix of up to 24 characters.
COMPOSITE_KEY_OVERHEAD = 32


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


@dataclass(frozen=True)
class VMConfig:
    max_call_data_bytes: int
    max_return_bytes: int
    max_storage_key_bytes: int
    max_storage_value_bytes: int
    max_events_per_call: int
    max_address_len: int

    @property
    def address_limit(self) -> int:
        """Longest address such that a `(prefix, (addr, addr))` key fits the key cap."""
        # each address costs its length plus up to 3 bytes of CBOR string header
        fits = (self.max_storage_key_bytes - COMPOSITE_KEY_OVERHEAD) // 2 - 3
        return max(3, min(self.max_address_len, fits))

    def as_dict(self) -> Dict[str, Any]:
        return {
            "max_call_data_bytes": self.max_call_data_bytes,
            "max_return_bytes": self.max_return_bytes,
            "max_storage_key_bytes": self.max_storage_key_bytes,
            "max_storage_value_bytes": self.max_storage_value_bytes,
            "max_events_per_call": self.max_events_per_call,
            "max_address_len": self.max_address_len,
            "address_limit": self.address_limit,
        }


@lru_cache(maxsize=1)
def load_config() -> VMConfig:
    """
    Build and cache a VMConfig from environment + safe defaults.
    """
    return VMConfig(
        max_call_data_bytes=_env_int("SILICA_VM_MAX_CALL_DATA_BYTES", 4096, min_v=256, max_v=1_048_576),
        max_return_bytes=_env_int("SILICA_VM_MAX_RETURN_BYTES", 4096, min_v=256, max_v=1_048_576),
        max_storage_key_bytes=_env_int("SILICA_VM_MAX_STORAGE_KEY_BYTES", 256, min_v=64, max_v=4096),
        max_storage_value_bytes=_env_int("SILICA_VM_MAX_STORAGE_VAL_BYTES", 131_072, min_v=64, max_v=8_388_608),
        max_events_per_call=_env_int("SILICA_VM_MAX_EVENTS_PER_CALL", 256, min_v=1, max_v=10_000),
        max_address_len=_env_int("SILICA_VM_MAX_ADDRESS_LEN", 128, min_v=3, max_v=1024),
    )


# Module-level singleton for convenience; load_config() stays the canonical
# (cached) accessor. Tests that tweak env vars call load_config.cache_clear().
CFG: VMConfig = load_config()

__all__ = ["VMConfig", "load_config", "CFG", "COMPOSITE_KEY_OVERHEAD"]
