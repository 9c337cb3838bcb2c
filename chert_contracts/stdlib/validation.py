# -*- coding: utf-8 -*-
"""
chert_contracts.stdlib.validation
=================================

Input validators applied at the top of every state-changing operation, before
any mutable state is read. Each returns the (normalized) value or raises
``InvalidArgument`` with the offending field attached.

Addresses are opaque strings: non-empty, free of whitespace and control
characters, and bounded by ``VMConfig.address_limit`` so that an address pair
always fits one storage key. The zero address ``"0x0"`` passes validation;
callers that must reject it do so explicitly via ``require_not_zero``.
"""

from __future__ import annotations

from typing import Final, Optional

from silica_vm.config import VMConfig, load_config
from silica_vm.errors import InvalidArgument

from .math.safe_uint import U8_MAX, U64_MAX, is_u64

ZERO_ADDRESS: Final[str] = "0x0"


def validate_address(addr: object, field: str = "address", *, config: Optional[VMConfig] = None) -> str:
    cfg = config or load_config()
    if not isinstance(addr, str):
        raise InvalidArgument("address must be a string", field=field)
    if not addr:
        raise InvalidArgument("address must not be empty", field=field)
    if len(addr) > cfg.address_limit:
        raise InvalidArgument(f"address longer than {cfg.address_limit} characters", field=field)
    if any(ch.isspace() or not ch.isprintable() for ch in addr):
        raise InvalidArgument("address contains whitespace or control characters", field=field)
    return addr


def require_not_zero(addr: str, field: str = "address") -> str:
    if addr == ZERO_ADDRESS:
        raise InvalidArgument("zero address not allowed", field=field)
    return addr


def validate_u64(n: object, field: str = "value") -> int:
    if not is_u64(n):
        raise InvalidArgument(f"must be an integer in [0, {U64_MAX}]", field=field)
    return int(n)  # type: ignore[arg-type]


def validate_u8(n: object, field: str = "value") -> int:
    if not isinstance(n, int) or isinstance(n, bool) or not 0 <= n <= U8_MAX:
        raise InvalidArgument(f"must be an integer in [0, {U8_MAX}]", field=field)
    return int(n)


def validate_positive_amount(n: object, field: str = "amount") -> int:
    amount = validate_u64(n, field)
    if amount == 0:
        raise InvalidArgument("amount must be greater than zero", field=field)
    return amount


def validate_non_empty(s: object, field: str) -> str:
    if not isinstance(s, str):
        raise InvalidArgument("must be a string", field=field)
    if not s:
        raise InvalidArgument("must not be empty", field=field)
    return s


__all__ = [
    "ZERO_ADDRESS",
    "validate_address",
    "require_not_zero",
    "validate_u64",
    "validate_u8",
    "validate_positive_amount",
    "validate_non_empty",
]
