# -*- coding: utf-8 -*-
"""
chert_contracts.stdlib.math.safe_uint
=====================================

Checked unsigned 64-bit arithmetic for Chert ledgers.

Conventions
-----------
- All operations are **integer-only**; ``bool`` is rejected even though it
  subclasses ``int``.
- Operands outside ``[0, U64_MAX]`` raise ``InvalidArgument``.
- ``add`` raises ``Overflow`` when the sum exceeds ``U64_MAX``; ``sub`` raises
  ``Underflow`` when the subtrahend is larger. Nothing wraps or saturates.
"""

from __future__ import annotations

from typing import Final

from silica_vm.errors import InvalidArgument, Overflow, Underflow

U64_MAX: Final[int] = (1 << 64) - 1
U8_MAX: Final[int] = (1 << 8) - 1


def is_u64(x: object) -> bool:
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= U64_MAX


def require_u64(x: object, field: str = "value") -> int:
    if not is_u64(x):
        raise InvalidArgument(f"must be an integer in [0, {U64_MAX}]", field=field)
    return int(x)  # type: ignore[arg-type]


def add(a: int, b: int) -> int:
    """Checked ``a + b``."""
    require_u64(a, "a")
    require_u64(b, "b")
    r = a + b
    if r > U64_MAX:
        raise Overflow(a, b)
    return r


def sub(a: int, b: int) -> int:
    """Checked ``a - b``."""
    require_u64(a, "a")
    require_u64(b, "b")
    if b > a:
        raise Underflow(a, b)
    return a - b


def increment(a: int) -> int:
    return add(a, 1)


def decrement(a: int) -> int:
    return sub(a, 1)


__all__ = ["U64_MAX", "U8_MAX", "is_u64", "require_u64", "add", "sub", "increment", "decrement"]
