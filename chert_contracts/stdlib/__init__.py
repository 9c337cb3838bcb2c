# -*- coding: utf-8 -*-
"""
chert_contracts.stdlib
======================

Shared building blocks for the Chert ledgers:

- ``math.safe_uint``      checked u64 add/sub
- ``validation``          argument validators and the zero address
- ``control.reentrancy``  storage-backed reentrancy guard
- ``entry``               entry-point decorators (decode, report, respond)
"""

from . import control, math, validation
from .validation import ZERO_ADDRESS

__all__ = ["control", "math", "validation", "ZERO_ADDRESS"]
