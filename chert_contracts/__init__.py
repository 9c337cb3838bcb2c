"""
Chert contracts — ledgers that run on the Silica host.

- ``crc20``   fungible ledger (conserved supply, allowances)
- ``crc721``  unique-asset registry (single owner, approvals, enumeration)
- ``stdlib``  shared math, validation, reentrancy and entry-point helpers
"""

from silica_vm.version import __version__

__all__ = ["__version__"]
