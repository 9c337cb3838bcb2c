"""CRC-20: fungible ledger core (``ledger``) and its entry points (``contract``)."""

from .contract import ENTRY_POINTS
from .ledger import FungibleLedger

__all__ = ["ENTRY_POINTS", "FungibleLedger"]
