"""CRC-721: unique-asset registry core (``registry``) and its entry points (``contract``)."""

from .contract import ENTRY_POINTS
from .registry import OwnershipRegistry

__all__ = ["ENTRY_POINTS", "OwnershipRegistry"]
