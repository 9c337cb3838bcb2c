"""Execution-control helpers for Chert contracts."""

from .reentrancy import LOCK_KEY, ReentrancyGuard

__all__ = ["LOCK_KEY", "ReentrancyGuard"]
