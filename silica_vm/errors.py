"""
silica_vm.errors — the single error taxonomy shared by the runtime and contracts.

Contracts and the host communicate failures via *typed exceptions*. Every
state-changing operation either completes or raises one of these; entry points
convert them into a log line plus a failed invocation result.

Hierarchy
---------
VmError (base)
 ├─ ContractError         : reportable, deterministic failure of a single call
 │   ├─ InvalidArgument   : bad input (reason, optional field)
 │   │   ├─ NotInitialized
 │   │   └─ AlreadyInitialized
 │   ├─ Unauthorized
 │   ├─ InsufficientBalance(required, available)
 │   ├─ ArithmeticFault
 │   │   ├─ Overflow
 │   │   └─ Underflow
 │   ├─ NotFound / AlreadyExists
 │   ├─ ReentrancyDetected
 │   ├─ SerializationFailed / DeserializationFailed / CallDataUnavailable
 │   └─ StorageError
 └─ FatalError            : aborts the whole invocation (never swallowed)
     ├─ CallDataTooLarge
     └─ ReturnDataTooLarge

These classes import nothing from the rest of the package so they can be used
from the lowest layers (storage, codec) without cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(eq=False)
class VmError(Exception):
    """
    Base runtime error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string (e.g., 'INVALID_ARGUMENT').
        data:    Optional structured details (kept JSON/CBOR-serializable).
    """

    message: str = "vm error"
    code: str = "VM_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a plain dict for receipts/logs."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = dict(self.data)
        return out


class ContractError(VmError):
    """A deterministic, reportable failure of one contract call."""

    def __init__(
        self,
        message: str = "contract error",
        *,
        code: str = "CONTRACT_ERROR",
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code=code, data=data)


class InvalidArgument(ContractError):
    """
    Input rejected before any state was touched.

    Usage:
        raise InvalidArgument("must not be empty", field="name")
    """

    def __init__(
        self,
        reason: str = "invalid argument",
        *,
        field: Optional[str] = None,
        code: str = "INVALID_ARGUMENT",
        data: Optional[Dict[str, Any]] = None,
    ):
        d: Dict[str, Any] = dict(data or {})
        if field is not None:
            d.setdefault("field", field)
        self.reason = reason
        self.field = field
        message = f"{field}: {reason}" if field else reason
        super().__init__(message, code=code, data=d or None)


class NotInitialized(InvalidArgument):
    def __init__(self, what: str = "contract"):
        super().__init__(f"{what} not initialized", code="NOT_INITIALIZED")


class AlreadyInitialized(InvalidArgument):
    def __init__(self, what: str = "contract"):
        super().__init__(f"{what} already initialized", code="ALREADY_INITIALIZED")


class Unauthorized(ContractError):
    def __init__(self, message: str = "caller is not authorized", *, caller: Optional[str] = None):
        super().__init__(
            message,
            code="UNAUTHORIZED",
            data={"caller": caller} if caller is not None else None,
        )


class InsufficientBalance(ContractError):
    """Raised when a debit (balance or allowance) exceeds what is available."""

    def __init__(self, required: int, available: int):
        self.required = int(required)
        self.available = int(available)
        super().__init__(
            f"insufficient balance: required {self.required}, available {self.available}",
            code="INSUFFICIENT_BALANCE",
            data={"required": self.required, "available": self.available},
        )


class ArithmeticFault(ContractError):
    pass


class Overflow(ArithmeticFault):
    def __init__(self, a: int, b: int):
        super().__init__("u64 overflow", code="OVERFLOW", data={"a": a, "b": b})


class Underflow(ArithmeticFault):
    def __init__(self, a: int, b: int):
        super().__init__("u64 underflow", code="UNDERFLOW", data={"a": a, "b": b})


class NotFound(ContractError):
    def __init__(self, message: str = "not found", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="NOT_FOUND", data=data)


class AlreadyExists(ContractError):
    def __init__(self, message: str = "already exists", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="ALREADY_EXISTS", data=data)


class ReentrancyDetected(ContractError):
    def __init__(self, message: str = "reentrant call into guarded operation"):
        super().__init__(message, code="REENTRANCY")


class SerializationFailed(ContractError):
    def __init__(self, message: str = "failed to encode value"):
        super().__init__(message, code="SERIALIZATION_FAILED")


class DeserializationFailed(ContractError):
    def __init__(self, message: str = "failed to decode payload"):
        super().__init__(message, code="DESERIALIZATION_FAILED")


class CallDataUnavailable(ContractError):
    def __init__(self, message: str = "call data is empty"):
        super().__init__(message, code="CALL_DATA_UNAVAILABLE")


class StorageError(ContractError):
    def __init__(self, message: str = "storage error", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="STORAGE_ERROR", data=data)


class FatalError(VmError):
    """Aborts the invocation; the host reverts and re-raises."""

    def __init__(
        self,
        message: str = "fatal error",
        *,
        code: str = "FATAL",
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code=code, data=data)


class CallDataTooLarge(FatalError):
    def __init__(self, size: int, limit: int):
        super().__init__(
            "call data exceeds static bound",
            code="CALL_DATA_TOO_LARGE",
            data={"size": size, "limit": limit},
        )


class ReturnDataTooLarge(FatalError):
    def __init__(self, size: int, limit: int):
        super().__init__(
            "return payload exceeds static bound",
            code="RETURN_DATA_TOO_LARGE",
            data={"size": size, "limit": limit},
        )


__all__ = [
    "VmError",
    "ContractError",
    "InvalidArgument",
    "NotInitialized",
    "AlreadyInitialized",
    "Unauthorized",
    "InsufficientBalance",
    "ArithmeticFault",
    "Overflow",
    "Underflow",
    "NotFound",
    "AlreadyExists",
    "ReentrancyDetected",
    "SerializationFailed",
    "DeserializationFailed",
    "CallDataUnavailable",
    "StorageError",
    "FatalError",
    "CallDataTooLarge",
    "ReturnDataTooLarge",
]
