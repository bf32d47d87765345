from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Failure tags returned by service operations"""

    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    VALIDATION_FAILED = "validation_failed"
    CONFLICT = "conflict"  # reserved for optimistic-lock violations


class ServiceResult(Generic[T]):
    """
    Outcome of a service operation.
    Either ok with a data payload, or failed with an ErrorKind and a message.
    Callers at the HTTP boundary translate failures into transport errors.
    """

    def __init__(
        self,
        ok: bool,
        message: str,
        data: Optional[T] = None,
        error: Optional[ErrorKind] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.ok = ok
        self.message = message
        self.data = data
        self.error = error
        self.details = details or {}

    @classmethod
    def success(cls, data: Optional[T] = None, message: str = "Success") -> "ServiceResult[T]":
        return cls(ok=True, message=message, data=data)

    @classmethod
    def not_found(cls, resource: str, identifier: Any = None) -> "ServiceResult[T]":
        message = f"{resource} not found"
        return cls(
            ok=False,
            message=message,
            error=ErrorKind.NOT_FOUND,
            details={
                "resource": resource,
                "identifier": str(identifier) if identifier is not None else None,
            },
        )

    @classmethod
    def forbidden(cls, message: str) -> "ServiceResult[T]":
        return cls(ok=False, message=message, error=ErrorKind.FORBIDDEN)

    @classmethod
    def invalid(cls, message: str, field: Optional[str] = None) -> "ServiceResult[T]":
        return cls(
            ok=False,
            message=message,
            error=ErrorKind.VALIDATION_FAILED,
            details={"field": field} if field else {},
        )

    @classmethod
    def conflict(cls, message: str) -> "ServiceResult[T]":
        return cls(ok=False, message=message, error=ErrorKind.CONFLICT)

    def to_dict(self) -> Dict[str, Any]:
        """Envelope form: success flag, message and data or error kind"""
        if self.ok:
            return {"success": True, "message": self.message, "data": self.data}
        return {
            "success": False,
            "message": self.message,
            "error": self.error.value if self.error else None,
        }

    def __bool__(self) -> bool:
        return self.ok

    def __repr__(self) -> str:
        if self.ok:
            return f"<ServiceResult(ok=True, message={self.message!r})>"
        return f"<ServiceResult(ok=False, error={self.error}, message={self.message!r})>"
