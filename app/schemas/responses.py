from datetime import datetime, UTC
from typing import Any, Dict, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class MessageResponse(BaseModel):
    """Envelope for operations that return no payload, such as deletes"""

    success: bool = Field(True)
    message: str = Field(...)
    data: None = Field(None)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def __init__(self, message: str, **kwargs):
        super().__init__(message=message, data=None, **kwargs)


class DataResponse(BaseModel, Generic[T]):
    """Envelope carrying a payload"""

    success: bool = Field(True)
    message: str = Field(...)
    data: T = Field(...)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def __init__(self, data: T, message: str = "Operation completed successfully", **kwargs):
        super().__init__(message=message, data=data, **kwargs)


class ErrorResponse(BaseModel):
    """Error envelope rendered by the global exception handlers"""

    error: bool = Field(True)
    success: bool = Field(False)
    message: str
    code: str = Field(..., description="Machine-readable error code")
    status_code: int
    timestamp: datetime
    details: Dict[str, Any] = Field(default_factory=dict)


# Documented on every router that resolves a project role
ERROR_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    401: {"model": ErrorResponse, "description": "Missing or invalid token"},
    403: {"model": ErrorResponse, "description": "Project role does not allow this"},
    404: {"model": ErrorResponse, "description": "Resource not found"},
    422: {"model": ErrorResponse, "description": "Invalid request or domain rule"},
}


__all__ = [
    "MessageResponse",
    "DataResponse",
    "ErrorResponse",
    "ERROR_RESPONSES",
]
