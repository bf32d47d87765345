import logging
from datetime import datetime, UTC
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Type, TypeVar

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from app.services.results import ErrorKind, ServiceResult

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class ErrorCode(str, Enum):
    """Machine-readable codes carried in every error envelope"""

    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    VALIDATION_FAILED = "validation_failed"
    VALIDATION_ERROR = "validation_error"
    CONFLICT = "conflict"
    HTTP_ERROR = "http_error"
    INTERNAL_SERVER_ERROR = "internal_server_error"


class APIException(HTTPException):
    """
    Base class for errors raised at the HTTP boundary.
    Rendered by api_exception_handler into the standard error envelope.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        code: ErrorCode = ErrorCode.INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(status_code=status_code, detail=message)


class NotFoundException(APIException):
    """A project, task, comment or notification does not exist"""

    def __init__(self, resource: str, identifier: Optional[str] = None):
        super().__init__(
            message=f"{resource} not found",
            status_code=status.HTTP_404_NOT_FOUND,
            code=ErrorCode.NOT_FOUND,
            details={"resource": resource, "identifier": identifier},
        )


class ValidationException(APIException):
    """Well-formed request that breaks a domain rule"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            code=ErrorCode.VALIDATION_FAILED,
            details={"field": field} if field else {},
        )


class AuthenticationException(APIException):
    """Missing, invalid or expired bearer token"""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            code=ErrorCode.UNAUTHORIZED,
        )


class ForbiddenException(APIException):
    """The actor's project role does not allow the action"""

    def __init__(self, message: str = "Forbidden access"):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            code=ErrorCode.FORBIDDEN,
        )


class ConflictError(APIException):
    """Concurrent modification conflict"""

    def __init__(self, message: str, resource: Optional[str] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            code=ErrorCode.CONFLICT,
            details={"resource": resource} if resource else {},
        )


_RESULT_EXCEPTIONS: Dict[ErrorKind, Callable[[ServiceResult], APIException]] = {
    ErrorKind.NOT_FOUND: lambda result: NotFoundException(
        result.details.get("resource", "Resource"), result.details.get("identifier")
    ),
    ErrorKind.FORBIDDEN: lambda result: ForbiddenException(result.message),
    ErrorKind.VALIDATION_FAILED: lambda result: ValidationException(
        result.message, result.details.get("field")
    ),
    ErrorKind.CONFLICT: lambda result: ConflictError(result.message),
}


def raise_for_result(result: ServiceResult) -> None:
    """
    Translate a failed service result into the matching API exception.
    Successful results pass through untouched.
    :param result: Outcome of a service operation.
    :raises APIException: The subclass matching the result's error kind.
    """
    if result.ok:
        return

    kind = result.error.value if result.error else "error"
    logger.warning(f"Request rejected ({kind}): {result.message}")

    build = _RESULT_EXCEPTIONS.get(result.error)
    if build is None:
        raise APIException(result.message)
    raise build(result)


def validate_body(model: Type[ModelT], payload: Any) -> ModelT:
    """
    Validate a request body the route accepted unparsed.
    :param model: Schema to validate against.
    :param payload: Decoded JSON body.
    :return: The validated model.
    :raises RequestValidationError: Rendered like any other malformed body.
    """
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        errors = [{**error, "loc": ("body", *error["loc"])} for error in e.errors()]
        raise RequestValidationError(errors, body=payload) from e


def format_error_response(
    message: str,
    code: ErrorCode = ErrorCode.INTERNAL_SERVER_ERROR,
    details: Optional[Dict[str, Any]] = None,
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
) -> Dict[str, Any]:
    """Build the error envelope shared by every handler"""
    return {
        "error": True,
        "success": False,
        "message": message,
        "code": code.value,
        "status_code": status_code,
        "timestamp": datetime.now(UTC).isoformat(),
        "details": details or {},
    }


def _error_json(
    status_code: int,
    message: str,
    code: ErrorCode,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=format_error_response(
            message=message, code=code, details=details, status_code=status_code
        ),
    )


def _readable_message(error: Dict[str, Any]) -> str:
    ctx = error.get("ctx") or {}
    error_type = error["type"]

    if error_type == "missing":
        return "This field is required"
    if error_type == "string_too_short":
        return f"Text is too short (minimum {ctx.get('min_length', 'unknown')} characters)"
    if error_type == "string_too_long":
        return f"Text is too long (maximum {ctx.get('max_length', 'unknown')} characters)"
    if error_type == "enum":
        return f"Value must be one of: {ctx.get('expected', 'unknown')}"
    if error_type == "uuid_parsing":
        return "Value must be a valid UUID"
    return error["msg"]


def _field_errors(errors: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
    field_errors = []
    for error in errors:
        path = [str(loc) for loc in error["loc"] if loc not in ("body", "query", "path")]
        field_errors.append(
            {
                "field": ".".join(path) if path else "unknown",
                "message": _readable_message(error),
                "type": error["type"],
            }
        )
    return field_errors


async def api_exception_handler(request: Request, exc: APIException) -> JSONResponse:
    """Render APIException and its subclasses"""
    return _error_json(exc.status_code, exc.message, exc.code, exc.details)


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render malformed request bodies, paths and query strings"""
    return _error_json(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation failed",
        ErrorCode.VALIDATION_ERROR,
        {"errors": _field_errors(exc.errors())},
    )


async def pydantic_validation_exception_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """
    Render pydantic errors raised outside request parsing.
    Client input is parsed by FastAPI or validate_body, so anything reaching
    this handler is a model the server failed to build.
    """
    logger.error(
        f"Model validation failed on {request.method} {request.url.path}: "
        f"{exc.error_count()} errors in {exc.title}"
    )
    return _error_json(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        ErrorCode.INTERNAL_SERVER_ERROR,
        {"type": type(exc).__name__},
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render plain HTTPExceptions, such as a missing bearer token"""
    return _error_json(exc.status_code, str(exc.detail), ErrorCode.HTTP_ERROR)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions
    """
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return _error_json(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        ErrorCode.INTERNAL_SERVER_ERROR,
        {"type": type(exc).__name__},
    )
