"""Error taxonomy shared by the service layers and the HTTP boundary.

Every error that reaches the HTTP layer is rendered as the JSON envelope
``{"success": false, "error": {"code", "message", "details"?}}`` by
:func:`to_error_response`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

GENERIC_ERROR_MESSAGE = "An unexpected error occurred"


class ErrorCode(str, Enum):
    """Machine-readable error codes"""

    # Generic
    INTERNAL_ERROR = "INTERNAL_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    # Auth
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    INVALID_TOKEN = "INVALID_TOKEN"
    EXPIRED_TOKEN = "EXPIRED_TOKEN"

    # Validation
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"

    RATE_LIMITED = "RATE_LIMITED"
    DATABASE_ERROR = "DATABASE_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"


STATUS_BY_CODE: Dict[ErrorCode, int] = {
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.BAD_REQUEST: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.INVALID_TOKEN: 401,
    ErrorCode.EXPIRED_TOKEN: 401,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INVALID_INPUT: 400,
    ErrorCode.RATE_LIMITED: 429,
    ErrorCode.DATABASE_ERROR: 500,
    ErrorCode.EXTERNAL_SERVICE_ERROR: 502,
}


class BabylonError(Exception):
    """Base application error carrying a code and an HTTP status.

    Attributes:
        code: Machine-readable error code
        status_code: HTTP status used at the API boundary
        message: Human-readable message
        context: Optional structured details exposed to the client
        timestamp: When the error was created (UTC)
        is_operational: True for expected failures whose message is safe to show
    """

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
        is_operational: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code if status_code is not None else STATUS_BY_CODE[code]
        self.context = context
        self.timestamp = datetime.now(timezone.utc)
        self.is_operational = is_operational
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": type(self).__name__,
            "code": self.code.value,
            "message": self.message,
            "statusCode": self.status_code,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }


class ValidationError(BabylonError):
    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, code=ErrorCode.VALIDATION_ERROR, context=context, cause=cause)


class NotFoundError(BabylonError):
    def __init__(self, resource: str, resource_id: Optional[str] = None):
        message = f"{resource} not found: {resource_id}" if resource_id else f"{resource} not found"
        super().__init__(
            message,
            code=ErrorCode.NOT_FOUND,
            context={"resource": resource, "id": resource_id},
        )


class UnauthorizedError(BabylonError):
    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code=ErrorCode.UNAUTHORIZED)


class ForbiddenError(BabylonError):
    def __init__(self, message: str = "Access denied", context: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.FORBIDDEN, context=context)


class ConflictError(BabylonError):
    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.CONFLICT, context=context)


class RateLimitError(BabylonError):
    """Too many requests. ``status`` mirrors the HTTP status for retry predicates."""

    def __init__(self, retry_after: float, message: str = "Too many requests"):
        super().__init__(message, code=ErrorCode.RATE_LIMITED, context={"retryAfter": retry_after})
        self.retry_after = retry_after
        self.status = self.status_code


class DatabaseError(BabylonError):
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(
            message,
            code=ErrorCode.DATABASE_ERROR,
            cause=cause,
            is_operational=False,
        )


class ExternalServiceError(BabylonError):
    def __init__(self, service: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(
            f"{service}: {message}",
            code=ErrorCode.EXTERNAL_SERVICE_ERROR,
            context={"service": service},
            cause=cause,
        )


def is_babylon_error(error: Any) -> bool:
    return isinstance(error, BabylonError)


def is_operational_error(error: Any) -> bool:
    return isinstance(error, BabylonError) and error.is_operational


def status_for(error: Any) -> int:
    """HTTP status to send alongside :func:`to_error_response`"""
    if isinstance(error, BabylonError):
        return error.status_code
    return STATUS_BY_CODE[ErrorCode.INTERNAL_ERROR]


def to_error_response(error: Any, production: bool = False) -> Dict[str, Any]:
    """Render any error as the API error envelope.

    Args:
        error: Exception (or any other value) that reached the boundary
        production: Hide messages of unexpected errors behind a generic one

    Returns:
        JSON-serializable error envelope
    """
    if isinstance(error, BabylonError):
        body: Dict[str, Any] = {"code": error.code.value, "message": error.message}
        if error.context is not None:
            body["details"] = error.context
        return {"success": False, "error": body}

    if isinstance(error, Exception):
        message = GENERIC_ERROR_MESSAGE if production else str(error)
        return {
            "success": False,
            "error": {"code": ErrorCode.INTERNAL_ERROR.value, "message": message},
        }

    return {
        "success": False,
        "error": {"code": ErrorCode.INTERNAL_ERROR.value, "message": GENERIC_ERROR_MESSAGE},
    }
