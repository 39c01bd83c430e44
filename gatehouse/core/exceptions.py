"""
Custom exceptions for Gatehouse.

This module provides a hierarchy of custom exceptions for the request pipeline.
All exceptions inherit from GatehouseException and carry an error code, the
HTTP status they map to, and an optional Thai message, so that a single
exception handler can render the JSON envelope:

    {"success": false, "message": ..., "messageTH": ..., ...extra}

Taxonomy:
- ValidationFailedError (400) - field-level detail
- MissingTokenError / InvalidTokenError / SessionExpiredError (401)
- InvalidCredentialsError / UnauthenticatedError (401)
- ForbiddenError (403) - required roles vs actual role
- RateLimitExceededError (429) - retry-after seconds
"""

from enum import Enum
from typing import Any, Iterable, Optional


# =============================================================================
# Error Codes Enum
# =============================================================================


class ErrorCode(str, Enum):
    """
    Error codes for Gatehouse exceptions.

    These codes provide a consistent way to identify error types
    across the API and in logging.
    """

    GATEHOUSE_ERROR = "GATEHOUSE_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_TOKEN = "MISSING_TOKEN"
    INVALID_TOKEN = "INVALID_TOKEN"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"


# =============================================================================
# Base Exception
# =============================================================================


class GatehouseException(Exception):
    """
    Base exception for all Gatehouse errors.

    Attributes:
        message: Human-readable error message.
        error_code: Machine-readable error code from ErrorCode enum.
        status_code: HTTP status the error maps to.
        message_th: Thai translation of the message (optional).
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.GATEHOUSE_ERROR,
        message_th: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            error_code: Machine-readable error code.
            message_th: Thai translation of the message.
            status_code: Override for the class-level HTTP status.
            **kwargs: Additional attributes to set on the exception.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.message_th = message_th
        if status_code is not None:
            self.status_code = status_code

        for key, value in kwargs.items():
            setattr(self, key, value)

    def extra_fields(self) -> dict[str, Any]:
        """Fields appended to the response body by subclasses."""
        return {}

    def to_body(self) -> dict[str, Any]:
        """Render the exception as the JSON response envelope."""
        body: dict[str, Any] = {"success": False, "message": self.message}
        if self.message_th:
            body["messageTH"] = self.message_th
        body.update(self.extra_fields())
        return body


# =============================================================================
# ValidationFailedError
# =============================================================================


class ValidationFailedError(GatehouseException):
    """
    Raised when a request record fails its validation schema.

    Attributes:
        errors: Ordered list of {field, message, messageTH} dictionaries.
    """

    status_code = 400

    def __init__(
        self,
        errors: list[dict[str, Any]],
        message: str = "Validation failed",
        message_th: str = "ข้อมูลไม่ถูกต้อง",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, ErrorCode.VALIDATION_ERROR, message_th, **kwargs)
        self.errors = errors

    def extra_fields(self) -> dict[str, Any]:
        return {"errors": self.errors}


# =============================================================================
# Authentication Errors (401)
# =============================================================================


class AuthError(GatehouseException):
    """Base class for authentication and authorization failures."""

    status_code = 401


class MissingTokenError(AuthError):
    """No bearer token or token query parameter on the request."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(
            "Authentication token not found, please log in first",
            ErrorCode.MISSING_TOKEN,
            "ไม่พบ token กรุณา login ก่อน",
            **kwargs,
        )


class InvalidTokenError(AuthError):
    """Token does not resolve to a session (or its principal is gone)."""

    def __init__(
        self,
        message: str = "Token is invalid or has expired",
        message_th: str = "Token ไม่ถูกต้องหรือหมดอายุ",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, ErrorCode.INVALID_TOKEN, message_th, **kwargs)


class SessionExpiredError(AuthError):
    """Session outlived its TTL; the record has been evicted."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(
            "Session has expired",
            ErrorCode.SESSION_EXPIRED,
            "Session หมดอายุแล้ว",
            **kwargs,
        )


class InvalidCredentialsError(AuthError):
    """
    Login failed.

    The message never says whether the username or the password was wrong.
    """

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(
            "Invalid username or password",
            ErrorCode.INVALID_CREDENTIALS,
            "Username หรือ password ไม่ถูกต้อง",
            **kwargs,
        )


class UnauthenticatedError(AuthError):
    """Authorization was requested before any principal was attached."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(
            "Please log in first",
            ErrorCode.UNAUTHENTICATED,
            "กรุณา login ก่อน",
            **kwargs,
        )


# =============================================================================
# ForbiddenError (403)
# =============================================================================


class ForbiddenError(AuthError):
    """
    The authenticated principal lacks every one of the required roles.

    Attributes:
        required_roles: Roles that would have been accepted.
        your_role: The principal's actual role.
    """

    status_code = 403

    def __init__(self, required_roles: Iterable[str], your_role: str, **kwargs: Any) -> None:
        super().__init__(
            "You do not have permission to access this resource",
            ErrorCode.FORBIDDEN,
            "คุณไม่มีสิทธิ์เข้าถึง",
            **kwargs,
        )
        self.required_roles = sorted(required_roles)
        self.your_role = your_role

    def extra_fields(self) -> dict[str, Any]:
        return {"requiredRoles": self.required_roles, "yourRole": self.your_role}


# =============================================================================
# RateLimitExceededError (429)
# =============================================================================


class RateLimitExceededError(GatehouseException):
    """
    Raised when a client exceeds its rate limit.

    Attributes:
        retry_after: Seconds until the window resets.
        limit: The limit that was exceeded.
    """

    status_code = 429

    def __init__(
        self,
        message: str,
        retry_after: int,
        limit: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, ErrorCode.RATE_LIMIT_ERROR, **kwargs)
        self.retry_after = retry_after
        self.limit = limit

    def extra_fields(self) -> dict[str, Any]:
        return {"retryAfter": self.retry_after}
