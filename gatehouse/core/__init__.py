"""
Core module for Gatehouse.

This module contains configuration, exceptions, and shared utilities.
"""

from gatehouse.core.config import Settings, get_settings
from gatehouse.core.exceptions import (
    AuthError,
    ErrorCode,
    ForbiddenError,
    GatehouseException,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
    RateLimitExceededError,
    SessionExpiredError,
    UnauthenticatedError,
    ValidationFailedError,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Exceptions
    "ErrorCode",
    "GatehouseException",
    "ValidationFailedError",
    "AuthError",
    "MissingTokenError",
    "InvalidTokenError",
    "SessionExpiredError",
    "InvalidCredentialsError",
    "UnauthenticatedError",
    "ForbiddenError",
    "RateLimitExceededError",
]
