"""
API Middleware Package

This package contains the pipeline stages mounted in front of the router.

Middleware Components:
- logging: request counter, basic/detailed/error logging, slow-request guard
- rate_limit: fixed-window rate limiting with X-RateLimit-* headers
"""

from gatehouse.api.middleware.logging import (
    BasicLoggerStage,
    DetailedLogger,
    ErrorLoggerStage,
    PerformanceStage,
    RequestCounterStage,
    redact_sensitive_headers,
    status_color,
)
from gatehouse.api.middleware.rate_limit import (
    FixedWindowRateLimiter,
    RateLimiter,
    RateLimitResult,
    RateLimitStage,
    RateRecord,
)

__all__ = [
    # Logging
    "RequestCounterStage",
    "BasicLoggerStage",
    "PerformanceStage",
    "DetailedLogger",
    "ErrorLoggerStage",
    "redact_sensitive_headers",
    "status_color",
    # Rate Limiting
    "RateLimiter",
    "FixedWindowRateLimiter",
    "RateLimitResult",
    "RateLimitStage",
    "RateRecord",
]
