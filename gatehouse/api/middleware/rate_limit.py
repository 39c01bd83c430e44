"""
Rate Limiting Middleware

This module implements per-client rate limiting using a fixed-window counter.

Behaviour:
- Each client key owns a record {count, reset_at}
- When the current time passes reset_at the count restarts in a new window
- Requests beyond max_requests inside a window are rejected with 429
- X-RateLimit-* headers are emitted on every limited response, allowed or not

Pattern: Strategy pattern (RateLimiter interface) + pipeline stage
"""

import asyncio
import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from gatehouse.core.exceptions import RateLimitExceededError
from gatehouse.observability.logging import get_logger
from gatehouse.pipeline.chain import CallNext
from gatehouse.pipeline.context import RequestContext


logger = get_logger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


# =============================================================================
# Rate Limit Result
# =============================================================================


@dataclass
class RateLimitResult:
    """
    Result of a rate limit check.

    Contains data for X-RateLimit-* headers.

    Attributes:
        allowed: Whether the request is allowed
        limit: Maximum requests per window
        remaining: Remaining requests in current window
        reset_at: Unix timestamp (seconds) when the window resets
        retry_after: Seconds to wait before retrying (if blocked)
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after: Optional[int] = None

    def headers(self) -> dict[str, str]:
        """X-RateLimit-* headers describing this result."""
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_at),
        }


@dataclass
class RateRecord:
    """Per-key window state: requests counted and window end (epoch ms)."""

    count: int
    reset_at_ms: int


# =============================================================================
# Rate Limiter Interface
# =============================================================================


class RateLimiter(ABC):
    """
    Abstract interface for rate limiting algorithms.

    Implementations:
    - FixedWindowRateLimiter: in-memory fixed window, single process
    """

    message: str = "Too many requests"

    @abstractmethod
    async def check(self, client_key: str) -> RateLimitResult:
        """
        Count a request from client_key and decide whether it may proceed.

        Args:
            client_key: Unique identifier for the client (IP address)

        Returns:
            RateLimitResult with allowed status and rate limit info
        """


# =============================================================================
# In-Memory Fixed Window Implementation
# =============================================================================


class FixedWindowRateLimiter(RateLimiter):
    """
    In-memory fixed-window counter keyed by client identity.

    The read-modify-write on a record happens without any await in between,
    so it is atomic on the event loop; the per-client asyncio.Lock keeps that
    true for subclasses whose storage awaits.

    Args:
        window_ms: Window length in milliseconds
        max_requests: Requests allowed per window
        message: Rejection message
        clock: Returns the current time in epoch milliseconds
    """

    def __init__(
        self,
        window_ms: int = 15 * 60 * 1000,
        max_requests: int = 100,
        message: str = "Too many requests",
        clock: Callable[[], int] = _now_ms,
    ):
        if window_ms <= 0:
            raise ValueError("window_ms must be positive")
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")
        self.window_ms = window_ms
        self.max_requests = max_requests
        self.message = message
        self._clock = clock
        self._records: dict[str, RateRecord] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def _get_lock(self, client_key: str) -> asyncio.Lock:
        if client_key not in self._locks:
            self._locks[client_key] = asyncio.Lock()
        return self._locks[client_key]

    async def check(self, client_key: str) -> RateLimitResult:
        async with self._get_lock(client_key):
            now = self._clock()

            record = self._records.get(client_key)
            if record is None:
                record = RateRecord(count=0, reset_at_ms=now + self.window_ms)
                self._records[client_key] = record

            # Window expired: start a new one
            if now > record.reset_at_ms:
                record.count = 0
                record.reset_at_ms = now + self.window_ms

            record.count += 1

            allowed = record.count <= self.max_requests
            result = RateLimitResult(
                allowed=allowed,
                limit=self.max_requests,
                remaining=max(0, self.max_requests - record.count),
                reset_at=math.ceil(record.reset_at_ms / 1000),
            )
            if not allowed:
                result.retry_after = max(1, math.ceil((record.reset_at_ms - now) / 1000))
            return result

    def get_record(self, client_key: str) -> Optional[RateRecord]:
        """Current record for a key, if any (for inspection)."""
        return self._records.get(client_key)

    def purge_expired(self) -> int:
        """
        Drop records whose window has ended.

        Returns:
            Number of records removed
        """
        now = self._clock()
        stale = [key for key, record in self._records.items() if now > record.reset_at_ms]
        for key in stale:
            del self._records[key]
            lock = self._locks.get(key)
            if lock is not None and not lock.locked():
                del self._locks[key]
        return len(stale)


# =============================================================================
# Pipeline Stage
# =============================================================================


class RateLimitStage:
    """
    Pipeline stage enforcing the limiter on a path prefix.

    Features:
    - X-RateLimit-* headers on every limited response
    - 429 {success, message, retryAfter} with Retry-After when exceeded
    - Result attached to the RequestContext for downstream handlers
    """

    def __init__(self, rate_limiter: RateLimiter, path_prefix: str = "/api/"):
        self.rate_limiter = rate_limiter
        self.path_prefix = path_prefix

    async def __call__(self, request: Request, call_next: CallNext) -> Response:
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        context = RequestContext.of(request)
        result = await self.rate_limiter.check(context.client)
        context.rate_limit = result

        if not result.allowed:
            logger.warning(
                "rate_limit.exceeded",
                client=context.client,
                path=request.url.path,
                limit=result.limit,
                reset_at=result.reset_at,
            )
            error = RateLimitExceededError(
                self.rate_limiter.message, result.retry_after, limit=result.limit
            )
            return JSONResponse(
                status_code=error.status_code,
                content=error.to_body(),
                headers={**result.headers(), "Retry-After": str(result.retry_after)},
            )

        response = await call_next(request)
        for name, value in result.headers().items():
            response.headers[name] = value
        return response
