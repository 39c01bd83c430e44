"""
Request Logging Middleware

This module implements the request logging stages of the pipeline.

Stages:
- RequestCounterStage: process-lifetime counters, request ordinal, request ID
- BasicLoggerStage: one line per request at receipt
- PerformanceStage: warns about requests slower than a threshold
- DetailedLogger: full request/response record via an on-complete hook,
  colour-coded console line plus a daily access log file
- ErrorLoggerStage: records unhandled errors to the daily error log,
  then re-raises to the next error handler

Console lines go through the stdlib ``logging`` module; sensitive headers
are redacted before anything is written.
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Optional

from starlette.requests import Request
from starlette.responses import Response

from gatehouse.observability.logging import request_id_context
from gatehouse.observability.metrics import RequestStats
from gatehouse.observability.sinks import DailyLogSink
from gatehouse.pipeline.chain import CallNext
from gatehouse.pipeline.context import RequestContext


logger = logging.getLogger(__name__)


# =============================================================================
# Sensitive Header Redaction
# Pattern: Security - never log credentials
# =============================================================================

# Headers that should be redacted (case-insensitive matching)
SENSITIVE_HEADER_PATTERNS = [
    "authorization",
    "api-key",
    "apikey",
    "x-api-key",
    "api_key",
    "x-auth-token",
    "cookie",
    "set-cookie",
]

SENSITIVE_QUERY_PARAMS = frozenset({"token", "password"})


def redact_sensitive_headers(headers: dict[str, str]) -> dict[str, str]:
    """
    Redact sensitive headers from a headers dictionary.

    Args:
        headers: Dictionary of HTTP headers

    Returns:
        Dictionary with sensitive values replaced with [REDACTED]
    """
    redacted = {}
    for key, value in headers.items():
        key_lower = key.lower()
        is_sensitive = any(
            pattern in key_lower for pattern in SENSITIVE_HEADER_PATTERNS
        )
        redacted[key] = "[REDACTED]" if is_sensitive else value
    return redacted


def redact_query(params: dict[str, str]) -> dict[str, str]:
    """Redact token/password query parameters."""
    return {
        key: "[REDACTED]" if key.lower() in SENSITIVE_QUERY_PARAMS else value
        for key, value in params.items()
    }


# =============================================================================
# Status Colours
# =============================================================================

GREEN = "\x1b[32m"
YELLOW = "\x1b[33m"
RED = "\x1b[31m"
MAGENTA = "\x1b[35m"
RESET = "\x1b[0m"


def status_color(status_code: int) -> str:
    """ANSI colour for a status class: 2xx green, 3xx yellow, 4xx red, 5xx magenta."""
    if 200 <= status_code < 300:
        return GREEN
    if 300 <= status_code < 400:
        return YELLOW
    if 400 <= status_code < 500:
        return RED
    if status_code >= 500:
        return MAGENTA
    return RESET


def _path_with_query(request: Request) -> str:
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


# =============================================================================
# Request Counter
# =============================================================================


class RequestCounterStage:
    """Count every request and bind its ordinal as the structured-log request ID."""

    def __init__(self, stats: RequestStats):
        self.stats = stats

    async def __call__(self, request: Request, call_next: CallNext) -> Response:
        context = RequestContext.of(request)
        context.request_number = self.stats.record_request(request.method, request.url.path)
        with request_id_context(str(context.request_number)):
            return await call_next(request)


# =============================================================================
# Basic Logger
# =============================================================================


class BasicLoggerStage:
    """One line per request at receipt: timestamp, method, path, client."""

    async def __call__(self, request: Request, call_next: CallNext) -> Response:
        context = RequestContext.of(request)
        logger.info(
            f"[{context.received_at.isoformat()}] {request.method} "
            f"{_path_with_query(request)} - {context.client}"
        )
        return await call_next(request)


# =============================================================================
# Performance Guard
# =============================================================================


class PerformanceStage:
    """
    Observational slow-request warning.

    Measures its own elapsed time around the rest of the chain; never alters
    the response.
    """

    def __init__(self, threshold_ms: float = 1000.0):
        self.threshold_ms = threshold_ms

    async def __call__(self, request: Request, call_next: CallNext) -> Response:
        context = RequestContext.of(request)
        started = context.elapsed_ms()
        response = await call_next(request)
        duration_ms = context.elapsed_ms() - started
        if duration_ms > self.threshold_ms:
            logger.warning(
                f"SLOW REQUEST: {request.method} {_path_with_query(request)} "
                f"took {duration_ms:.2f}ms"
            )
        return response


# =============================================================================
# Detailed Logger
# =============================================================================


class DetailedLogger:
    """
    Full request/response logging through an on-complete hook.

    At receipt the request metadata is captured; when the pipeline has the
    final response the hook adds status, duration and response time, writes
    a colour-coded console line and appends one JSON record to the access
    log.

    Usable as a global stage or, via ``begin``, from a route dependency.
    """

    def __init__(self, sink: DailyLogSink, colors: bool = True):
        self.sink = sink
        self.colors = colors

    def begin(self, request: Request, context: Optional[RequestContext] = None) -> None:
        """Capture request metadata and register the completion hook."""
        context = context or RequestContext.of(request)
        record: dict[str, Any] = {
            "timestamp": context.received_at.isoformat(),
            "method": request.method,
            "url": _path_with_query(request),
            "ip": context.client,
            "userAgent": request.headers.get("user-agent"),
            "headers": redact_sensitive_headers(dict(request.headers)),
            "query": redact_query(dict(request.query_params)),
        }

        async def finish(ctx: RequestContext, response: Response) -> None:
            duration_ms = ctx.elapsed_ms()
            record["params"] = dict(request.path_params)
            record["statusCode"] = response.status_code
            record["durationMs"] = round(duration_ms, 2)
            record["responseTime"] = datetime.now(timezone.utc).isoformat()
            logger.info(self.format_line(record))
            await self.sink.write(record)

        context.on_complete(finish)

    def format_line(self, record: dict[str, Any]) -> str:
        """Console summary line for a completed record."""
        status = record["statusCode"]
        if self.colors:
            status_text = f"{status_color(status)}{status}{RESET}"
        else:
            status_text = str(status)
        return (
            f"{record['method']} {record['url']} {status_text} "
            f"{record['durationMs']}ms - {record['ip']}"
        )

    async def __call__(self, request: Request, call_next: CallNext) -> Response:
        self.begin(request)
        return await call_next(request)


# =============================================================================
# Error Logger
# =============================================================================


class ErrorLoggerStage:
    """
    Record unhandled errors, then re-raise to the next error handler.

    The error record carries timestamp, method, path, client, the error's
    name/message/stack and the authenticated principal if one was attached.
    """

    def __init__(self, sink: DailyLogSink, stats: RequestStats):
        self.sink = sink
        self.stats = stats

    async def __call__(self, request: Request, call_next: CallNext) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            context = RequestContext.of(request)
            await self.record(request, context, e)
            raise

    async def record(self, request: Request, context: RequestContext, error: Exception) -> None:
        timestamp = datetime.now(timezone.utc).isoformat()
        principal = context.principal
        record = {
            "timestamp": timestamp,
            "method": request.method,
            "url": _path_with_query(request),
            "ip": context.client,
            "error": {
                "name": type(error).__name__,
                "message": str(error),
                "stack": "".join(
                    traceback.format_exception(type(error), error, error.__traceback__)
                ),
            },
            "user": (
                {"id": principal.id, "username": principal.username}
                if principal is not None
                else None
            ),
        }
        logger.error(
            f"[{timestamp}] ERROR in {request.method} {request.url.path}: "
            f"{type(error).__name__}: {error}"
        )
        context.error = error
        self.stats.record_error()
        await self.sink.write(record)
