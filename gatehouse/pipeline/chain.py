"""
Middleware Pipeline - ordered composition of request stages.

Every stage follows the Starlette ``dispatch(request, call_next)`` contract:
it either awaits ``call_next(request)`` to delegate onward, or returns its
own Response to short-circuit. Stages run in strict declaration order for a
single request.

The pipeline owns two things the stages rely on:
- the per-request RequestContext (created before the first stage runs)
- on-complete hooks, fired with the final response after the chain returns

Pattern: Chain of responsibility mounted as a single BaseHTTPMiddleware
"""

import logging
from typing import Awaitable, Callable, Protocol, Sequence

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from gatehouse.core.exceptions import GatehouseException
from gatehouse.pipeline.context import RequestContext, client_identity


logger = logging.getLogger(__name__)

CallNext = Callable[[Request], Awaitable[Response]]


class Stage(Protocol):
    """A pipeline stage: act, short-circuit, or delegate to ``call_next``."""

    async def __call__(self, request: Request, call_next: CallNext) -> Response:
        ...


def _bind(stage: Stage, call_next: CallNext) -> CallNext:
    async def step(request: Request) -> Response:
        return await stage(request, call_next)

    return step


# =============================================================================
# Pipeline
# =============================================================================


class Pipeline:
    """
    Ordered chain of stages.

    Args:
        stages: Stages in execution order (first runs outermost).
        trust_forwarded_for: Passed to client identification.

    Example:
        >>> pipeline = Pipeline([ErrorResponder(), counter, limiter_stage])
        >>> response = await pipeline.handle(request, endpoint)
    """

    def __init__(self, stages: Sequence[Stage], trust_forwarded_for: bool = False) -> None:
        self._stages = list(stages)
        self._trust_forwarded_for = trust_forwarded_for

    @property
    def stages(self) -> list[Stage]:
        return list(self._stages)

    def compose(self, endpoint: CallNext) -> CallNext:
        """Wrap ``endpoint`` so that stages run first-to-last around it."""
        call_next = endpoint
        for stage in reversed(self._stages):
            call_next = _bind(stage, call_next)
        return call_next

    async def handle(self, request: Request, endpoint: CallNext) -> Response:
        """
        Run one request through the chain.

        Args:
            request: Incoming HTTP request
            endpoint: Terminal handler (the router)

        Returns:
            The final response, after on-complete hooks have run
        """
        context = RequestContext.attach(
            request, client_identity(request, self._trust_forwarded_for)
        )
        response = await self.compose(endpoint)(request)
        await context.complete(response)
        return response


class PipelineMiddleware(BaseHTTPMiddleware):
    """Mount a Pipeline in front of the application's router."""

    def __init__(self, app, pipeline: Pipeline):
        super().__init__(app)
        self.pipeline = pipeline

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        return await self.pipeline.handle(request, call_next)


# =============================================================================
# Terminal Error Responder
# =============================================================================


class ErrorResponder:
    """
    Outermost stage: turn escaped exceptions into JSON envelopes.

    Gatehouse exceptions keep their status and message. Anything else becomes
    a sanitized 500; the detail stays in the server-side error log.
    """

    async def __call__(self, request: Request, call_next: CallNext) -> Response:
        try:
            return await call_next(request)
        except GatehouseException as e:
            context = RequestContext.of(request)
            return JSONResponse(
                status_code=e.status_code,
                content=e.to_body(),
                headers=_rate_limit_headers(context),
            )
        except Exception as e:
            context = RequestContext.of(request)
            if context.error is not e:
                logger.exception(
                    f"Unhandled error in {request.method} {request.url.path}: "
                    f"{type(e).__name__}"
                )
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "message": "Internal server error",
                    "messageTH": "เกิดข้อผิดพลาดภายในเซิร์ฟเวอร์",
                    "requestId": context.request_number,
                    "timestamp": context.received_at.isoformat(),
                },
                headers=_rate_limit_headers(context),
            )


def _rate_limit_headers(context: RequestContext) -> dict[str, str]:
    """X-RateLimit-* headers for a request the limiter already counted."""
    return context.rate_limit.headers() if context.rate_limit is not None else {}
