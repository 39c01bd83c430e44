"""
Request Context - per-request state shared by pipeline stages.

A RequestContext is created when a request enters the pipeline, stored on
``request.state.context`` and discarded after the response is sent. Stages
read what earlier stages attached (principal, validated data, rate-limit
result) and may register on-complete hooks that the pipeline fires once the
final response exists.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

from starlette.requests import Request
from starlette.responses import Response

if TYPE_CHECKING:
    from gatehouse.api.middleware.rate_limit import RateLimitResult
    from gatehouse.models.domain import Principal, Session


CompletionHook = Callable[["RequestContext", Response], Awaitable[None]]

_STATE_ATTR = "context"


def client_identity(request: Request, trust_forwarded_for: bool = False) -> str:
    """
    Identify the client behind a request.

    Uses the first X-Forwarded-For hop only when the deployment trusts its
    proxy; otherwise the direct peer address.

    Args:
        request: HTTP request
        trust_forwarded_for: Whether X-Forwarded-For may be believed

    Returns:
        Client identifier string
    """
    if trust_forwarded_for:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"


@dataclass
class RequestContext:
    """
    Request-scoped accumulator passed through the pipeline.

    Attributes:
        client: Client identity used for logging and rate limiting.
        received_at: Wall-clock receipt time (UTC).
        started: perf_counter() value at receipt, for durations.
        request_number: Process-wide ordinal assigned by the request counter.
        principal: Authenticated principal, once attached.
        session: Session backing the principal.
        token: Token the session was resolved from.
        validated_data: Merged record that passed validation.
        rate_limit: Result of the rate-limit check, when applied.
        error: Unhandled exception already recorded by the error logger.
    """

    client: str = "unknown"
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    started: float = field(default_factory=time.perf_counter)
    request_number: Optional[int] = None
    principal: Optional["Principal"] = None
    session: Optional["Session"] = None
    token: Optional[str] = None
    validated_data: Optional[dict[str, Any]] = None
    rate_limit: Optional["RateLimitResult"] = None
    error: Optional[BaseException] = None
    _hooks: list[CompletionHook] = field(default_factory=list, repr=False)

    def elapsed_ms(self) -> float:
        """Milliseconds since the request entered the pipeline."""
        return (time.perf_counter() - self.started) * 1000

    def on_complete(self, hook: CompletionHook) -> None:
        """Register a coroutine to run once the response is final."""
        self._hooks.append(hook)

    async def complete(self, response: Response) -> None:
        """Run on-complete hooks in registration order."""
        hooks, self._hooks = self._hooks, []
        for hook in hooks:
            await hook(self, response)

    # -------------------------------------------------------------------------
    # Attachment to the request
    # -------------------------------------------------------------------------

    @classmethod
    def attach(cls, request: Request, client: str) -> "RequestContext":
        """Create a context and store it on ``request.state``."""
        context = cls(client=client)
        setattr(request.state, _STATE_ATTR, context)
        return context

    @classmethod
    def of(cls, request: Request) -> "RequestContext":
        """
        Get the context attached to a request.

        Requests that bypassed the pipeline (e.g. in isolated route tests)
        get a fresh context attached on first access.
        """
        context = getattr(request.state, _STATE_ATTR, None)
        if context is None:
            context = cls.attach(request, client_identity(request))
        return context
