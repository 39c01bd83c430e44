"""
API Dependencies

FastAPI dependencies that act as route-level pipeline stages. Each one
either raises a GatehouseException (rendered as the JSON envelope by the
app's exception handler) or attaches its result to the RequestContext and
returns it.

Route-level stages:
- authenticated: resolve the session token to a Principal
- require_roles(*roles): authenticated, plus role membership
- validated(schema): merged body/query/path record passing a schema
- detailed_logging: per-route detailed request/response record

Pattern: Centralized dependency injection; everything is resolved from the
GatehouseState on ``app.state`` so tests can build isolated apps.
"""

import json
from typing import Any, Awaitable, Callable

from fastapi import Depends, Request

from gatehouse.auth.guard import extract_token
from gatehouse.core.exceptions import ValidationFailedError
from gatehouse.models.domain import Principal
from gatehouse.pipeline.context import RequestContext
from gatehouse.pipeline.state import GatehouseState
from gatehouse.validation.schema import ValidationSchema
from gatehouse.validation.validator import merge_sources, validate


# =============================================================================
# State and Context
# =============================================================================


def get_state(request: Request) -> GatehouseState:
    """The GatehouseState owned by the running app."""
    return request.app.state.gatehouse


def get_context(request: Request) -> RequestContext:
    """The RequestContext created by the pipeline for this request."""
    return RequestContext.of(request)


# =============================================================================
# Authentication / Authorization
# =============================================================================


async def authenticated(
    request: Request,
    state: GatehouseState = Depends(get_state),
    context: RequestContext = Depends(get_context),
) -> Principal:
    """
    Require a valid session.

    Raises:
        MissingTokenError, InvalidTokenError, SessionExpiredError
    """
    token = extract_token(request)
    principal, session = await state.guard.authenticate(token)
    context.principal = principal
    context.session = session
    context.token = token
    return principal


def require_roles(*roles: str) -> Callable[..., Awaitable[Principal]]:
    """
    Dependency factory: authenticated principal holding one of ``roles``.

    Example:
        >>> @router.get("/users")
        ... async def users(principal: Principal = Depends(require_roles("admin"))):
        ...     ...
    """

    async def _require_roles(
        principal: Principal = Depends(authenticated),
        state: GatehouseState = Depends(get_state),
    ) -> Principal:
        return state.guard.authorize(principal, roles)

    return _require_roles


# =============================================================================
# Validation
# =============================================================================


async def _json_body(request: Request) -> dict[str, Any]:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except ValueError:
        raise ValidationFailedError(
            [{
                "field": "body",
                "message": "Request body must be valid JSON",
                "messageTH": "รูปแบบข้อมูล JSON ไม่ถูกต้อง",
            }]
        ) from None
    if not isinstance(body, dict):
        raise ValidationFailedError(
            [{
                "field": "body",
                "message": "Request body must be a JSON object",
                "messageTH": "ข้อมูลต้องเป็น JSON object",
            }]
        )
    return body


def validated(schema: ValidationSchema) -> Callable[..., Awaitable[dict[str, Any]]]:
    """
    Dependency factory: validate the merged request record against ``schema``.

    Body, query and path parameters are merged in that order (later sources
    win). On success the merged record is attached to the context and
    returned.

    Raises:
        ValidationFailedError: With every field error, in schema order
    """

    async def _validated(
        request: Request,
        context: RequestContext = Depends(get_context),
    ) -> dict[str, Any]:
        body = await _json_body(request)
        record = merge_sources(body, dict(request.query_params), dict(request.path_params))
        result = validate(schema, record)
        if not result.valid:
            raise ValidationFailedError(result.error_dicts())
        context.validated_data = result.data
        return result.data

    return _validated


# =============================================================================
# Detailed Logging
# =============================================================================


def detailed_logging(
    request: Request,
    state: GatehouseState = Depends(get_state),
    context: RequestContext = Depends(get_context),
) -> None:
    """Record this request in the access log once its response is final."""
    # Already registered by the global stage
    if state.settings.detailed_logging:
        return
    state.detailed_logger.begin(request, context)
