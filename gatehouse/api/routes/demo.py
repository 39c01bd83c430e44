"""
Demo Router - validation, diagnostics and statistics endpoints.

Endpoints:
- POST /api/users/create: validate(user)
- POST /api/users/change-password: authenticated, validate(password change)
- POST /api/posts/create: validate(post)
- GET /api/test/rate-limit: echoes the rate-limit headers
- GET /api/test/error: raises an unhandled error (sanitized 500)
- GET /api/test/slow: sleeps before answering
- GET /api/stats: request statistics
"""

import asyncio
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends

from gatehouse.api.deps import authenticated, get_context, get_state, validated
from gatehouse.auth.passwords import verify_password
from gatehouse.core.exceptions import InvalidCredentialsError
from gatehouse.models.domain import Principal
from gatehouse.models.responses import ApiResponse
from gatehouse.pipeline.context import RequestContext
from gatehouse.pipeline.state import GatehouseState
from gatehouse.validation.schemas import PASSWORD_CHANGE_SCHEMA, POST_SCHEMA, USER_SCHEMA


router = APIRouter(prefix="/api", tags=["Demo"])


# =============================================================================
# Validation Demos
# =============================================================================


@router.post("/users/create", response_model=ApiResponse, response_model_exclude_none=True)
async def create_user(data: dict[str, Any] = Depends(validated(USER_SCHEMA))) -> ApiResponse:
    """Accept a validated user record (nothing is persisted)."""
    return ApiResponse(
        message="User created successfully",
        message_th="ผู้ใช้ใหม่ถูกสร้างสำเร็จ",
        data=data,
    )


@router.post("/users/change-password", response_model=ApiResponse, response_model_exclude_none=True)
async def change_password(
    principal: Principal = Depends(authenticated),
    data: dict[str, Any] = Depends(validated(PASSWORD_CHANGE_SCHEMA)),
) -> ApiResponse:
    """
    Check a password change request.

    The current password must verify; credentials are read-only, so nothing
    is stored.
    """
    matches = await asyncio.to_thread(verify_password, data["currentPassword"], principal.password_hash)
    if not matches:
        raise InvalidCredentialsError()
    return ApiResponse(
        message="Password change accepted",
        message_th="เปลี่ยนรหัสผ่านสำเร็จ",
        data={"username": principal.username},
    )


@router.post("/posts/create", response_model=ApiResponse, response_model_exclude_none=True)
async def create_post(data: dict[str, Any] = Depends(validated(POST_SCHEMA))) -> ApiResponse:
    """Accept a validated post (nothing is persisted)."""
    return ApiResponse(
        message="Post created successfully",
        message_th="โพสต์ถูกสร้างสำเร็จ",
        data=data,
    )


# =============================================================================
# Diagnostics
# =============================================================================


@router.get("/test/rate-limit", response_model=ApiResponse, response_model_exclude_none=True)
async def rate_limit_probe(context: RequestContext = Depends(get_context)) -> ApiResponse:
    """Echo the rate-limit headers this request will carry."""
    headers = context.rate_limit.headers() if context.rate_limit else {}
    return ApiResponse(message="Rate limit test", data={"headers": headers})


@router.get("/test/error")
async def raise_error() -> None:
    """Fail with an unhandled error to exercise the error logger."""
    raise RuntimeError("Test error")


@router.get("/test/slow", response_model=ApiResponse, response_model_exclude_none=True)
async def slow(state: GatehouseState = Depends(get_state)) -> ApiResponse:
    """Answer after ``slow_route_delay_seconds``."""
    delay = state.settings.slow_route_delay_seconds
    await asyncio.sleep(delay)
    return ApiResponse(
        message=f"Slow response ({delay:g} seconds delay)",
        data={"timestamp": datetime.now(timezone.utc).isoformat()},
    )


@router.get("/stats", response_model=ApiResponse, response_model_exclude_none=True)
async def stats(
    state: GatehouseState = Depends(get_state),
    context: RequestContext = Depends(get_context),
) -> ApiResponse:
    """Aggregate request statistics."""
    return ApiResponse(
        message="Request statistics",
        data={
            **state.stats.snapshot(),
            "uptime": state.stats.uptime_seconds(),
            "currentRequest": context.request_number,
        },
    )
