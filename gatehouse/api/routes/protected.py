"""
Protected Router - endpoints that require a valid session.

Endpoints:
- GET /api/protected/profile
- GET /api/protected/dashboard
"""

from fastapi import APIRouter, Depends

from gatehouse.api.deps import authenticated, get_context
from gatehouse.models.domain import Principal
from gatehouse.models.responses import ApiResponse
from gatehouse.pipeline.context import RequestContext


router = APIRouter(prefix="/api/protected", tags=["Protected"])


@router.get("/profile", response_model=ApiResponse, response_model_exclude_none=True)
async def profile(
    principal: Principal = Depends(authenticated),
    context: RequestContext = Depends(get_context),
) -> ApiResponse:
    """Principal, session and request time for the caller."""
    return ApiResponse(
        message="Profile data",
        message_th="ข้อมูลโปรไฟล์",
        data={
            "user": principal.public(),
            "session": context.session.public(),
            "requestTime": context.received_at.isoformat(),
        },
    )


@router.get("/dashboard", response_model=ApiResponse, response_model_exclude_none=True)
async def dashboard(
    principal: Principal = Depends(authenticated),
    context: RequestContext = Depends(get_context),
) -> ApiResponse:
    """Greeting, last login and role."""
    return ApiResponse(
        message="Dashboard data",
        data={
            "welcomeMessage": f"สวัสดี {principal.username}!",
            "lastLogin": context.session.created_at.isoformat(),
            "userRole": principal.role,
        },
    )
