"""
Admin Router - admin-only endpoints.

Endpoints:
- GET /api/admin/users: every principal (public view)
- GET /api/admin/logs: request statistics; the request itself is written
  to the detailed access log
"""

from fastapi import APIRouter, Depends

from gatehouse.api.deps import detailed_logging, get_state, require_roles
from gatehouse.models.responses import ApiResponse
from gatehouse.pipeline.state import GatehouseState


router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    dependencies=[Depends(require_roles("admin"))],
)


@router.get("/users", response_model=ApiResponse, response_model_exclude_none=True)
async def list_users(state: GatehouseState = Depends(get_state)) -> ApiResponse:
    """All principals (admin only)."""
    return ApiResponse(
        message="All users (admin only)",
        message_th="ข้อมูลผู้ใช้ทั้งหมด (Admin only)",
        data=[principal.public() for principal in state.directory],
    )


@router.get(
    "/logs",
    response_model=ApiResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(detailed_logging)],
)
async def system_logs(state: GatehouseState = Depends(get_state)) -> ApiResponse:
    """Request statistics and uptime (admin only)."""
    return ApiResponse(
        message="System logs (admin only)",
        data={
            "requestStats": state.stats.snapshot(),
            "uptime": state.stats.uptime_seconds(),
            "activeSessions": len(state.sessions),
        },
    )
