"""
Auth Router - login and logout.

Endpoints:
- POST /api/auth/login: validate(login) → data{token, user}
- POST /api/auth/logout: ends the presented session, if any
"""

from typing import Any

from fastapi import APIRouter, Depends, Request

from gatehouse.api.deps import get_state, validated
from gatehouse.auth.guard import extract_token
from gatehouse.models.responses import ApiResponse
from gatehouse.pipeline.state import GatehouseState
from gatehouse.validation.schemas import LOGIN_SCHEMA


router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/login", response_model=ApiResponse, response_model_exclude_none=True)
async def login(
    data: dict[str, Any] = Depends(validated(LOGIN_SCHEMA)),
    state: GatehouseState = Depends(get_state),
) -> ApiResponse:
    """
    Exchange credentials for a session token.

    Raises:
        ValidationFailedError: 400, malformed credentials
        InvalidCredentialsError: 401, unknown user or wrong password
    """
    principal, session = await state.guard.login(data["username"], data["password"])
    return ApiResponse(
        message="Logged in successfully",
        message_th="เข้าสู่ระบบสำเร็จ",
        data={"token": session.token, "user": principal.public()},
    )


@router.post("/logout", response_model=ApiResponse, response_model_exclude_none=True)
async def logout(
    request: Request,
    state: GatehouseState = Depends(get_state),
) -> ApiResponse:
    """End the session behind the presented token. Never fails."""
    if await state.guard.logout(extract_token(request)):
        return ApiResponse(message="Logged out successfully", message_th="ออกจากระบบสำเร็จ")
    return ApiResponse(message="No session found", message_th="ไม่พบ session")
