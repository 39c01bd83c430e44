"""
Auth Guard - login, session authentication, role authorization, logout.

Flow:
1. login(username, password) verifies the bcrypt hash and mints a session
2. authenticate(token) resolves the token to (principal, session),
   evicting the session if it has outlived its TTL
3. authorize(principal, roles) checks role membership
4. logout(token) removes the session if one exists

Tokens are read from ``Authorization: Bearer <token>`` or, failing that,
the ``token`` query parameter.
"""

import asyncio
from typing import Iterable, Optional

from starlette.requests import Request

from gatehouse.auth.directory import UserDirectory
from gatehouse.auth.passwords import hash_password, verify_password
from gatehouse.auth.store import SessionStore
from gatehouse.core.exceptions import (
    ForbiddenError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
    SessionExpiredError,
    UnauthenticatedError,
)
from gatehouse.models.domain import Principal, Session
from gatehouse.observability.logging import get_logger


logger = get_logger(__name__)

BEARER_PREFIX = "bearer "


def extract_token(request: Request) -> Optional[str]:
    """
    Read the session token from a request.

    Args:
        request: HTTP request

    Returns:
        The token, or None if neither source carries one
    """
    authorization = request.headers.get("Authorization", "")
    if authorization[: len(BEARER_PREFIX)].lower() == BEARER_PREFIX:
        token = authorization[len(BEARER_PREFIX):].strip()
        if token:
            return token
    token = request.query_params.get("token", "").strip()
    return token or None


class AuthGuard:
    """
    Authentication and authorization over a UserDirectory and SessionStore.

    Args:
        directory: Principals that may log in.
        store: Session repository.
        hash_rounds: bcrypt cost used for the timing-equalising dummy hash.
    """

    def __init__(self, directory: UserDirectory, store: SessionStore, hash_rounds: int = 12) -> None:
        self.directory = directory
        self.store = store
        # Unknown usernames are checked against this so that both failure
        # paths pay for one bcrypt verification
        self._dummy_hash = hash_password("gatehouse-dummy", rounds=hash_rounds)

    # -------------------------------------------------------------------------
    # Login / Logout
    # -------------------------------------------------------------------------

    async def login(self, username: str, password: str) -> tuple[Principal, Session]:
        """
        Verify credentials and start a session.

        Raises:
            InvalidCredentialsError: Unknown username or wrong password
                (indistinguishable to the caller)
        """
        principal = self.directory.by_username(username)
        password_hash = principal.password_hash if principal else self._dummy_hash
        matches = await asyncio.to_thread(verify_password, password, password_hash)
        if principal is None or not matches:
            logger.warning("auth.login_failed", username=username)
            raise InvalidCredentialsError()

        session = await self.store.create(principal)
        logger.info("auth.login", username=principal.username, role=principal.role)
        return principal, session

    async def logout(self, token: Optional[str]) -> bool:
        """End the session for ``token``; True if one existed."""
        if not token:
            return False
        removed = await self.store.delete(token)
        if removed:
            logger.info("auth.logout")
        return removed

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    async def authenticate(self, token: Optional[str]) -> tuple[Principal, Session]:
        """
        Resolve a token to its principal and session.

        Raises:
            MissingTokenError: No token supplied
            InvalidTokenError: Unknown token, or its principal no longer exists
            SessionExpiredError: Session older than the TTL (it is evicted)
        """
        if not token:
            raise MissingTokenError()

        session = await self.store.get(token)
        if session is None:
            raise InvalidTokenError()

        if self.store.is_expired(session):
            await self.store.delete(token)
            logger.info("auth.session_expired", username=session.username)
            raise SessionExpiredError()

        principal = self.directory.by_id(session.principal_id)
        if principal is None:
            raise InvalidTokenError(message="User not found", message_th="ไม่พบข้อมูลผู้ใช้")

        return principal, session

    # -------------------------------------------------------------------------
    # Authorization
    # -------------------------------------------------------------------------

    def authorize(self, principal: Optional[Principal], roles: Iterable[str] = ()) -> Principal:
        """
        Check that ``principal`` holds one of ``roles``.

        An empty role set admits any authenticated principal.

        Raises:
            UnauthenticatedError: No principal attached
            ForbiddenError: Role not in ``roles``
        """
        if principal is None:
            raise UnauthenticatedError()
        required = list(roles)
        if required and principal.role not in required:
            logger.warning(
                "auth.forbidden",
                username=principal.username,
                role=principal.role,
                required_roles=required,
            )
            raise ForbiddenError(required, principal.role)
        return principal
