"""
Domain Models - principals and sessions.

Principals are immutable reference data loaded at startup. Sessions are
minted by the AuthGuard on login and owned by the SessionStore.

Pattern: Domain models as value objects (Pydantic, frozen where immutable)
"""

from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import BaseModel, Field


# =============================================================================
# Principal Model
# =============================================================================


class Principal(BaseModel):
    """
    An identity that can log in.

    Attributes:
        id: Numeric principal identifier.
        username: Unique login name.
        role: Role used for authorization checks.
        password_hash: bcrypt hash of the credential (never serialized).
    """

    id: int
    username: str
    role: str
    password_hash: str = Field(..., exclude=True, repr=False)

    model_config = {"frozen": True}

    def public(self) -> dict[str, Any]:
        """Public view of the principal, safe to return to clients."""
        return {"id": self.id, "username": self.username, "role": self.role}


# =============================================================================
# Session Model
# =============================================================================


class Session(BaseModel):
    """
    Server-held record binding an opaque token to a principal.

    Attributes:
        token: Opaque, unguessable session token.
        principal_id: ID of the authenticated principal.
        username: Principal username at login time.
        role: Principal role at login time.
        created_at: Login time (UTC).
    """

    token: str = Field(..., repr=False)
    principal_id: int
    username: str
    role: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": True}

    def age(self, now: datetime) -> timedelta:
        """Time elapsed since login."""
        return now - self.created_at

    def is_expired(self, now: datetime, ttl: timedelta) -> bool:
        """
        A session is expired once its age strictly exceeds the TTL.

        A session exactly ``ttl`` old is still valid.
        """
        return self.age(now) > ttl

    def public(self) -> dict[str, Any]:
        """Session details safe to return to clients (token excluded)."""
        return {
            "userId": self.principal_id,
            "username": self.username,
            "role": self.role,
            "loginTime": self.created_at.isoformat(),
        }
