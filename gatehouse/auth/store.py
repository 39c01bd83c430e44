"""
Session Store - in-memory token → Session repository.

Sessions live only in process memory and are lost on restart. Expiry is
lazy: an expired session is evicted when it is next presented, or in bulk by
``purge_expired``.

Pattern: Repository pattern with an injectable clock
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from gatehouse.models.domain import Principal, Session


Clock = Callable[[], datetime]

TOKEN_BYTES = 32


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_token() -> str:
    """Opaque, URL-safe session token from a CSPRNG."""
    return secrets.token_urlsafe(TOKEN_BYTES)


class SessionStore:
    """
    In-memory session storage.

    Args:
        ttl: Session lifetime measured from login.
        clock: Returns the current UTC time; injectable for tests.

    Example:
        >>> store = SessionStore(ttl=timedelta(hours=1))
        >>> session = await store.create(principal)
        >>> await store.get(session.token)
    """

    def __init__(self, ttl: timedelta = timedelta(hours=1), clock: Clock = _utcnow) -> None:
        if ttl <= timedelta(0):
            raise ValueError("Session TTL must be positive")
        self.ttl = ttl
        self._clock = clock
        self._sessions: dict[str, Session] = {}

    def now(self) -> datetime:
        return self._clock()

    async def create(self, principal: Principal) -> Session:
        """Mint a fresh token and store a session for ``principal``."""
        token = generate_token()
        while token in self._sessions:
            token = generate_token()
        session = Session(
            token=token,
            principal_id=principal.id,
            username=principal.username,
            role=principal.role,
            created_at=self.now(),
        )
        self._sessions[token] = session
        return session

    async def get(self, token: str) -> Optional[Session]:
        """Session for ``token`` (expired or not), or None."""
        return self._sessions.get(token)

    async def delete(self, token: str) -> bool:
        """
        Remove a session.

        Returns:
            True if a session was removed. Idempotent.
        """
        return self._sessions.pop(token, None) is not None

    def is_expired(self, session: Session) -> bool:
        return session.is_expired(self.now(), self.ttl)

    async def purge_expired(self) -> int:
        """Evict every expired session; returns how many were removed."""
        expired = [token for token, s in self._sessions.items() if self.is_expired(s)]
        for token in expired:
            del self._sessions[token]
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, token: object) -> bool:
        return token in self._sessions
