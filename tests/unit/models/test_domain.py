"""
Unit tests for domain models and the response envelope.
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from gatehouse.models import ApiResponse, Principal, Session


class TestPrincipal:
    """Principal value object."""

    def test_hash_never_serialized(self):
        principal = Principal(id=1, username="admin", role="admin", password_hash="$2b$secret")

        assert "password_hash" not in principal.model_dump()
        assert "$2b$secret" not in repr(principal)
        assert principal.public() == {"id": 1, "username": "admin", "role": "admin"}

    def test_frozen(self):
        principal = Principal(id=1, username="admin", role="admin", password_hash="x")

        with pytest.raises(ValidationError):
            principal.role = "guest"


class TestSession:
    """Session expiry and public view."""

    def test_public_view_omits_token(self):
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        session = Session(token="t0k3n", principal_id=2, username="user", role="user", created_at=created)

        assert session.public() == {
            "userId": 2,
            "username": "user",
            "role": "user",
            "loginTime": "2024-01-01T00:00:00+00:00",
        }
        assert "t0k3n" not in repr(session)

    def test_expiry_is_strictly_greater_than_ttl(self):
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        session = Session(token="t", principal_id=1, username="a", role="a", created_at=created)
        ttl = timedelta(hours=1)

        assert not session.is_expired(created + ttl, ttl)
        assert session.is_expired(created + ttl + timedelta(microseconds=1), ttl)


class TestApiResponse:
    """Envelope serialization."""

    def test_thai_message_alias_and_none_exclusion(self):
        response = ApiResponse(message="ok", message_th="สำเร็จ")

        dumped = response.model_dump(by_alias=True, exclude_none=True)

        assert dumped == {"success": True, "message": "ok", "messageTH": "สำเร็จ"}
