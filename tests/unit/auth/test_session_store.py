"""
Tests for the in-memory SessionStore and password hashing.
"""

from datetime import timedelta

import pytest

from gatehouse.auth.passwords import hash_password, verify_password
from gatehouse.auth.store import SessionStore, generate_token
from gatehouse.models.domain import Principal


@pytest.fixture
def principal() -> Principal:
    return Principal(id=7, username="somchai", role="user", password_hash="x")


@pytest.fixture
def store(utc_clock) -> SessionStore:
    return SessionStore(ttl=timedelta(hours=1), clock=utc_clock)


# =============================================================================
# Tokens and Passwords
# =============================================================================


class TestTokens:
    """Tokens are opaque and unguessable."""

    def test_tokens_are_unique_and_long(self):
        tokens = {generate_token() for _ in range(100)}

        assert len(tokens) == 100
        assert all(len(token) >= 40 for token in tokens)


class TestPasswords:
    """bcrypt hashing."""

    def test_hash_verifies(self):
        hashed = hash_password("admin123", rounds=4)

        assert hashed != "admin123"
        assert verify_password("admin123", hashed)
        assert not verify_password("admin124", hashed)

    def test_hashes_are_salted(self):
        assert hash_password("same", rounds=4) != hash_password("same", rounds=4)

    def test_malformed_hash_does_not_verify(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False

    def test_overlong_password_rejected(self):
        hashed = hash_password("a" * 72, rounds=4)

        assert verify_password("a" * 73, hashed) is False
        with pytest.raises(ValueError):
            hash_password("a" * 73, rounds=4)


# =============================================================================
# SessionStore
# =============================================================================


class TestSessionStore:
    """Create / get / delete / purge."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, store, principal, utc_clock):
        session = await store.create(principal)

        fetched = await store.get(session.token)
        assert fetched == session
        assert fetched.principal_id == 7
        assert fetched.username == "somchai"
        assert fetched.created_at == utc_clock.now
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_unknown_token(self, store):
        assert await store.get("nope") is None

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, store, principal):
        session = await store.create(principal)

        assert await store.delete(session.token) is True
        assert await store.delete(session.token) is False
        assert session.token not in store

    @pytest.mark.asyncio
    async def test_expiry_boundary(self, store, principal, utc_clock):
        session = await store.create(principal)

        utc_clock.advance(timedelta(hours=1))
        assert store.is_expired(session) is False

        utc_clock.advance(timedelta(milliseconds=1))
        assert store.is_expired(session) is True

    @pytest.mark.asyncio
    async def test_purge_expired(self, store, principal, utc_clock):
        old = await store.create(principal)
        utc_clock.advance(timedelta(minutes=45))
        fresh = await store.create(principal)
        utc_clock.advance(timedelta(minutes=30))

        assert await store.purge_expired() == 1
        assert old.token not in store
        assert fresh.token in store

    def test_ttl_must_be_positive(self):
        with pytest.raises(ValueError):
            SessionStore(ttl=timedelta(0))
