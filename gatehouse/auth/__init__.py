"""
Auth Package

Principals, bcrypt credential checks, in-memory sessions and the guard that
ties them together.
"""

from gatehouse.auth.directory import DEFAULT_USERS, UserDirectory
from gatehouse.auth.guard import AuthGuard, extract_token
from gatehouse.auth.passwords import hash_password, verify_password
from gatehouse.auth.store import SessionStore, generate_token

__all__ = [
    "AuthGuard",
    "extract_token",
    "UserDirectory",
    "DEFAULT_USERS",
    "SessionStore",
    "generate_token",
    "hash_password",
    "verify_password",
]
