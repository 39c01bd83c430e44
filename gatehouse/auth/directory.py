"""
User Directory - the fixed set of principals that can log in.

The directory is loaded once at startup and never mutated; lookups by
username and by id are plain dictionary reads.
"""

from typing import Iterable, Iterator, Optional

from gatehouse.auth.passwords import hash_password
from gatehouse.models.domain import Principal


# (id, username, password, role) seeded at startup
DEFAULT_USERS: tuple[tuple[int, str, str, str], ...] = (
    (1, "admin", "admin123", "admin"),
    (2, "user", "user123", "user"),
    (3, "guest", "guest123", "guest"),
)


class UserDirectory:
    """
    Read-only principal lookup.

    Args:
        principals: Principals to serve; usernames and ids must be unique.
    """

    def __init__(self, principals: Iterable[Principal]) -> None:
        self._by_username: dict[str, Principal] = {}
        self._by_id: dict[int, Principal] = {}
        for principal in principals:
            if principal.username in self._by_username:
                raise ValueError(f"Duplicate username: {principal.username}")
            if principal.id in self._by_id:
                raise ValueError(f"Duplicate principal id: {principal.id}")
            self._by_username[principal.username] = principal
            self._by_id[principal.id] = principal

    @classmethod
    def with_defaults(cls, rounds: int = 12) -> "UserDirectory":
        """Build the directory from DEFAULT_USERS, hashing each password."""
        return cls(
            Principal(
                id=user_id,
                username=username,
                role=role,
                password_hash=hash_password(password, rounds=rounds),
            )
            for user_id, username, password, role in DEFAULT_USERS
        )

    def by_username(self, username: str) -> Optional[Principal]:
        return self._by_username.get(username)

    def by_id(self, principal_id: int) -> Optional[Principal]:
        return self._by_id.get(principal_id)

    def __iter__(self) -> Iterator[Principal]:
        return iter(sorted(self._by_id.values(), key=lambda p: p.id))

    def __len__(self) -> int:
        return len(self._by_id)
