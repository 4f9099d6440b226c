"""In-memory user repository for testing."""

from typing import Optional

from tether.domain.model.user import User
from tether.domain.repository.user import UserRepository
from tether.domain.value import AccountState, UserId
from tether.domain.value.types import normalize_email


class InMemoryUserRepository(UserRepository):
    """In-memory implementation of UserRepository for testing."""

    def __init__(self) -> None:
        self._users: dict[UserId, User] = {}
        self._custom_fields: dict[tuple[UserId, str], str] = {}

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID."""
        return self._users.get(user_id)

    async def find_by_email(
        self, email: str, include_staged: bool = True
    ) -> Optional[User]:
        """Find the oldest user with the email, ignoring case and spaces."""
        matches = [
            user
            for user in self._users.values()
            if user.email is not None
            and normalize_email(user.email) == email
            and (include_staged or user.state != AccountState.STAGED)
        ]
        matches.sort(key=lambda u: u.created_at)
        return matches[0] if matches else None

    async def find_by_custom_field(self, name: str, value: str) -> Optional[User]:
        """Find a user by a custom field value."""
        for (user_id, field_name), field_value in self._custom_fields.items():
            if field_name == name and field_value == value:
                return self._users.get(user_id)
        return None

    async def set_custom_field(self, user_id: UserId, name: str, value: str) -> None:
        """Create or replace a custom field on a user."""
        self._custom_fields[(user_id, name)] = value

    async def save(self, user: User) -> User:
        """Save or update a user."""
        self._users[user.id] = user
        return user

    def snapshot(self) -> tuple[dict, dict]:
        """Copy current contents so a failed unit can be undone."""
        return dict(self._users), dict(self._custom_fields)

    def restore(self, snapshot: tuple[dict, dict]) -> None:
        """Put back contents taken by snapshot()."""
        users, custom_fields = snapshot
        self._users = dict(users)
        self._custom_fields = dict(custom_fields)

    def all(self) -> list[User]:
        """All stored users, oldest first."""
        return sorted(self._users.values(), key=lambda u: u.created_at)
