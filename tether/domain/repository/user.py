"""User repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from tether.domain.model.user import User
from tether.domain.value import UserId


class UserRepository(ABC):
    """Repository for User aggregate.

    Defines the contract for user persistence operations.
    Implementations live in the persistence layer.
    """

    @abstractmethod
    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID.

        Args:
            user_id: The user's unique identifier

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_email(
        self, email: str, include_staged: bool = True
    ) -> Optional[User]:
        """Find a user by their email.

        Args:
            email: Email address, already normalized
            include_staged: Whether staged placeholder accounts may match

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_custom_field(self, name: str, value: str) -> Optional[User]:
        """Find a user by a custom field value.

        Args:
            name: Custom field name
            value: Exact value to match

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def set_custom_field(self, user_id: UserId, name: str, value: str) -> None:
        """Create or replace a custom field on a user.

        Args:
            user_id: The user's unique identifier
            name: Custom field name
            value: Value to store
        """
        pass

    @abstractmethod
    async def save(self, user: User) -> User:
        """Save a user (create or update), including the profile.

        Args:
            user: The user to save

        Returns:
            The saved user
        """
        pass
