"""User aggregate root.

Users are local accounts that one or more external identities resolve to.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from tether.domain.model.common import DomainModel
from tether.domain.value import AccountState, UserId


class Profile(DomainModel):
    """User-entered profile details, 1:1 with a user.

    Only blank fields are ever filled from identity claims.
    """

    bio: Optional[str] = None
    location: Optional[str] = None


class User(DomainModel):
    """User aggregate root - provider-agnostic."""

    id: UserId
    email: Optional[str] = None  # Normalized (lower-case, stripped)
    name: Optional[str] = None  # Display name
    state: AccountState = AccountState.ACTIVE
    avatar_url: Optional[str] = None  # Set only for a custom avatar
    profile: Profile = Field(default_factory=Profile)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def staged(self) -> bool:
        """Whether this is an unclaimed placeholder account."""
        return self.state == AccountState.STAGED

    @property
    def active(self) -> bool:
        """Whether this account may be used as a resolved session subject."""
        return self.state == AccountState.ACTIVE

    @property
    def has_custom_avatar(self) -> bool:
        """Whether the user already has an avatar of their own."""
        return self.avatar_url is not None
