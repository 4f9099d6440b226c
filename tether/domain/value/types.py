"""Domain value objects for Tether.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules and business logic.
"""

from enum import Enum

from pydantic import field_validator

from tether.domain.value.common import ValueObject
from tether.domain.value.identifiers import UserId


class AccountState(str, Enum):
    """Lifecycle state of a local account.

    STAGED accounts are placeholders created by an invitation or admin flow
    and not yet claimed by their owner. PENDING accounts registered but were
    never activated. Only ACTIVE accounts may be handed back as a resolved
    user.
    """

    STAGED = "staged"
    PENDING = "pending"
    ACTIVE = "active"


class LinkProvenance(str, Enum):
    """How an association between an external identity and a user came about."""

    EXISTING = "existing"  # Exact (provider, subject) match
    CUSTOM_FIELD = "custom_field"  # Matched through a stored subject id
    EMAIL = "email"  # Matched by email, association migrated
    CREATED = "created"  # New account created


def normalize_email(email: str) -> str:
    """Normalize an email address for exact matching."""
    return email.strip().lower()


def is_blank(value: str | None) -> bool:
    """Check whether a text value is missing or whitespace only."""
    return value is None or not value.strip()


class IdentityAssertion(ValueObject):
    """Trusted claim set describing one external identity.

    Produced by the token validation layer; the subject is the provider's
    permanent identifier for the account.
    """

    subject: str
    email: str | None = None
    email_verified: bool = False
    name: str | None = None
    picture: str | None = None
    bio: str | None = None
    location: str | None = None

    @field_validator("subject")
    @classmethod
    def strip_subject(cls, v: str) -> str:
        """Strip surrounding whitespace from the subject."""
        return v.strip()

    @field_validator("email", "name", "picture", "bio", "location")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Treat blank optional claims as absent."""
        if is_blank(v):
            return None
        return v.strip()

    @property
    def normalized_email(self) -> str | None:
        """Email normalized for lookups, if present."""
        return normalize_email(self.email) if self.email else None


class AvatarJob(ValueObject):
    """Request to download an avatar from a URL for a user."""

    url: str
    user_id: UserId
    override_gravatar: bool = False
