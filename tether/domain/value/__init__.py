"""Domain value objects for Tether."""

from tether.domain.value.identifiers import AssociationId, UserId
from tether.domain.value.types import (
    AccountState,
    AvatarJob,
    IdentityAssertion,
    LinkProvenance,
    is_blank,
    normalize_email,
)

__all__ = [
    # Identifiers
    "UserId",
    "AssociationId",
    # Types
    "AccountState",
    "AvatarJob",
    "IdentityAssertion",
    "LinkProvenance",
    "is_blank",
    "normalize_email",
]
