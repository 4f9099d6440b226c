"""Merge policies for reconciling identity claims into local records.

Pure functions: they look at stored values and incoming claims and return
the writes that should happen. They never overwrite user-entered data.
"""

from tether.domain.model import (
    AssociationCredentials,
    AssociationExtra,
    AssociationInfo,
    AssociationMetadata,
    Profile,
    User,
)
from tether.domain.value import (
    AvatarJob,
    IdentityAssertion,
    LinkProvenance,
    is_blank,
)
from tether.domain.value.common import ValueObject


class ProfileChanges(ValueObject):
    """Profile fields to write; None means leave the field alone."""

    bio: str | None = None
    location: str | None = None

    @property
    def is_empty(self) -> bool:
        """Whether there is nothing to write."""
        return self.bio is None and self.location is None

    def apply(self, profile: Profile) -> Profile:
        """Return the profile with these changes applied."""
        return profile.model_copy(
            update=self.model_dump(exclude_none=True),
        )


def merge_profile(profile: Profile, assertion: IdentityAssertion) -> ProfileChanges:
    """Fill blank profile fields from the claims.

    Each field is handled independently: a claim value is taken only when the
    stored value is blank and the claim is not.
    """
    changes = {}
    for field in ("bio", "location"):
        claimed = getattr(assertion, field)
        if is_blank(getattr(profile, field)) and not is_blank(claimed):
            changes[field] = claimed
    return ProfileChanges(**changes)


def merge_avatar(
    user: User, assertion: IdentityAssertion, override_allowed: bool
) -> AvatarJob | None:
    """Decide whether the claimed picture should be retrieved for the user."""
    if not assertion.picture:
        return None
    if user.has_custom_avatar and not override_allowed:
        return None
    return AvatarJob(
        url=assertion.picture,
        user_id=user.id,
        override_gravatar=override_allowed,
    )


def merge_email(
    user: User, assertion: IdentityAssertion, sync_enabled: bool
) -> str | None:
    """Propose a new email for the user when a verified one differs."""
    if not sync_enabled or not assertion.email_verified:
        return None
    email = assertion.normalized_email
    if not email or email == user.email:
        return None
    return email


def build_association_metadata(
    assertion: IdentityAssertion, link_provenance: LinkProvenance
) -> AssociationMetadata:
    """Snapshot the claims into the metadata stored on an association."""
    return AssociationMetadata(
        info=AssociationInfo(
            email=assertion.email,
            name=assertion.name,
            picture=assertion.picture,
        ),
        credentials=AssociationCredentials(),
        extra=AssociationExtra(
            email_verified=assertion.email_verified,
            link_provenance=link_provenance,
        ),
    )


__all__ = [
    "ProfileChanges",
    "build_association_metadata",
    "merge_avatar",
    "merge_email",
    "merge_profile",
]
