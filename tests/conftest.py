"""Test configuration and factories."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from tether.domain.model import Profile, User
from tether.domain.value import AccountState, IdentityAssertion, UserId


def make_user(
    email: str | None = "ada@example.com",
    name: str | None = "Ada",
    state: AccountState = AccountState.ACTIVE,
    avatar_url: str | None = None,
    bio: str | None = None,
    location: str | None = None,
    age: timedelta = timedelta(days=30),
) -> User:
    """Build a stored-looking user, created ``age`` ago."""
    created = datetime.now(timezone.utc) - age
    return User(
        id=UserId(uuid4()),
        email=email,
        name=name,
        state=state,
        avatar_url=avatar_url,
        profile=Profile(bio=bio, location=location),
        created_at=created,
        updated_at=created,
    )


def make_assertion(subject: str = "sub-123", **claims) -> IdentityAssertion:
    """Build an identity assertion with a verified email by default."""
    claims.setdefault("email", "ada@example.com")
    claims.setdefault("email_verified", True)
    claims.setdefault("name", "Ada Lovelace")
    return IdentityAssertion(subject=subject, **claims)
