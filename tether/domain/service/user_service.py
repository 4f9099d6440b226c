"""User domain service."""

from datetime import datetime, timezone
from uuid import uuid4

import logfire

from tether.domain.error import NotFoundError
from tether.domain.model import Profile, User
from tether.domain.repository import UserRepository
from tether.domain.service.avatar_queue import AvatarJobQueue
from tether.domain.service.merge_policy import ProfileChanges
from tether.domain.value import AccountState, AvatarJob, UserId, normalize_email


class UserService:
    """Domain service for the user directory."""

    def __init__(
        self, user_repository: UserRepository, avatar_queue: AvatarJobQueue
    ) -> None:
        """Initialize user service.

        Args:
            user_repository: User repository
            avatar_queue: Queue receiving avatar retrieval jobs
        """
        self.user_repository = user_repository
        self.avatar_queue = avatar_queue

    async def get_by_id(self, user_id: UserId) -> User:
        """Get user by ID.

        Args:
            user_id: User ID

        Returns:
            User entity

        Raises:
            NotFoundError: If user not found
        """
        with logfire.span("user_service.get_by_id", user_id=str(user_id)):
            user = await self.user_repository.find_by_id(user_id)
            if not user:
                logfire.warn("User not found", user_id=str(user_id))
                raise NotFoundError("User", str(user_id))
            return user

    async def find_active_or_staged_by_email(self, email: str) -> User | None:
        """Find a user by email, including staged placeholder accounts.

        Args:
            email: Email address (normalized before matching)

        Returns:
            User if found, None otherwise
        """
        normalized = normalize_email(email)
        with logfire.span(
            "user_service.find_active_or_staged_by_email", email=normalized
        ):
            user = await self.user_repository.find_by_email(
                normalized, include_staged=True
            )
            if user:
                logfire.info(
                    "User found by email",
                    email=normalized,
                    user_id=str(user.id),
                    state=user.state.value,
                )
            return user

    async def find_by_custom_field(self, name: str, value: str) -> User | None:
        """Find a user through a stored custom field.

        Args:
            name: Custom field name
            value: Value to match

        Returns:
            User if found, None otherwise
        """
        with logfire.span("user_service.find_by_custom_field", field=name):
            user = await self.user_repository.find_by_custom_field(name, value)
            if user:
                logfire.info(
                    "User found by custom field", field=name, user_id=str(user.id)
                )
            return user

    async def set_custom_field(self, user_id: UserId, name: str, value: str) -> None:
        """Create or replace a custom field on a user."""
        with logfire.span(
            "user_service.set_custom_field", user_id=str(user_id), field=name
        ):
            await self.user_repository.set_custom_field(user_id, name, value)

    async def create_user(self, email: str, name: str | None) -> User:
        """Create a new active account with an empty profile.

        Args:
            email: Email address (normalized before storing)
            name: Display name

        Returns:
            The created user
        """
        now = datetime.now(timezone.utc)
        user = User(
            id=UserId(uuid4()),
            email=normalize_email(email),
            name=name,
            state=AccountState.ACTIVE,
            avatar_url=None,
            profile=Profile(),
            created_at=now,
            updated_at=now,
        )
        with logfire.span("user_service.create_user", user_id=str(user.id)):
            saved = await self.user_repository.save(user)
            logfire.info("User created", user_id=str(saved.id), email=saved.email)
            return saved

    async def convert_staged_to_active(self, user: User) -> User:
        """Turn a staged (or never activated) account into an active one.

        No-op for users that are already active.

        Args:
            user: User to convert

        Returns:
            The active user
        """
        if user.active:
            return user

        with logfire.span(
            "user_service.convert_staged_to_active",
            user_id=str(user.id),
            state=user.state.value,
        ):
            converted = user.model_copy(
                update={
                    "state": AccountState.ACTIVE,
                    "updated_at": datetime.now(timezone.utc),
                }
            )
            saved = await self.user_repository.save(converted)
            logfire.info(
                "User activated", user_id=str(saved.id), previous=user.state.value
            )
            return saved

    async def update_display_name(self, user: User, name: str | None) -> User:
        """Update the display name if it changed.

        Args:
            user: User to update
            name: New display name; None leaves the stored one alone

        Returns:
            The (possibly) updated user
        """
        if name is None or name == user.name:
            return user

        with logfire.span("user_service.update_display_name", user_id=str(user.id)):
            updated = user.model_copy(
                update={"name": name, "updated_at": datetime.now(timezone.utc)}
            )
            return await self.user_repository.save(updated)

    async def update_email(self, user: User, email: str) -> User:
        """Replace the user's email address."""
        normalized = normalize_email(email)
        if normalized == user.email:
            return user

        with logfire.span("user_service.update_email", user_id=str(user.id)):
            updated = user.model_copy(
                update={"email": normalized, "updated_at": datetime.now(timezone.utc)}
            )
            saved = await self.user_repository.save(updated)
            logfire.info(
                "User email updated",
                user_id=str(saved.id),
                previous=user.email,
                email=normalized,
            )
            return saved

    async def update_profile(self, user: User, changes: ProfileChanges) -> User:
        """Apply profile changes decided by the merge policy."""
        if changes.is_empty:
            return user

        with logfire.span("user_service.update_profile", user_id=str(user.id)):
            updated = user.model_copy(
                update={
                    "profile": changes.apply(user.profile),
                    "updated_at": datetime.now(timezone.utc),
                }
            )
            saved = await self.user_repository.save(updated)
            logfire.info(
                "Profile filled from claims",
                user_id=str(saved.id),
                fields=sorted(changes.model_dump(exclude_none=True)),
            )
            return saved

    async def set_avatar_if_allowed(
        self, user: User, url: str, override_allowed: bool
    ) -> bool:
        """Enqueue retrieval of an avatar for the user.

        Skipped when the user already has a custom avatar and overriding it is
        not allowed. Enqueue failures are logged and reported as False; they
        never propagate.

        Args:
            user: User the avatar is for
            url: Picture URL from the claims
            override_allowed: Whether a custom avatar may be replaced

        Returns:
            True if a job was enqueued
        """
        if user.has_custom_avatar and not override_allowed:
            logfire.info(
                "Avatar retrieval skipped - custom avatar set", user_id=str(user.id)
            )
            return False

        job = AvatarJob(url=url, user_id=user.id, override_gravatar=override_allowed)
        try:
            await self.avatar_queue.enqueue(job)
        except Exception as e:
            logfire.error(
                "Avatar retrieval enqueue failed",
                user_id=str(user.id),
                url=url,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        logfire.info("Avatar retrieval enqueued", user_id=str(user.id), url=url)
        return True
