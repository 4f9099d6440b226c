"""Provision use case.

Reconciles a trusted identity assertion against the local user directory and
resolves it to exactly one active user.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

import logfire
from pydantic import BaseModel, field_validator

from tether.application.usecase.base import BaseUseCase
from tether.config import ProvisioningSettings
from tether.domain.error import (
    ConstraintViolationError,
    ProvisioningError,
    ValidationError,
)
from tether.domain.model import Association, User
from tether.domain.repository import TransactionManager
from tether.domain.service import (
    AssociationService,
    UserService,
    build_association_metadata,
    merge_avatar,
    merge_email,
    merge_profile,
)
from tether.domain.value import AvatarJob, IdentityAssertion, LinkProvenance, UserId


class ProvisionRequest(BaseModel):
    """Provision request from the session layer."""

    assertion: IdentityAssertion
    policy: ProvisioningSettings | None = None  # Overrides configured policy


class ProvisionResponse(BaseModel):
    """Provision response."""

    user_id: UserId
    user: User
    outcome: LinkProvenance
    avatar_enqueued: bool = False

    @field_validator("user")
    @classmethod
    def validate_user_active(cls, v: User) -> User:
        """A resolved user is always active."""
        if not v.active:
            raise ValueError("Resolved user must be active")
        return v


@dataclass
class Resolution:
    """Outcome of one reconciliation attempt, before commit."""

    user: User
    association: Association
    outcome: LinkProvenance
    avatar_job: AvatarJob | None


class ProvisionUseCase(BaseUseCase):
    """Use case for resolving an external identity to a local user."""

    def __init__(
        self,
        user_service: UserService,
        association_service: AssociationService,
        transaction_manager: TransactionManager,
        settings: ProvisioningSettings,
    ) -> None:
        """Initialize provision use case.

        Args:
            user_service: User directory domain service
            association_service: Association domain service
            transaction_manager: Atomic unit provider for the write sequence
            settings: Default provisioning policy
        """
        self.user_service = user_service
        self.association_service = association_service
        self.transaction_manager = transaction_manager
        self.settings = settings

    async def execute(self, request: ProvisionRequest) -> ProvisionResponse:
        """Resolve an identity assertion to a user.

        Steps:
        1. Exact match on (provider, subject)
        2. Otherwise match through the stored subject custom field, then by
           email, migrating the user's association for the provider
        3. Otherwise create a new account
        4. Activate staged accounts, refresh name, association metadata,
           email and profile
        5. Commit, then enqueue avatar retrieval

        A uniqueness conflict means a concurrent call linked the identity
        first: the attempt is rolled back and redone, at most
        ``max_race_retries`` times.

        Args:
            request: Assertion and optional policy override

        Returns:
            Provision response with the resolved, active user

        Raises:
            ValidationError: If the assertion cannot be provisioned
            ProvisioningError: If the store rejected the write sequence
        """
        policy = request.policy or self.settings
        assertion = request.assertion
        self._validate(assertion, policy)

        with logfire.span(
            "provision_user",
            provider=policy.provider,
            subject=assertion.subject,
        ):
            resolution = await self._reconcile_with_retry(assertion, policy)

            try:
                await self.transaction_manager.commit()
            except Exception as e:
                logfire.error(
                    "Provisioning commit failed",
                    provider=policy.provider,
                    subject=assertion.subject,
                    error=str(e),
                )
                raise ProvisioningError(
                    f"Failed to commit provisioning for {policy.provider}:{assertion.subject}",
                    cause=e,
                ) from e

            # Outside the transaction: failures here never undo the login
            avatar_enqueued = False
            if resolution.avatar_job:
                avatar_enqueued = await self.user_service.set_avatar_if_allowed(
                    resolution.user,
                    resolution.avatar_job.url,
                    policy.avatar_override_allowed,
                )

            logfire.info(
                "User provisioned",
                user_id=str(resolution.user.id),
                provider=policy.provider,
                outcome=resolution.outcome.value,
                avatar_enqueued=avatar_enqueued,
            )

            return ProvisionResponse(
                user_id=resolution.user.id,
                user=resolution.user,
                outcome=resolution.outcome,
                avatar_enqueued=avatar_enqueued,
            )

    def _validate(
        self, assertion: IdentityAssertion, policy: ProvisioningSettings
    ) -> None:
        """Reject assertions that cannot be reconciled.

        Raises:
            ValidationError: If the subject is blank, or the email is missing
                while email matching is enabled
        """
        if not assertion.subject:
            raise ValidationError("Identity assertion has no subject")
        if policy.email_match_enabled and not assertion.email:
            raise ValidationError(
                f"Identity assertion for {assertion.subject} has no email address"
            )

    async def _reconcile_with_retry(
        self, assertion: IdentityAssertion, policy: ProvisioningSettings
    ) -> Resolution:
        """Run reconciliation attempts until one completes or retries run out."""
        attempt = 0
        while True:
            try:
                async with self.transaction_manager.atomic():
                    return await self._reconcile(assertion, policy)
            except ConstraintViolationError as e:
                if attempt >= policy.max_race_retries:
                    logfire.error(
                        "Provisioning race retries exhausted",
                        provider=policy.provider,
                        subject=assertion.subject,
                        constraint=e.constraint,
                        attempts=attempt + 1,
                    )
                    raise ProvisioningError(
                        f"Could not link {policy.provider}:{assertion.subject} "
                        f"after {attempt + 1} attempts",
                        cause=e,
                    ) from e
                attempt += 1
                logfire.warn(
                    "Lost association race - reloading",
                    provider=policy.provider,
                    subject=assertion.subject,
                    constraint=e.constraint,
                    attempt=attempt,
                )
            except (ValidationError, ProvisioningError):
                raise
            except Exception as e:
                logfire.error(
                    "Provisioning failed",
                    provider=policy.provider,
                    subject=assertion.subject,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise ProvisioningError(
                    f"Failed to provision {policy.provider}:{assertion.subject}",
                    cause=e,
                ) from e

    async def _reconcile(
        self, assertion: IdentityAssertion, policy: ProvisioningSettings
    ) -> Resolution:
        """One reconciliation attempt; must run inside an atomic unit."""
        provider = policy.provider
        now = datetime.now(timezone.utc)

        existing = await self.association_service.get_by_external_identity(
            provider, assertion.subject
        )

        if existing:
            user = await self.user_service.get_by_id(existing.user_id)
            outcome = LinkProvenance.EXISTING
            # Keep recording how the identity was first linked
            provenance = existing.extra.link_provenance or LinkProvenance.EXISTING
        else:
            matched = await self._find_migration_target(assertion, policy)
            if matched:
                user, outcome = matched
                # One association per provider and user: drop the old link first
                await self.association_service.unlink(user.id, provider)
            else:
                if not assertion.email:
                    raise ValidationError(
                        f"Cannot create an account for {assertion.subject} without an email address"
                    )
                user = await self.user_service.create_user(
                    assertion.email, assertion.name
                )
                outcome = LinkProvenance.CREATED
            provenance = outcome

        if not user.active:
            user = await self.user_service.convert_staged_to_active(user)

        user = await self.user_service.update_display_name(user, assertion.name)

        association = await self.association_service.link(
            provider=provider,
            provider_uid=assertion.subject,
            user_id=user.id,
            metadata=build_association_metadata(assertion, provenance),
            now=now,
        )

        new_email = merge_email(user, assertion, policy.email_sync_enabled)
        if new_email:
            user = await self.user_service.update_email(user, new_email)

        user = await self.user_service.update_profile(
            user, merge_profile(user.profile, assertion)
        )

        if not user.active:
            raise ProvisioningError(f"User {user.id} is still {user.state.value}")

        return Resolution(
            user=user,
            association=association,
            outcome=outcome,
            avatar_job=merge_avatar(user, assertion, policy.avatar_override_allowed),
        )

    async def _find_migration_target(
        self, assertion: IdentityAssertion, policy: ProvisioningSettings
    ) -> tuple[User, LinkProvenance] | None:
        """Find an existing user for an identity that has no association yet."""
        if policy.custom_field_match_enabled:
            user = await self.user_service.find_by_custom_field(
                policy.custom_field_name, assertion.subject
            )
            if user:
                return user, LinkProvenance.CUSTOM_FIELD

        if self._can_match_email(assertion, policy):
            user = await self.user_service.find_active_or_staged_by_email(
                assertion.email
            )
            if user:
                return user, LinkProvenance.EMAIL

        return None

    @staticmethod
    def _can_match_email(
        assertion: IdentityAssertion, policy: ProvisioningSettings
    ) -> bool:
        """Whether the email claim may be used to find an existing account."""
        if not policy.email_match_enabled or not assertion.email:
            return False
        if policy.require_verified_email and not assertion.email_verified:
            logfire.info(
                "Email match skipped - email not verified",
                subject=assertion.subject,
            )
            return False
        return True
