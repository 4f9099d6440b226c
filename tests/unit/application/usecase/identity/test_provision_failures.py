"""Unit tests for ProvisionUseCase failure handling.

The store doubles here fail in controlled ways to exercise rollback and the
lost-race retry.
"""

import asyncio
from datetime import datetime, timezone
from uuid import uuid4

import pytest

from tether.adapter.avatar import MockAvatarJobQueue
from tether.application.usecase.identity import ProvisionRequest, ProvisionUseCase
from tether.config import ProvisioningSettings
from tether.domain.error import ConstraintViolationError, ProvisioningError
from tether.domain.model import Association
from tether.domain.service import AssociationService, UserService
from tether.domain.value import AssociationId, LinkProvenance
from tether.persistence.repository.inmemory import (
    InMemoryAssociationRepository,
    InMemoryTransactionManager,
    InMemoryUserRepository,
)
from tether.persistence.tables import UQ_ASSOCIATION_EXTERNAL_IDENTITY
from tests.conftest import make_assertion, make_user


class RacingAssociationRepository(InMemoryAssociationRepository):
    """Loses the first insert to a concurrent caller.

    The first upsert of a new identity fails as if another call had just
    committed the same identity; the other call's row becomes visible once
    the losing attempt rolls back.
    """

    def __init__(self, winner_user_id) -> None:
        super().__init__()
        self.winner_user_id = winner_user_id
        self.raced = False
        self._pending_winner: Association | None = None

    async def upsert(self, provider, provider_uid, user_id, info, credentials, extra, now):
        if not self.raced and not await self.find_by_external_identity(
            provider, provider_uid
        ):
            self.raced = True
            self._pending_winner = Association(
                id=AssociationId(uuid4()),
                provider=provider,
                provider_uid=provider_uid,
                user_id=self.winner_user_id,
                created_at=now,
                updated_at=now,
                last_used=now,
            )
            raise ConstraintViolationError(UQ_ASSOCIATION_EXTERNAL_IDENTITY)
        return await super().upsert(
            provider, provider_uid, user_id, info, credentials, extra, now
        )

    def restore(self, snapshot) -> None:
        super().restore(snapshot)
        if self._pending_winner:
            self._associations[self._pending_winner.id] = self._pending_winner
            self._pending_winner = None


class ConflictingAssociationRepository(InMemoryAssociationRepository):
    """Every upsert loses a race."""

    def __init__(self) -> None:
        super().__init__()
        self.attempts = 0

    async def upsert(self, provider, provider_uid, user_id, info, credentials, extra, now):
        self.attempts += 1
        raise ConstraintViolationError(UQ_ASSOCIATION_EXTERNAL_IDENTITY)


class FailingAssociationRepository(InMemoryAssociationRepository):
    """Every upsert fails with the given exception."""

    def __init__(self, error: BaseException) -> None:
        super().__init__()
        self.error = error

    async def upsert(self, provider, provider_uid, user_id, info, credentials, extra, now):
        raise self.error


class FailingCommitTransactionManager(InMemoryTransactionManager):
    """Commit always fails."""

    async def commit(self) -> None:
        raise RuntimeError("connection lost during commit")


def build(
    association_repository: InMemoryAssociationRepository | None = None,
    transaction_manager_class: type[InMemoryTransactionManager] = (
        InMemoryTransactionManager
    ),
    **policy,
):
    users = InMemoryUserRepository()
    associations = association_repository or InMemoryAssociationRepository()
    tm = transaction_manager_class(users, associations)
    use_case = ProvisionUseCase(
        user_service=UserService(users, MockAvatarJobQueue()),
        association_service=AssociationService(associations),
        transaction_manager=tm,
        settings=ProvisioningSettings(**policy),
    )
    return use_case, users, associations, tm


class TestLostRace:
    """Tests for the reload-and-redo retry."""

    @pytest.mark.asyncio
    async def test_lost_race_resolves_to_winner(self):
        """A losing call is redone and resolves to the winner's user."""
        # Arrange
        winner = make_user(email="winner@example.com")
        racing = RacingAssociationRepository(winner.id)
        use_case, users, associations, tm = build(racing)
        await users.save(winner)

        # Act
        response = await use_case.execute(
            ProvisionRequest(assertion=make_assertion("sub-1"))
        )

        # Assert
        assert racing.raced
        assert response.user_id == winner.id
        assert response.outcome == LinkProvenance.EXISTING
        # The account created by the losing attempt was rolled back
        assert [u.id for u in users.all()] == [winner.id]
        assert len(associations.all()) == 1
        assert tm.rollbacks == 1
        assert tm.commits == 1

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_and_roll_back(self):
        """Conflicts beyond the retry budget surface as ProvisioningError."""
        # Arrange
        conflicting = ConflictingAssociationRepository()
        use_case, users, associations, tm = build(conflicting)

        # Act
        with pytest.raises(ProvisioningError) as exc_info:
            await use_case.execute(ProvisionRequest(assertion=make_assertion("sub-1")))

        # Assert
        assert isinstance(exc_info.value.cause, ConstraintViolationError)
        assert conflicting.attempts == 2
        assert users.all() == []
        assert associations.all() == []
        assert tm.commits == 0

    @pytest.mark.asyncio
    async def test_retry_budget_is_configurable(self):
        """With no retries allowed the first conflict is final."""
        conflicting = ConflictingAssociationRepository()
        use_case, _, _, _ = build(conflicting, max_race_retries=0)

        with pytest.raises(ProvisioningError):
            await use_case.execute(ProvisionRequest(assertion=make_assertion("sub-1")))

        assert conflicting.attempts == 1


class TestStoreFailures:
    """Tests for failures that are not races."""

    @pytest.mark.asyncio
    async def test_store_error_rolls_back_and_wraps_cause(self):
        """An unexpected store error is wrapped and leaves no writes."""
        # Arrange
        error = RuntimeError("disk full")
        use_case, users, associations, tm = build(FailingAssociationRepository(error))
        existing = make_user()
        await users.save(existing)

        # Act
        with pytest.raises(ProvisioningError) as exc_info:
            await use_case.execute(
                ProvisionRequest(
                    assertion=make_assertion("sub-1", bio="Mathematician")
                )
            )

        # Assert
        assert exc_info.value.cause is error
        assert users.all() == [existing]
        assert associations.all() == []
        assert tm.rollbacks == 1
        assert tm.commits == 0

    @pytest.mark.asyncio
    async def test_commit_failure_is_wrapped(self):
        """A failing commit surfaces as ProvisioningError."""
        use_case, _, _, _ = build(
            transaction_manager_class=FailingCommitTransactionManager
        )

        with pytest.raises(ProvisioningError) as exc_info:
            await use_case.execute(ProvisionRequest(assertion=make_assertion("sub-1")))

        assert isinstance(exc_info.value.cause, RuntimeError)

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        """Cancellation is neither retried nor wrapped."""
        use_case, users, _, _ = build(
            FailingAssociationRepository(asyncio.CancelledError())
        )

        with pytest.raises(asyncio.CancelledError):
            await use_case.execute(ProvisionRequest(assertion=make_assertion("sub-1")))

        assert users.all() == []

    @pytest.mark.asyncio
    async def test_request_policy_overrides_configured_policy(self):
        """A policy on the request replaces the use case default."""
        use_case, users, _, _ = build(email_match_enabled=False)
        existing = make_user()
        await users.save(existing)

        default = await use_case.execute(
            ProvisionRequest(assertion=make_assertion("sub-1"))
        )
        overridden = await use_case.execute(
            ProvisionRequest(
                assertion=make_assertion("sub-2", email="ada@example.com"),
                policy=ProvisioningSettings(email_match_enabled=True),
            )
        )

        assert default.outcome == LinkProvenance.CREATED
        assert overridden.outcome == LinkProvenance.EMAIL
