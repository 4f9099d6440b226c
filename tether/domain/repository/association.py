"""Association repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from tether.domain.model.association import (
    Association,
    AssociationCredentials,
    AssociationExtra,
    AssociationInfo,
)
from tether.domain.value import UserId


class AssociationRepository(ABC):
    """Repository for Association entity.

    Owns two uniqueness rules: one row per (provider, provider_uid), and one
    row per (provider, user_id). Implementations must reject writes breaking
    either with ConstraintViolationError rather than silently merging rows.
    """

    @abstractmethod
    async def find_by_external_identity(
        self, provider: str, provider_uid: str
    ) -> Optional[Association]:
        """Find the association for an external identity.

        Args:
            provider: Identity provider name
            provider_uid: Subject id at that provider

        Returns:
            The association if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_user_and_provider(
        self, user_id: UserId, provider: str
    ) -> Optional[Association]:
        """Find a user's association with a provider.

        Args:
            user_id: The user's unique identifier
            provider: Identity provider name

        Returns:
            The association if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_all_by_user_id(self, user_id: UserId) -> list[Association]:
        """Get all associations of a user, oldest first.

        Args:
            user_id: The user's unique identifier

        Returns:
            List of associations (may be empty)
        """
        pass

    @abstractmethod
    async def delete_all_for_user_and_provider(
        self, user_id: UserId, provider: str
    ) -> int:
        """Delete every association a user has with a provider.

        Idempotent.

        Args:
            user_id: The user's unique identifier
            provider: Identity provider name

        Returns:
            Number of rows deleted
        """
        pass

    @abstractmethod
    async def upsert(
        self,
        provider: str,
        provider_uid: str,
        user_id: UserId,
        info: AssociationInfo,
        credentials: AssociationCredentials,
        extra: AssociationExtra,
        now: datetime,
    ) -> Association:
        """Insert or update the association for an external identity.

        If a row for (provider, provider_uid) exists its user pointer and
        metadata are updated, otherwise a row is inserted. ``last_used`` is
        set to ``now`` either way.

        Args:
            provider: Identity provider name
            provider_uid: Subject id at that provider
            user_id: User the identity resolves to
            info: Display attributes snapshot
            credentials: Provider credentials
            extra: Verification flags and link provenance
            now: Timestamp of this reconciliation

        Returns:
            The stored association

        Raises:
            ConstraintViolationError: If the write would break a uniqueness rule
        """
        pass
