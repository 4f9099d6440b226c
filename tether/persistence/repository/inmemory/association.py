"""In-memory association repository for testing."""

from datetime import datetime
from typing import Optional
from uuid import uuid4

from tether.domain.error import ConstraintViolationError
from tether.domain.model.association import (
    Association,
    AssociationCredentials,
    AssociationExtra,
    AssociationInfo,
)
from tether.domain.repository.association import AssociationRepository
from tether.domain.value import AssociationId, UserId
from tether.persistence.tables import (
    UQ_ASSOCIATION_EXTERNAL_IDENTITY,
    UQ_ASSOCIATION_USER_PROVIDER,
)


class InMemoryAssociationRepository(AssociationRepository):
    """In-memory implementation of AssociationRepository for testing.

    Checks both uniqueness rules the way the database constraints would.
    """

    def __init__(self) -> None:
        self._associations: dict[AssociationId, Association] = {}

    async def find_by_external_identity(
        self, provider: str, provider_uid: str
    ) -> Optional[Association]:
        """Find association by provider and provider subject id."""
        for association in self._associations.values():
            if (
                association.provider == provider
                and association.provider_uid == provider_uid
            ):
                return association
        return None

    async def find_by_user_and_provider(
        self, user_id: UserId, provider: str
    ) -> Optional[Association]:
        """Find a user's association with a provider."""
        for association in self._associations.values():
            if association.user_id == user_id and association.provider == provider:
                return association
        return None

    async def find_all_by_user_id(self, user_id: UserId) -> list[Association]:
        """Find all associations for a user."""
        matches = [a for a in self._associations.values() if a.user_id == user_id]
        matches.sort(key=lambda a: a.created_at)
        return matches

    async def delete_all_for_user_and_provider(
        self, user_id: UserId, provider: str
    ) -> int:
        """Delete every association a user has with a provider."""
        doomed = [
            a.id
            for a in self._associations.values()
            if a.user_id == user_id and a.provider == provider
        ]
        for association_id in doomed:
            del self._associations[association_id]
        return len(doomed)

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
        """Insert or update the association for an external identity."""
        existing = await self.find_by_external_identity(provider, provider_uid)

        if existing:
            association = existing.model_copy(
                update={
                    "user_id": user_id,
                    "info": info,
                    "credentials": credentials,
                    "extra": extra,
                    "updated_at": now,
                    "last_used": now,
                }
            )
        else:
            association = Association(
                id=AssociationId(uuid4()),
                provider=provider,
                provider_uid=provider_uid,
                user_id=user_id,
                info=info,
                credentials=credentials,
                extra=extra,
                created_at=now,
                updated_at=now,
                last_used=now,
            )

        self._check_unique(association)
        self._associations[association.id] = association
        return association

    def _check_unique(self, association: Association) -> None:
        for other in self._associations.values():
            if other.id == association.id:
                continue
            if (
                other.provider == association.provider
                and other.provider_uid == association.provider_uid
            ):
                raise ConstraintViolationError(
                    UQ_ASSOCIATION_EXTERNAL_IDENTITY,
                    detail=f"{association.provider}:{association.provider_uid}",
                )
            if (
                other.provider == association.provider
                and other.user_id == association.user_id
            ):
                raise ConstraintViolationError(
                    UQ_ASSOCIATION_USER_PROVIDER,
                    detail=f"{association.provider}:{association.user_id}",
                )

    def snapshot(self) -> dict[AssociationId, Association]:
        """Copy current contents so a failed unit can be undone."""
        return dict(self._associations)

    def restore(self, snapshot: dict[AssociationId, Association]) -> None:
        """Put back contents taken by snapshot()."""
        self._associations = dict(snapshot)

    def all(self) -> list[Association]:
        """All stored associations, oldest first."""
        return sorted(self._associations.values(), key=lambda a: a.created_at)
