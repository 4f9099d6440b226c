"""Association repository implementation using PostgreSQL."""

from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tether.domain.error import ConstraintViolationError
from tether.domain.model import (
    Association,
    AssociationCredentials,
    AssociationExtra,
    AssociationInfo,
)
from tether.domain.repository import AssociationRepository
from tether.domain.value import AssociationId, UserId
from tether.persistence.mappers import association_to_dict, row_to_association
from tether.persistence.tables import (
    UQ_ASSOCIATION_EXTERNAL_IDENTITY,
    UQ_ASSOCIATION_USER_PROVIDER,
    associations_table,
)


def constraint_from_error(error: IntegrityError) -> str:
    """Name the association uniqueness rule an IntegrityError broke.

    PostgreSQL reports the constraint name; SQLite reports the columns.
    """
    message = str(error.orig)
    if UQ_ASSOCIATION_USER_PROVIDER in message or "associations.user_id" in message:
        return UQ_ASSOCIATION_USER_PROVIDER
    return UQ_ASSOCIATION_EXTERNAL_IDENTITY


class PostgresAssociationRepository(AssociationRepository):
    """PostgreSQL implementation of AssociationRepository.

    Uniqueness is enforced by the table's unique constraints; violations are
    raised as ConstraintViolationError. Callers run writes inside a savepoint
    so a violation leaves the outer transaction usable.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_external_identity(
        self, provider: str, provider_uid: str
    ) -> Optional[Association]:
        """Get the association for an external identity.

        Args:
            provider: Identity provider name
            provider_uid: Subject id at that provider

        Returns:
            Association if found, None otherwise
        """
        stmt = select(associations_table).where(
            associations_table.c.provider == provider,
            associations_table.c.provider_uid == provider_uid,
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_association(dict(row)) if row else None

    async def find_by_user_and_provider(
        self, user_id: UserId, provider: str
    ) -> Optional[Association]:
        """Get a user's association with a provider.

        Args:
            user_id: User ID
            provider: Identity provider name

        Returns:
            Association if found, None otherwise
        """
        stmt = select(associations_table).where(
            associations_table.c.user_id == user_id,
            associations_table.c.provider == provider,
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_association(dict(row)) if row else None

    async def find_all_by_user_id(self, user_id: UserId) -> list[Association]:
        """Find all associations of a user.

        Args:
            user_id: User ID to find associations for

        Returns:
            List of associations (may be empty)
        """
        stmt = (
            select(associations_table)
            .where(associations_table.c.user_id == user_id)
            .order_by(associations_table.c.created_at)
        )
        result = await self.session.execute(stmt)
        return [row_to_association(dict(row)) for row in result.mappings().all()]

    async def delete_all_for_user_and_provider(
        self, user_id: UserId, provider: str
    ) -> int:
        """Delete every association a user has with a provider.

        Args:
            user_id: User ID
            provider: Identity provider name

        Returns:
            Number of rows deleted
        """
        stmt = associations_table.delete().where(
            associations_table.c.user_id == user_id,
            associations_table.c.provider == provider,
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount or 0

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

        Deliberately not INSERT ... ON CONFLICT: a concurrent insert for the
        same identity must surface as a violation, not be merged.

        Returns:
            The stored association

        Raises:
            ConstraintViolationError: If a uniqueness constraint is violated
        """
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
            values = association_to_dict(association)
            values.pop("id")
            values.pop("created_at")
            stmt = (
                associations_table.update()
                .where(associations_table.c.id == existing.id)
                .values(**values)
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
            stmt = associations_table.insert().values(
                **association_to_dict(association)
            )

        try:
            await self.session.execute(stmt)
            await self.session.flush()
        except IntegrityError as e:
            raise ConstraintViolationError(
                constraint_from_error(e), detail=f"{provider}:{provider_uid}"
            ) from e

        return association
