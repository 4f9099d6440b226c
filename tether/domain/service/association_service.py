"""Association domain service."""

from datetime import datetime

import logfire

from tether.domain.model import Association, AssociationMetadata
from tether.domain.repository import AssociationRepository
from tether.domain.value import UserId


class AssociationService:
    """Domain service for external identity associations."""

    def __init__(self, association_repository: AssociationRepository) -> None:
        """Initialize association service.

        Args:
            association_repository: Association repository
        """
        self.association_repository = association_repository

    async def get_by_external_identity(
        self, provider: str, provider_uid: str
    ) -> Association | None:
        """Get the association for an external identity.

        Args:
            provider: Identity provider name
            provider_uid: Subject id at that provider

        Returns:
            Association if found, None otherwise
        """
        with logfire.span(
            "association_service.get_by_external_identity",
            provider=provider,
            provider_uid=provider_uid,
        ):
            association = await self.association_repository.find_by_external_identity(
                provider, provider_uid
            )
            if association:
                logfire.info(
                    "Association found",
                    provider=provider,
                    provider_uid=provider_uid,
                    user_id=str(association.user_id),
                )
            return association

    async def get_for_user(
        self, user_id: UserId, provider: str
    ) -> Association | None:
        """Get a user's association with a provider.

        Args:
            user_id: User ID
            provider: Identity provider name

        Returns:
            Association if found, None otherwise
        """
        with logfire.span(
            "association_service.get_for_user",
            user_id=str(user_id),
            provider=provider,
        ):
            return await self.association_repository.find_by_user_and_provider(
                user_id, provider
            )

    async def get_all_for_user(self, user_id: UserId) -> list[Association]:
        """Get all associations of a user."""
        with logfire.span(
            "association_service.get_all_for_user", user_id=str(user_id)
        ):
            associations = await self.association_repository.find_all_by_user_id(
                user_id
            )
            logfire.info(
                "Associations retrieved for user",
                user_id=str(user_id),
                count=len(associations),
            )
            return associations

    async def unlink(self, user_id: UserId, provider: str) -> int:
        """Remove every association the user has with a provider.

        Must run before linking a different external identity from the same
        provider to the user.

        Args:
            user_id: User ID
            provider: Identity provider name

        Returns:
            Number of associations removed
        """
        with logfire.span(
            "association_service.unlink", user_id=str(user_id), provider=provider
        ):
            removed = (
                await self.association_repository.delete_all_for_user_and_provider(
                    user_id, provider
                )
            )
            if removed:
                logfire.info(
                    "Associations removed",
                    user_id=str(user_id),
                    provider=provider,
                    count=removed,
                )
            return removed

    async def link(
        self,
        provider: str,
        provider_uid: str,
        user_id: UserId,
        metadata: AssociationMetadata,
        now: datetime,
    ) -> Association:
        """Create or refresh the association for an external identity.

        Args:
            provider: Identity provider name
            provider_uid: Subject id at that provider
            user_id: User the identity resolves to
            metadata: Info, credentials and extra records to store
            now: Timestamp recorded as last use

        Returns:
            The stored association

        Raises:
            ConstraintViolationError: If a uniqueness rule would be broken
        """
        with logfire.span(
            "association_service.link",
            provider=provider,
            provider_uid=provider_uid,
            user_id=str(user_id),
        ):
            association = await self.association_repository.upsert(
                provider=provider,
                provider_uid=provider_uid,
                user_id=user_id,
                info=metadata.info,
                credentials=metadata.credentials,
                extra=metadata.extra,
                now=now,
            )
            logfire.info(
                "Association linked",
                association_id=str(association.id),
                provider=provider,
                user_id=str(user_id),
            )
            return association
