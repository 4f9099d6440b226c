"""Unlink association use case."""

import logfire
from pydantic import BaseModel

from tether.application.usecase.base import BaseUseCase
from tether.config import ProvisioningSettings
from tether.domain.error import ProvisioningError
from tether.domain.repository import TransactionManager
from tether.domain.service import AssociationService, UserService
from tether.domain.value import UserId


class UnlinkRequest(BaseModel):
    """Unlink request."""

    user_id: UserId
    provider: str | None = None  # Defaults to the configured provider


class UnlinkResponse(BaseModel):
    """Unlink response."""

    user_id: UserId
    provider: str
    removed: int


class UnlinkAssociationUseCase(BaseUseCase):
    """Use case for revoking a user's link to the identity provider."""

    def __init__(
        self,
        user_service: UserService,
        association_service: AssociationService,
        transaction_manager: TransactionManager,
        settings: ProvisioningSettings,
    ) -> None:
        """Initialize unlink use case.

        Args:
            user_service: User directory domain service
            association_service: Association domain service
            transaction_manager: Atomic unit provider
            settings: Provisioning policy (supplies the default provider)
        """
        self.user_service = user_service
        self.association_service = association_service
        self.transaction_manager = transaction_manager
        self.settings = settings

    async def execute(self, request: UnlinkRequest) -> UnlinkResponse:
        """Remove the user's association with a provider.

        Idempotent: unlinking a user with no association removes nothing.

        Args:
            request: User and optional provider

        Returns:
            Number of associations removed

        Raises:
            NotFoundError: If the user does not exist
            ProvisioningError: If the store rejected the delete
        """
        provider = request.provider or self.settings.provider

        with logfire.span(
            "unlink_association", user_id=str(request.user_id), provider=provider
        ):
            user = await self.user_service.get_by_id(request.user_id)

            try:
                async with self.transaction_manager.atomic():
                    removed = await self.association_service.unlink(user.id, provider)
                await self.transaction_manager.commit()
            except Exception as e:
                logfire.error(
                    "Unlink failed",
                    user_id=str(user.id),
                    provider=provider,
                    error=str(e),
                )
                raise ProvisioningError(
                    f"Failed to unlink {provider} from user {user.id}", cause=e
                ) from e

            return UnlinkResponse(user_id=user.id, provider=provider, removed=removed)
