"""Application layer DI providers."""

from dishka import Scope, provide

from tether.application.usecase.identity import (
    ProvisionUseCase,
    UnlinkAssociationUseCase,
)
from tether.config import ProvisioningSettings
from tether.domain.repository import TransactionManager
from tether.domain.service import AssociationService, UserService
from tether.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Application use cases provider."""

    @provide(scope=Scope.REQUEST)
    def get_provision_use_case(
        self,
        user_service: UserService,
        association_service: AssociationService,
        transaction_manager: TransactionManager,
        settings: ProvisioningSettings,
    ) -> ProvisionUseCase:
        """Provide provision use case."""
        return ProvisionUseCase(
            user_service=user_service,
            association_service=association_service,
            transaction_manager=transaction_manager,
            settings=settings,
        )

    @provide(scope=Scope.REQUEST)
    def get_unlink_association_use_case(
        self,
        user_service: UserService,
        association_service: AssociationService,
        transaction_manager: TransactionManager,
        settings: ProvisioningSettings,
    ) -> UnlinkAssociationUseCase:
        """Provide unlink association use case."""
        return UnlinkAssociationUseCase(
            user_service=user_service,
            association_service=association_service,
            transaction_manager=transaction_manager,
            settings=settings,
        )
