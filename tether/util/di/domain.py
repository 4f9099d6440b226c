"""Domain layer DI providers."""

from dishka import Scope, provide

from tether.domain.repository import AssociationRepository, UserRepository
from tether.domain.service import AssociationService, AvatarJobQueue, UserService
from tether.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Domain services provider.

    Services are REQUEST-scoped so they share the request's repositories and
    therefore its database session.
    """

    scope = Scope.REQUEST

    @provide
    def get_user_service(
        self, user_repository: UserRepository, avatar_queue: AvatarJobQueue
    ) -> UserService:
        """Provide user directory domain service."""
        return UserService(user_repository=user_repository, avatar_queue=avatar_queue)

    @provide
    def get_association_service(
        self, association_repository: AssociationRepository
    ) -> AssociationService:
        """Provide association domain service."""
        return AssociationService(association_repository=association_repository)
