"""Mock persistence providers for testing."""

from dishka import Scope, provide

from tether.domain.repository import (
    AssociationRepository,
    TransactionManager,
    UserRepository,
)
from tether.persistence.repository.inmemory import (
    InMemoryAssociationRepository,
    InMemoryTransactionManager,
    InMemoryUserRepository,
)
from tether.util.di.infrastructure.persistence import PersistenceProvider


class MockPersistenceProvider(PersistenceProvider):
    """Mock persistence provider using in-memory repositories.

    Uses REQUEST scope to ensure test isolation - each test gets fresh repositories.
    The in-memory classes are provided too so tests can inspect stored rows.
    """

    __is_mock__ = True

    @provide(scope=Scope.REQUEST)
    def get_inmemory_user_repository(self) -> InMemoryUserRepository:
        """Provide in-memory user repository."""
        return InMemoryUserRepository()

    @provide(scope=Scope.REQUEST)
    def get_inmemory_association_repository(self) -> InMemoryAssociationRepository:
        """Provide in-memory association repository."""
        return InMemoryAssociationRepository()

    @provide(scope=Scope.REQUEST)
    def get_user_repository(self, repository: InMemoryUserRepository) -> UserRepository:
        """Expose the in-memory user repository under its interface."""
        return repository

    @provide(scope=Scope.REQUEST)
    def get_association_repository(
        self, repository: InMemoryAssociationRepository
    ) -> AssociationRepository:
        """Expose the in-memory association repository under its interface."""
        return repository

    @provide(scope=Scope.REQUEST)
    def get_inmemory_transaction_manager(
        self,
        user_repository: InMemoryUserRepository,
        association_repository: InMemoryAssociationRepository,
    ) -> InMemoryTransactionManager:
        """Provide transaction manager over the in-memory repositories."""
        return InMemoryTransactionManager(user_repository, association_repository)

    @provide(scope=Scope.REQUEST)
    def get_transaction_manager(
        self, transaction_manager: InMemoryTransactionManager
    ) -> TransactionManager:
        """Expose the in-memory transaction manager under its interface."""
        return transaction_manager
