"""In-memory repository implementations for testing."""

from .association import InMemoryAssociationRepository
from .transaction import InMemoryTransactionManager
from .user import InMemoryUserRepository

__all__ = [
    "InMemoryAssociationRepository",
    "InMemoryTransactionManager",
    "InMemoryUserRepository",
]
