"""Repository interfaces for Tether domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from tether.domain.repository.association import AssociationRepository
from tether.domain.repository.transaction import TransactionManager
from tether.domain.repository.user import UserRepository

__all__ = [
    "AssociationRepository",
    "TransactionManager",
    "UserRepository",
]
