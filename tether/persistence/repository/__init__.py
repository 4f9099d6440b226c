"""PostgreSQL repository implementations."""

from tether.persistence.repository.association import PostgresAssociationRepository
from tether.persistence.repository.user import PostgresUserRepository

__all__ = [
    "PostgresAssociationRepository",
    "PostgresUserRepository",
]
