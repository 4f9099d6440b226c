"""Domain model entities for Tether."""

from tether.domain.model.association import (
    Association,
    AssociationCredentials,
    AssociationExtra,
    AssociationInfo,
    AssociationMetadata,
)
from tether.domain.model.user import Profile, User

__all__ = [
    "User",
    "Profile",
    "Association",
    "AssociationInfo",
    "AssociationCredentials",
    "AssociationExtra",
    "AssociationMetadata",
]
