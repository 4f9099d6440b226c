"""Domain services."""

from .association_service import AssociationService
from .avatar_queue import AvatarJobQueue
from .merge_policy import (
    ProfileChanges,
    build_association_metadata,
    merge_avatar,
    merge_email,
    merge_profile,
)
from .user_service import UserService

__all__ = [
    "AssociationService",
    "AvatarJobQueue",
    "ProfileChanges",
    "UserService",
    "build_association_metadata",
    "merge_avatar",
    "merge_email",
    "merge_profile",
]
