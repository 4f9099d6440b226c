"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping.
"""

from typing import Any, Dict
from uuid import UUID

from tether.domain.model import (
    Association,
    AssociationCredentials,
    AssociationExtra,
    AssociationInfo,
    Profile,
    User,
)
from tether.domain.value import AccountState, AssociationId, UserId


def _uuid(value: Any) -> UUID:
    return UUID(value) if isinstance(value, str) else value


def row_to_user(row: Dict[str, Any]) -> User:
    """Convert database row to User domain model.

    Args:
        row: Database row as dict

    Returns:
        User domain model
    """
    return User(
        id=UserId(_uuid(row["id"])),
        email=row.get("email"),
        name=row.get("name"),
        state=AccountState(row["state"]),
        avatar_url=row.get("avatar_url"),
        profile=Profile(bio=row.get("bio"), location=row.get("location")),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def user_to_dict(user: User) -> Dict[str, Any]:
    """Convert User domain model to database dict.

    The profile is stored inline on the users row.

    Args:
        user: User domain model

    Returns:
        Dict suitable for database insertion/update
    """
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "state": user.state.value,
        "avatar_url": user.avatar_url,
        "bio": user.profile.bio,
        "location": user.profile.location,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


def row_to_association(row: Dict[str, Any]) -> Association:
    """Convert database row to Association domain model.

    Args:
        row: Database row as dict

    Returns:
        Association domain model
    """
    return Association(
        id=AssociationId(_uuid(row["id"])),
        provider=row["provider"],
        provider_uid=row["provider_uid"],
        user_id=UserId(_uuid(row["user_id"])),
        info=AssociationInfo.model_validate(row.get("info") or {}),
        credentials=AssociationCredentials.model_validate(
            row.get("credentials") or {}
        ),
        extra=AssociationExtra.model_validate(row.get("extra") or {}),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        last_used=row.get("last_used"),
    )


def association_to_dict(association: Association) -> Dict[str, Any]:
    """Convert Association domain model to database dict.

    Args:
        association: Association domain model

    Returns:
        Dict suitable for database insertion/update
    """
    return {
        "id": association.id,
        "provider": association.provider,
        "provider_uid": association.provider_uid,
        "user_id": association.user_id,
        "info": association.info.model_dump(mode="json"),
        "credentials": association.credentials.model_dump(mode="json"),
        "extra": association.extra.model_dump(mode="json"),
        "created_at": association.created_at,
        "updated_at": association.updated_at,
        "last_used": association.last_used,
    }
