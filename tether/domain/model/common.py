"""Base model for all domain entities."""

from pydantic import BaseModel, ConfigDict


class DomainModel(BaseModel):
    """Base class for users, associations and their metadata records.

    Entities are immutable; updates go through ``model_copy(update=...)`` and
    are persisted explicitly by a repository.
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
    )
