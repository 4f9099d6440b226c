"""Association entity.

Links one external identity (provider, subject) to exactly one local user.
"""

from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field

from tether.domain.model.common import DomainModel
from tether.domain.value import AssociationId, LinkProvenance, UserId


class AssociationInfo(DomainModel):
    """Display attributes snapshotted from the claims at link time."""

    model_config = ConfigDict(extra="allow")

    email: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None


class AssociationCredentials(DomainModel):
    """Provider credentials for the identity (reserved, empty by default)."""

    model_config = ConfigDict(extra="allow")


class AssociationExtra(DomainModel):
    """Flags about the identity and how it was linked."""

    model_config = ConfigDict(extra="allow")

    email_verified: bool = False
    link_provenance: Optional[LinkProvenance] = None


class AssociationMetadata(DomainModel):
    """The three metadata records written on every link or refresh."""

    info: AssociationInfo = Field(default_factory=AssociationInfo)
    credentials: AssociationCredentials = Field(
        default_factory=AssociationCredentials
    )
    extra: AssociationExtra = Field(default_factory=AssociationExtra)


class Association(DomainModel):
    """External identity linked to a user account.

    (provider, provider_uid) is unique, and a user holds at most one
    association per provider.
    """

    id: AssociationId
    provider: str
    provider_uid: str  # Permanent subject id from the provider
    user_id: UserId
    info: AssociationInfo = Field(default_factory=AssociationInfo)
    credentials: AssociationCredentials = Field(
        default_factory=AssociationCredentials
    )
    extra: AssociationExtra = Field(default_factory=AssociationExtra)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    last_used: Optional[datetime] = None
