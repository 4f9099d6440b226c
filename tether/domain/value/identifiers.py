"""Strongly typed identifiers for Tether domain entities."""

from typing import NewType
from uuid import UUID

UserId = NewType("UserId", UUID)
AssociationId = NewType("AssociationId", UUID)
