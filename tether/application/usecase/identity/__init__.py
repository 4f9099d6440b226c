"""Identity use cases."""

from .provision import ProvisionRequest, ProvisionResponse, ProvisionUseCase
from .unlink import UnlinkAssociationUseCase, UnlinkRequest, UnlinkResponse

__all__ = [
    "ProvisionRequest",
    "ProvisionResponse",
    "ProvisionUseCase",
    "UnlinkAssociationUseCase",
    "UnlinkRequest",
    "UnlinkResponse",
]
