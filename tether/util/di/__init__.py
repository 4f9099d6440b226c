"""Dependency injection module."""

from typing import Type

from tether.util.di.application import ProdApplicationProvider
from tether.util.di.base import Component, ProviderBase
from tether.util.di.core import ProdConfigProvider
from tether.util.di.domain import ProdDomainProvider
from tether.util.di.infrastructure import (
    AvatarProvider,
    PersistenceProvider,
    ProdAvatarProvider,
    ProdPersistenceProvider,
)

PROVIDERS: list[Type[ProviderBase]] = [
    # Core providers (not mockable)
    ProdConfigProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    # Infrastructure components (mockable)
    AvatarProvider,
    PersistenceProvider,
]


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Get the provider class to instantiate for a PROVIDERS entry.

    A base without subclasses is a concrete provider and is returned as-is.
    A base with subclasses is a mockable component; the subclass whose
    ``__is_mock__`` matches ``use_mock`` is returned.

    Args:
        base: Provider base class
        use_mock: Whether to use mock implementation

    Returns:
        Provider class (not instantiated)

    Raises:
        ValueError: If requested implementation not found
    """
    subclasses = base.__subclasses__()

    if not subclasses:
        return base

    impl = next(
        (c for c in subclasses if getattr(c, "__is_mock__", False) == use_mock),
        None,
    )

    if not impl:
        kind = "mock" if use_mock else "production"
        component_name = getattr(base, "__mock_component__", base.__name__)
        raise ValueError(f"No {kind} implementation for {component_name}")

    return impl


__all__ = [
    "Component",
    "ProviderBase",
    "PROVIDERS",
    "get_provider",
    # Core providers
    "ProdConfigProvider",
    "ProdDomainProvider",
    "ProdApplicationProvider",
    # Infrastructure base classes
    "AvatarProvider",
    "PersistenceProvider",
    # Infrastructure implementations
    "ProdAvatarProvider",
    "ProdPersistenceProvider",
]
