"""Infrastructure providers."""

# Import bases
from .avatar import AvatarProvider
from .persistence import PersistenceProvider

# Import implementations (needed for __subclasses__())
from .avatar import ProdAvatarProvider  # noqa: F401
from .persistence import ProdPersistenceProvider  # noqa: F401

__all__ = [
    "AvatarProvider",
    "PersistenceProvider",
    "ProdAvatarProvider",
    "ProdPersistenceProvider",
]
