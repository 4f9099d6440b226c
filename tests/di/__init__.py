"""Mock providers for testing."""

from .avatar import MockAvatarProvider
from .persistence import MockPersistenceProvider
from .container import build_test_container

__all__ = [
    "MockAvatarProvider",
    "MockPersistenceProvider",
    "build_test_container",
]
