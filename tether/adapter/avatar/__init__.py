"""Avatar job queue adapter."""

from .queue import HttpAvatarJobQueue, MockAvatarJobQueue

__all__ = ["HttpAvatarJobQueue", "MockAvatarJobQueue"]
