"""Avatar job queue infrastructure providers."""

from dishka import Scope, provide

from tether.adapter.avatar import HttpAvatarJobQueue
from tether.config import Settings
from tether.domain.service import AvatarJobQueue
from tether.util.di.base import ProviderBase
from tether.util.error import ConfigurationError
from tether.util.observability import instrument_httpx


class AvatarProvider(ProviderBase):
    """Avatar queue component base."""

    __mock_component__ = "avatar"


class ProdAvatarProvider(AvatarProvider):
    """Production avatar queue provider."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_avatar_job_queue(self, settings: Settings) -> AvatarJobQueue:
        """Provide HTTP avatar job queue.

        Raises:
            ConfigurationError: If the jobs endpoint is not configured
        """
        if not settings.avatar.jobs_url:
            raise ConfigurationError("Avatar jobs URL must be configured")

        instrument_httpx()
        return HttpAvatarJobQueue(
            jobs_url=settings.avatar.jobs_url,
            timeout=settings.avatar.timeout_seconds,
        )
