"""Mock avatar queue providers for testing."""

from dishka import Scope, provide

from tether.adapter.avatar import MockAvatarJobQueue
from tether.domain.service import AvatarJobQueue
from tether.util.di.infrastructure.avatar import AvatarProvider


class MockAvatarProvider(AvatarProvider):
    """Mock avatar provider recording jobs in memory."""

    __is_mock__ = True

    @provide(scope=Scope.REQUEST)
    def get_mock_avatar_job_queue(self) -> MockAvatarJobQueue:
        """Provide recording avatar queue, fresh per test."""
        return MockAvatarJobQueue()

    @provide(scope=Scope.REQUEST)
    def get_avatar_job_queue(self, queue: MockAvatarJobQueue) -> AvatarJobQueue:
        """Expose the recording queue under its interface."""
        return queue
