"""Avatar job queue clients.

Jobs are posted to an HTTP job endpoint that downloads the image and stores
it on the user later. Posting only hands the job off.
"""

import httpx
import logfire

from tether.adapter.error import AvatarQueueError
from tether.domain.service.avatar_queue import AvatarJobQueue
from tether.domain.value import AvatarJob


class HttpAvatarJobQueue(AvatarJobQueue):
    """Avatar job queue that posts jobs to an HTTP endpoint."""

    def __init__(self, jobs_url: str, timeout: float = 1.0) -> None:
        """Initialize HTTP queue client.

        Args:
            jobs_url: Endpoint accepting avatar jobs as JSON
            timeout: Seconds to wait for the endpoint to accept a job
        """
        self.jobs_url = jobs_url
        self.timeout = timeout

    async def enqueue(self, job: AvatarJob) -> None:
        """Post an avatar job.

        Only the hand-off happens here; the worker fetches the image later.
        The caller waits at most ``timeout`` seconds for the endpoint to
        accept the job.

        Args:
            job: Avatar job to hand off

        Raises:
            AvatarQueueError: If the endpoint rejects the job or is unreachable
        """
        payload = {
            "url": job.url,
            "user_id": str(job.user_id),
            "override_gravatar": job.override_gravatar,
        }

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.jobs_url,
                    json=payload,
                    timeout=self.timeout,
                )

                if response.status_code not in (200, 201, 202, 204):
                    logfire.error(
                        "Avatar job rejected",
                        status_code=response.status_code,
                        error=response.text,
                        user_id=str(job.user_id),
                    )
                    raise AvatarQueueError(
                        f"Avatar job rejected: {response.status_code}"
                    )

        except httpx.HTTPError as e:
            logfire.error("Avatar job HTTP error", error=str(e))
            raise AvatarQueueError(f"HTTP error enqueueing avatar job: {e}") from e

        logfire.info(
            "Avatar job enqueued",
            user_id=str(job.user_id),
            override_gravatar=job.override_gravatar,
        )


class MockAvatarJobQueue(AvatarJobQueue):
    """Avatar job queue for testing.

    Records jobs instead of sending them. Set ``fail`` to make every enqueue
    raise AvatarQueueError.
    """

    def __init__(self, fail: bool = False) -> None:
        self.jobs: list[AvatarJob] = []
        self.fail = fail

    async def enqueue(self, job: AvatarJob) -> None:
        """Record the job, or raise if configured to fail."""
        if self.fail:
            raise AvatarQueueError("Mock avatar queue unavailable")
        self.jobs.append(job)
