"""Avatar job queue interface."""

from tether.domain.value import AvatarJob


class AvatarJobQueue:
    """Accepts avatar retrieval jobs for background processing.

    Enqueueing returns as soon as the job is handed off; the download itself
    happens elsewhere.
    """

    async def enqueue(self, job: AvatarJob) -> None:
        """Hand an avatar retrieval job to the queue.

        Args:
            job: URL, target user and override flag

        Raises:
            AvatarQueueError: If the job could not be handed off
        """
        raise NotImplementedError
