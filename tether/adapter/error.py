"""Adapter layer errors."""


class AdapterError(Exception):
    """Base adapter error."""

    pass


class AvatarQueueError(AdapterError):
    """Avatar job could not be handed to the queue."""

    pass
