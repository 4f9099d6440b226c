"""Transaction manager interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager


class TransactionManager(ABC):
    """Groups repository writes into atomic units.

    ``atomic()`` opens a unit (a savepoint when a transaction is already
    running) that is rolled back if the block raises. ``commit()`` makes all
    completed units durable and visible to other callers.
    """

    @abstractmethod
    def atomic(self) -> AbstractAsyncContextManager[None]:
        """Open an atomic unit of work."""
        pass

    @abstractmethod
    async def commit(self) -> None:
        """Commit all completed units."""
        pass
