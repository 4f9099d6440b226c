"""In-memory transaction manager for testing."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from tether.domain.repository.transaction import TransactionManager

from .association import InMemoryAssociationRepository
from .user import InMemoryUserRepository


class InMemoryTransactionManager(TransactionManager):
    """Serializes atomic units and undoes a unit's writes when it raises.

    Units from different tasks run one at a time, which stands in for the
    row locks a database would take. Nested units in the same task share
    the outer lock.
    """

    def __init__(
        self,
        user_repository: InMemoryUserRepository,
        association_repository: InMemoryAssociationRepository,
    ) -> None:
        self.user_repository = user_repository
        self.association_repository = association_repository
        self.commits = 0
        self.rollbacks = 0
        self._lock = asyncio.Lock()
        self._owner: Optional[asyncio.Task] = None

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        """Run the block as one unit, restoring prior contents on error."""
        current = asyncio.current_task()
        if self._owner is not None and self._owner is current:
            async with self._unit():
                yield
            return

        async with self._lock:
            self._owner = current
            try:
                async with self._unit():
                    yield
            finally:
                self._owner = None

    @asynccontextmanager
    async def _unit(self) -> AsyncIterator[None]:
        users = self.user_repository.snapshot()
        associations = self.association_repository.snapshot()
        try:
            yield
        except BaseException:
            self.user_repository.restore(users)
            self.association_repository.restore(associations)
            self.rollbacks += 1
            raise

    async def commit(self) -> None:
        """Count the commit; writes are already visible."""
        self.commits += 1
