"""Transaction manager backed by a SQLAlchemy session."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from tether.domain.repository import TransactionManager


class SqlAlchemyTransactionManager(TransactionManager):
    """Atomic units as SAVEPOINTs inside the session's transaction."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize transaction manager with database session.

        Args:
            session: SQLAlchemy async session shared with the repositories
        """
        self.session = session

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        """Run the block in a savepoint, rolled back if it raises.

        Begins the outer transaction first when none is running.
        """
        async with self.session.begin_nested():
            yield

    async def commit(self) -> None:
        """Commit the session's transaction."""
        await self.session.commit()
