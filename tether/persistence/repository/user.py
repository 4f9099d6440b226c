"""PostgreSQL implementation of User repository."""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tether.domain.model import User
from tether.domain.repository import UserRepository
from tether.domain.value import AccountState, UserId
from tether.persistence.mappers import row_to_user, user_to_dict
from tether.persistence.tables import user_custom_fields_table, users_table


class PostgresUserRepository(UserRepository):
    """PostgreSQL implementation of UserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID.

        Args:
            user_id: User ID to look up

        Returns:
            User if found, None otherwise
        """
        stmt = select(users_table).where(users_table.c.id == user_id)
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_user(dict(row)) if row else None

    async def find_by_email(
        self, email: str, include_staged: bool = True
    ) -> Optional[User]:
        """Find a user by their email, ignoring case and surrounding spaces.

        Args:
            email: Normalized email to search for
            include_staged: Whether staged accounts may match

        Returns:
            User if found, None otherwise
        """
        stmt = (
            select(users_table)
            .where(func.lower(func.trim(users_table.c.email)) == email)
            .order_by(users_table.c.created_at)
        )
        if not include_staged:
            stmt = stmt.where(users_table.c.state != AccountState.STAGED.value)
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_user(dict(row)) if row else None

    async def find_by_custom_field(self, name: str, value: str) -> Optional[User]:
        """Find a user by a custom field value.

        Args:
            name: Custom field name
            value: Exact value to match

        Returns:
            User if found, None otherwise
        """
        stmt = (
            select(users_table)
            .select_from(
                users_table.join(
                    user_custom_fields_table,
                    users_table.c.id == user_custom_fields_table.c.user_id,
                )
            )
            .where(user_custom_fields_table.c.name == name)
            .where(user_custom_fields_table.c.value == value)
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_user(dict(row)) if row else None

    async def set_custom_field(self, user_id: UserId, name: str, value: str) -> None:
        """Create or replace a custom field on a user.

        Args:
            user_id: User ID
            name: Custom field name
            value: Value to store
        """
        stmt = select(user_custom_fields_table.c.value).where(
            user_custom_fields_table.c.user_id == user_id,
            user_custom_fields_table.c.name == name,
        )
        result = await self.session.execute(stmt)

        if result.first() is not None:
            stmt = (
                user_custom_fields_table.update()
                .where(
                    user_custom_fields_table.c.user_id == user_id,
                    user_custom_fields_table.c.name == name,
                )
                .values(value=value)
            )
        else:
            stmt = user_custom_fields_table.insert().values(
                user_id=user_id, name=name, value=value
            )
        await self.session.execute(stmt)
        await self.session.flush()

    async def save(self, user: User) -> User:
        """Save a user (create or update).

        Args:
            user: User to save

        Returns:
            Saved user
        """
        existing = await self.find_by_id(user.id)

        user_dict = user_to_dict(user)

        if existing:
            stmt = (
                users_table.update()
                .where(users_table.c.id == user.id)
                .values(**user_dict)
            )
            await self.session.execute(stmt)
        else:
            stmt = users_table.insert().values(**user_dict)
            await self.session.execute(stmt)

        await self.session.flush()
        return user
