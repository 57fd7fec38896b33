"""Repository for user operations."""

from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from vivaply.storage.models import User


class UsersRepo:
    """Repository for library owners."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_user(self, user_id: str) -> User | None:
        """Get user by ID."""
        stmt = select(User).where(User.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create_user(self, user_id: str) -> User:
        """Get existing user or create a new one.

        Args:
            user_id: User ID

        Returns:
            User instance (new or existing)
        """
        user = await self.get_user(user_id)
        if user is not None:
            return user

        now = datetime.now(timezone.utc)
        user = User(user_id=user_id, created_at=now, last_seen_at=now)
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        return user

    async def update_last_seen(self, user_id: str) -> None:
        now = datetime.now(timezone.utc)
        stmt = update(User).where(User.user_id == user_id).values(last_seen_at=now)
        await self.session.execute(stmt)
        await self.session.commit()

    async def ensure_user(self, user_id: str) -> User:
        """Ensure user exists and bump last_seen_at."""
        user = await self.get_or_create_user(user_id)
        await self.update_last_seen(user_id)
        return user
