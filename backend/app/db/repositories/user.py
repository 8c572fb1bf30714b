"""
Trading Simulator - User Repository
CRUD operations for User model
"""
from datetime import datetime
from typing import Optional, List

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.user import User


class UserRepository:
    """Repository for User CRUD operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_by_id(self, user_id: int) -> Optional[User]:
        """
        Get user by ID.

        Args:
            user_id: The user's ID

        Returns:
            User object if found, None otherwise
        """
        result = await self.session.execute(
            select(User).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.username == username)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.email == email)
        )
        return result.scalar_one_or_none()

    async def exists(self, user_id: int) -> bool:
        result = await self.session.execute(
            select(func.count(User.id)).where(User.id == user_id)
        )
        return (result.scalar() or 0) > 0

    async def get_all(self, skip: int = 0, limit: int = 100) -> List[User]:
        """Get users ordered by id, paginated."""
        result = await self.session.execute(
            select(User).order_by(User.id).offset(skip).limit(limit)
        )
        return list(result.scalars().all())

    async def get_ids(self, superusers_only: bool = False) -> List[int]:
        """Ids of every user, or of admins only."""
        query = select(User.id).order_by(User.id)
        if superusers_only:
            query = query.where(User.is_superuser.is_(True))
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def add(self, user: User) -> User:
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def save(self, user: User) -> User:
        user.updated_at = datetime.utcnow()
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def delete(self, user_id: int) -> bool:
        """Delete a user. Returns False if nothing was deleted."""
        result = await self.session.execute(
            delete(User).where(User.id == user_id)
        )
        await self.session.flush()
        return result.rowcount > 0

    async def update_last_login(self, user: User) -> None:
        user.last_login = datetime.utcnow()
        await self.session.flush()
