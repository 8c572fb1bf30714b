"""
User Service

Account CRUD. Creating a user also opens their wallet.
"""
from typing import Optional, List

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import get_password_hash, is_strong_password
from app.core.wallet.service import WalletService
from app.db.models.user import User
from app.db.repositories.user import UserRepository
from app.utils.exceptions import (
    EmailAlreadyExistsError,
    UserAlreadyExistsError,
    UserNotFoundError,
    WeakPasswordError,
)


def _normalize_email(email: Optional[str]) -> Optional[str]:
    if email is None or not email.strip():
        return None
    return email.strip().lower()


class UserService:
    """Service for user accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)
        self.wallets = WalletService(db)

    @staticmethod
    def _hash_checked(password: str) -> str:
        if not is_strong_password(password):
            raise WeakPasswordError()
        return get_password_hash(password)

    async def create_user(
        self,
        username: str,
        password: str,
        email: Optional[str] = None,
        is_superuser: bool = False,
    ) -> User:
        """
        Create a user and their wallet.

        Raises:
            UserAlreadyExistsError: username taken
            EmailAlreadyExistsError: email taken
            WeakPasswordError: password fails the strength rule
        """
        username = username.strip()
        email = _normalize_email(email)

        if await self.users.get_by_username(username) is not None:
            raise UserAlreadyExistsError(username)
        if email and await self.users.get_by_email(email) is not None:
            raise EmailAlreadyExistsError(email)

        user = await self.users.add(User(
            username=username,
            email=email,
            hashed_password=self._hash_checked(password),
            is_active=True,
            is_superuser=is_superuser,
        ))
        await self.wallets.create_wallet(user.id)

        logger.info(f"Created user {user.username} (id={user.id})")
        return user

    async def get_user(self, user_id: int) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def find_by_username(self, username: str) -> User:
        user = await self.users.get_by_username(username)
        if user is None:
            raise UserNotFoundError(username)
        return user

    async def list_users(self, skip: int = 0, limit: int = 100) -> List[User]:
        return await self.users.get_all(skip=skip, limit=limit)

    async def update_user(
        self,
        user_id: int,
        username: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> User:
        """Patch username, email and/or password. Blank values are ignored."""
        user = await self.get_user(user_id)

        if username and username.strip():
            new_username = username.strip()
            if new_username != user.username and await self.users.get_by_username(new_username):
                raise UserAlreadyExistsError(new_username)
            user.username = new_username

        new_email = _normalize_email(email)
        if new_email:
            if new_email != user.email and await self.users.get_by_email(new_email):
                raise EmailAlreadyExistsError(new_email)
            user.email = new_email

        if password:
            user.hashed_password = self._hash_checked(password)

        return await self.users.save(user)

    async def delete_user(self, user_id: int) -> None:
        if not await self.users.delete(user_id):
            raise UserNotFoundError(user_id)
        logger.info(f"Deleted user {user_id}")
