"""
Auth Service

Registration (gated by the passcode), login with a chosen role, refresh
and logout. Access tokens are JWTs; refresh tokens are opaque and
persisted (see app.core.auth.tokens).
"""
from dataclasses import dataclass
from typing import List, Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.auth.passcode import PasscodeService
from app.core.auth.tokens import RefreshTokenService
from app.core.security import create_access_token, verify_password
from app.core.users.service import UserService
from app.db.models.user import Role, User
from app.db.repositories.user import UserRepository
from app.utils.exceptions import (
    InvalidCredentialsError,
    RoleNotAssignedError,
    UserNotFoundError,
)


@dataclass
class Registration:
    user_id: int
    username: str
    roles: List[Role]


@dataclass
class AuthResult:
    access_token: str
    refresh_token: str
    username: str
    roles: List[Role]
    authenticated_as: Role
    token_type: str = "bearer"
    expires_in: int = settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60


class AuthService:
    """Authentication flows."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)
        self.user_service = UserService(db)
        self.passcodes = PasscodeService(db)
        self.refresh_tokens = RefreshTokenService(db)

    async def register(
        self,
        username: str,
        password: str,
        passcode: str,
        email: Optional[str] = None,
    ) -> Registration:
        """Passcode holders get both the user and the admin role."""
        await self.passcodes.validate(passcode)
        user = await self.user_service.create_user(
            username=username,
            password=password,
            email=email,
            is_superuser=True,
        )
        return Registration(user_id=user.id, username=user.username, roles=user.roles)

    async def login(self, username: str, password: str, role: str = "user") -> AuthResult:
        user = await self.users.get_by_username((username or "").strip())
        if user is None or not verify_password(password or "", user.hashed_password):
            raise InvalidCredentialsError()

        try:
            chosen = Role.parse(role)
        except ValueError:
            raise RoleNotAssignedError(role)
        if not user.has_role(chosen):
            raise RoleNotAssignedError(chosen.value)

        await self.users.update_last_login(user)
        refresh = await self.refresh_tokens.create(user.id, chosen)
        logger.info(f"User {user.username} logged in as {chosen.value}")
        return self._result(user, chosen, refresh.token)

    async def refresh(self, token: str) -> AuthResult:
        """Validate, maybe rotate, and issue a fresh access token."""
        old = await self.refresh_tokens.validate_usable(token)
        fresh = await self.refresh_tokens.rotate(old)

        user = await self.users.get_by_id(fresh.user_id)
        if user is None:
            raise UserNotFoundError(fresh.user_id)
        return self._result(user, fresh.authenticated_as or Role.USER, fresh.token)

    async def logout(self, token: str) -> None:
        await self.refresh_tokens.revoke(token)

    @staticmethod
    def _result(user: User, role: Role, refresh_token: str) -> AuthResult:
        access, _ = create_access_token(user.id, role=role.value)
        return AuthResult(
            access_token=access,
            refresh_token=refresh_token,
            username=user.username,
            roles=user.roles,
            authenticated_as=role,
        )
