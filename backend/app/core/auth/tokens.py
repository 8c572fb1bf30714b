"""
Refresh Token Service

Opaque, persisted refresh tokens.

Rotation policy: a token with more than 25% of its lifetime left is
returned as is; otherwise it is revoked and a new one is issued for the
same user and role.
"""
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.security import generate_refresh_token
from app.db.models.auth import RefreshToken
from app.db.models.user import Role
from app.utils.exceptions import InvalidRefreshTokenError


ROTATION_THRESHOLD = 0.25


class RefreshTokenService:
    """Create, validate, rotate and revoke refresh tokens."""

    def __init__(self, db: AsyncSession, lifetime: Optional[timedelta] = None):
        self.db = db
        self.lifetime = lifetime or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)

    async def _find(self, token: str) -> Optional[RefreshToken]:
        result = await self.db.execute(select(RefreshToken).where(RefreshToken.token == token))
        return result.scalar_one_or_none()

    async def create(self, user_id: int, authenticated_as: Role = Role.USER) -> RefreshToken:
        refresh = RefreshToken(
            token=generate_refresh_token(),
            user_id=user_id,
            expires_at=datetime.utcnow() + self.lifetime,
            revoked=False,
            authenticated_as=authenticated_as,
        )
        self.db.add(refresh)
        await self.db.flush()
        return refresh

    async def validate_usable(self, token: str) -> RefreshToken:
        """Raises InvalidRefreshTokenError for unknown, revoked or expired tokens."""
        refresh = await self._find(token) if token else None
        if refresh is None or not refresh.is_usable(datetime.utcnow()):
            raise InvalidRefreshTokenError()
        return refresh

    async def rotate(self, old: RefreshToken) -> RefreshToken:
        remaining = (old.expires_at - datetime.utcnow()) / self.lifetime
        if remaining > ROTATION_THRESHOLD:
            return old

        old.revoked = True
        await self.db.flush()
        return await self.create(old.user_id, old.authenticated_as or Role.USER)

    async def revoke(self, token: str) -> None:
        """Idempotent; unknown tokens are ignored."""
        refresh = await self._find(token) if token else None
        if refresh is not None and not refresh.revoked:
            refresh.revoked = True
            await self.db.flush()
