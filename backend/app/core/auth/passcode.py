"""
Registration Passcode

New accounts must present the shared passcode. Only its bcrypt hash is
stored; the plain value comes from REGISTRATION_PASSCODE once, on first
startup.
"""
from typing import Optional

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import get_password_hash, verify_password
from app.db.models.auth import Passcode
from app.utils.exceptions import InvalidPasscodeError


class PasscodeService:
    """Validate and rotate the registration passcode."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_active(self) -> Optional[Passcode]:
        result = await self.db.execute(
            select(Passcode).where(Passcode.active.is_(True)).order_by(Passcode.id.desc()).limit(1)
        )
        return result.scalar_one_or_none()

    async def validate(self, raw: Optional[str]) -> None:
        """Raises InvalidPasscodeError unless raw matches the active passcode."""
        active = await self.get_active()
        if active is None or not raw or not verify_password(raw, active.hashed_passcode):
            raise InvalidPasscodeError()

    async def set_passcode(self, raw: str) -> Passcode:
        """Deactivate the current passcode and store a new one."""
        await self.db.execute(update(Passcode).where(Passcode.active.is_(True)).values(active=False))
        passcode = Passcode(hashed_passcode=get_password_hash(raw), active=True)
        self.db.add(passcode)
        await self.db.flush()
        return passcode

    async def ensure_initialized(self, raw: Optional[str]) -> bool:
        """Seed the passcode when none is active. Returns True if one was created."""
        if await self.get_active() is not None:
            return False
        if not raw:
            logger.warning("No registration passcode configured, registration is closed")
            return False
        await self.set_passcode(raw)
        logger.info("Registration passcode initialized")
        return True
