"""
Trading Simulator - Auth Models

Opaque refresh tokens and the registration passcode.
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum as SQLEnum

from app.db.database import Base
from app.db.models.user import Role


class RefreshToken(Base):
    """Persisted refresh token."""

    __tablename__ = "refresh_tokens"

    id = Column(Integer, primary_key=True, index=True)
    token = Column(String(128), nullable=False, unique=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    revoked = Column(Boolean, default=False, nullable=False)
    authenticated_as = Column(SQLEnum(Role), default=Role.USER, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    def is_usable(self, now: datetime) -> bool:
        return not self.revoked and self.expires_at > now

    def __repr__(self):
        return f"<RefreshToken user={self.user_id} revoked={self.revoked}>"


class Passcode(Base):
    """bcrypt hash of a registration passcode. At most one is active."""

    __tablename__ = "passcodes"

    id = Column(Integer, primary_key=True, index=True)
    hashed_passcode = Column(String(255), nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
