"""
Trading Simulator - User Model
"""
from datetime import datetime
import enum
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship

from app.db.database import Base


class Role(str, enum.Enum):
    """Roles a user can authenticate as."""
    USER = "user"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: str) -> "Role":
        """Accept 'admin', 'ADMIN' or 'ROLE_ADMIN'."""
        norm = (value or "").strip().lower()
        if norm.startswith("role_"):
            norm = norm[len("role_"):]
        return cls(norm)


class User(Base):
    """User account model."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=True)
    hashed_password = Column(String(255), nullable=False)

    is_active = Column(Boolean, default=True)
    # Holds the admin role in addition to the user role
    is_superuser = Column(Boolean, default=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)

    # Relationships
    wallet = relationship("Wallet", back_populates="user", uselist=False, passive_deletes=True)
    positions = relationship("Position", back_populates="user", passive_deletes=True)
    transactions = relationship("Transaction", back_populates="user", passive_deletes=True)

    @property
    def roles(self) -> list[Role]:
        return [Role.USER, Role.ADMIN] if self.is_superuser else [Role.USER]

    def has_role(self, role: Role) -> bool:
        return role in self.roles

    def __repr__(self):
        return f"<User {self.username}>"
