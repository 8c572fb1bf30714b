"""
Trading Simulator - Wallet Model
"""
from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.db.database import Base


class Wallet(Base):
    """Per-user cash balance that trades settle against."""

    __tablename__ = "wallets"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    cash_balance = Column(Numeric(15, 2), nullable=False, default=Decimal("5000.00"))

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="wallet")

    def __repr__(self):
        return f"<Wallet user={self.user_id} cash={self.cash_balance}>"
