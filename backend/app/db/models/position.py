"""
Trading Simulator - Position Model

One row per (user, symbol) while shares are held. The row is deleted
when the position is fully closed.
"""
from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from app.db.database import Base


class Position(Base):
    """Stock position model."""

    __tablename__ = "positions"
    __table_args__ = (
        UniqueConstraint("user_id", "symbol", name="uq_position_user_symbol"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    symbol = Column(String(20), nullable=False, index=True)

    quantity = Column(Integer, nullable=False, default=0)
    avg_cost = Column(Numeric(15, 4), nullable=False, default=Decimal("0"))

    # Timestamps
    opened_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_trade_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="positions")

    @property
    def total_cost(self) -> Decimal:
        return Decimal(self.quantity or 0) * Decimal(self.avg_cost or 0)

    def __repr__(self):
        return f"<Position {self.symbol} qty={self.quantity}>"
