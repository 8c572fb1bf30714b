"""
Trading Simulator - Transaction Model
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
import enum

from app.db.database import Base


class TransactionType(str, enum.Enum):
    """Trade side."""
    BUY = "buy"
    SELL = "sell"


class Transaction(Base):
    """Executed trade record."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    symbol = Column(String(20), nullable=False, index=True)

    transaction_type = Column(SQLEnum(TransactionType), nullable=False)
    quantity = Column(Integer, nullable=False)
    price_per_share = Column(Numeric(15, 4), nullable=False)
    total_amount = Column(Numeric(15, 2), nullable=False)

    # Sells only
    realized_pnl = Column(Numeric(15, 2), nullable=True)

    executed_at = Column(DateTime, default=datetime.utcnow, index=True)

    user = relationship("User", back_populates="transactions")

    def __repr__(self):
        return f"<Transaction {self.transaction_type.value} {self.symbol} qty={self.quantity}>"
