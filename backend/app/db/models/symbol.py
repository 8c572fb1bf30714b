"""
Trading Simulator - Symbol Model

The tradable universe. Only enabled symbols are quoted or traded.
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime

from app.db.database import Base


class Symbol(Base):
    """Tradable ticker symbol."""

    __tablename__ = "symbols"

    id = Column(Integer, primary_key=True, index=True)
    symbol = Column(String(20), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=True)
    exchange = Column(String(20), nullable=True)  # MIC or "US"
    mic = Column(String(10), nullable=True)
    currency = Column(String(10), default="USD")
    enabled = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Symbol {self.symbol} enabled={self.enabled}>"
