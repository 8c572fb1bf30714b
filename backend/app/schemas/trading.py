"""
Trading Simulator - Trading Schemas
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict

from app.db.models.transaction import TransactionType


class TradeRequest(BaseModel):
    """Market order for whole shares."""
    symbol: str = Field(..., min_length=1, max_length=20, description="Stock symbol")
    quantity: int = Field(..., gt=0, description="Number of shares")


class TradeResponse(BaseModel):
    transaction_id: int
    symbol: str
    side: TransactionType
    quantity: int
    price_per_share: Decimal
    total_amount: Decimal
    new_cash_balance: Decimal
    new_shares_owned: int
    average_cost: Decimal
    realized_pnl: Optional[Decimal] = None
    executed_at: datetime
    message: str

    model_config = ConfigDict(from_attributes=True)


class TransactionResponse(BaseModel):
    id: int
    symbol: str
    transaction_type: TransactionType
    quantity: int
    price_per_share: Decimal
    total_amount: Decimal
    realized_pnl: Optional[Decimal] = None
    executed_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TransactionHistoryResponse(BaseModel):
    transactions: list[TransactionResponse]
    limit: int
    offset: int
