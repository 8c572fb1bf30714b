"""
Trading Simulator - Wallet Schemas
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict


class WalletResponse(BaseModel):
    user_id: int
    cash_balance: Decimal
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class DepositRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2)
    reason: str = Field("deposit", max_length=255)


class BalanceUpdate(BaseModel):
    """Admin balance override."""
    cash_balance: Decimal = Field(..., ge=0, max_digits=15, decimal_places=2)
