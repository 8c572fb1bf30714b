"""
Trading Simulator - Market Data Schemas
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class QuoteResponse(BaseModel):
    symbol: str
    price: Decimal
    change: Optional[Decimal] = None
    change_percent: Optional[Decimal] = None
    day_high: Optional[Decimal] = None
    day_low: Optional[Decimal] = None
    day_open: Optional[Decimal] = None
    prev_close: Optional[Decimal] = None
    currency: str = "USD"
    timestamp: datetime
    provider: str = ""

    model_config = ConfigDict(from_attributes=True)
