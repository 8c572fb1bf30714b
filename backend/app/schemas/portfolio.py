"""
Trading Simulator - Portfolio Schemas
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class HoldingResponse(BaseModel):
    """A position at cost."""
    symbol: str
    quantity: int
    average_cost: Decimal
    total_cost: Decimal
    last_trade_date: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class WalletTotalsResponse(BaseModel):
    cash: Decimal
    total_invested: Decimal
    total_value: Decimal

    model_config = ConfigDict(from_attributes=True)


class PortfolioResponse(BaseModel):
    user_id: int
    holdings: list[HoldingResponse]
    wallet: WalletTotalsResponse

    model_config = ConfigDict(from_attributes=True)


class HoldingValuationResponse(BaseModel):
    """A position at market."""
    symbol: str
    shares: int
    average_cost: Decimal
    current_price: Decimal
    cost_basis: Decimal
    market_value: Decimal
    unrealized_pnl: Decimal
    unrealized_pnl_percent: Decimal
    priced: bool

    model_config = ConfigDict(from_attributes=True)


class PortfolioSummaryResponse(BaseModel):
    user_id: int
    cash_balance: Decimal
    total_cost_basis: Decimal
    total_market_value: Decimal
    total_portfolio_value: Decimal
    total_unrealized_pnl: Decimal
    total_unrealized_pnl_percent: Decimal
    total_realized_pnl: Decimal
    holdings: list[HoldingValuationResponse]
    as_of: datetime

    @classmethod
    def from_summary(cls, summary) -> "PortfolioSummaryResponse":
        valuation = summary.valuation
        return cls(
            user_id=summary.user_id,
            cash_balance=valuation.cash_balance,
            total_cost_basis=valuation.total_cost_basis,
            total_market_value=valuation.total_market_value,
            total_portfolio_value=valuation.total_portfolio_value,
            total_unrealized_pnl=valuation.total_unrealized_pnl,
            total_unrealized_pnl_percent=valuation.total_unrealized_pnl_percent,
            total_realized_pnl=summary.total_realized_pnl,
            holdings=[HoldingValuationResponse.model_validate(h) for h in valuation.holdings],
            as_of=summary.as_of,
        )
