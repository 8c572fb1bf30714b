"""
Portfolio Valuation

Market value and unrealized P&L of holdings at given prices. Pure
functions over Decimals; PortfolioService supplies the inputs.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, List

from app.core.trading.accounting import to_money


HUNDRED = Decimal("100")
ZERO = Decimal("0")


def percent_of(amount: Decimal, base: Decimal) -> Decimal:
    """amount / base * 100, 0 when base is 0. Rounded to 2 places."""
    if base == 0:
        return Decimal("0.00")
    return to_money(amount / base * HUNDRED)


@dataclass
class HoldingValuation:
    """One position valued at a current price."""
    symbol: str
    shares: int
    average_cost: Decimal
    current_price: Decimal
    cost_basis: Decimal
    market_value: Decimal
    unrealized_pnl: Decimal
    unrealized_pnl_percent: Decimal
    priced: bool = True


@dataclass
class PortfolioValuation:
    """Whole-account valuation."""
    cash_balance: Decimal
    total_cost_basis: Decimal = ZERO
    total_market_value: Decimal = ZERO
    total_portfolio_value: Decimal = ZERO
    total_unrealized_pnl: Decimal = ZERO
    total_unrealized_pnl_percent: Decimal = ZERO
    holdings: List[HoldingValuation] = field(default_factory=list)


def value_holding(
    symbol: str,
    shares: int,
    average_cost: Decimal,
    current_price: Optional[Decimal],
) -> HoldingValuation:
    """
    Value a position.

    An unknown current price falls back to the average cost, which
    shows the position at zero unrealized P&L.
    """
    average_cost = Decimal(average_cost)
    priced = current_price is not None
    price = Decimal(current_price) if priced else average_cost

    cost_basis = to_money(average_cost * shares)
    market_value = to_money(price * shares)
    pnl = market_value - cost_basis

    return HoldingValuation(
        symbol=symbol,
        shares=shares,
        average_cost=average_cost,
        current_price=price,
        cost_basis=cost_basis,
        market_value=market_value,
        unrealized_pnl=pnl,
        unrealized_pnl_percent=percent_of(pnl, cost_basis),
        priced=priced,
    )


def summarize(cash_balance: Decimal, holdings: List[HoldingValuation]) -> PortfolioValuation:
    """Totals across holdings; portfolio value = cash + market value."""
    cash_balance = to_money(cash_balance)
    total_cost = sum((h.cost_basis for h in holdings), ZERO)
    total_value = sum((h.market_value for h in holdings), ZERO)
    total_pnl = total_value - total_cost

    return PortfolioValuation(
        cash_balance=cash_balance,
        total_cost_basis=total_cost,
        total_market_value=total_value,
        total_portfolio_value=cash_balance + total_value,
        total_unrealized_pnl=total_pnl,
        total_unrealized_pnl_percent=percent_of(total_pnl, total_cost),
        holdings=holdings,
    )
