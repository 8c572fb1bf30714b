"""
Trading Module

Order settlement and average-cost accounting. The database-backed
executor lives in app.core.trading.service.
"""
from app.core.trading.accounting import (
    PositionState,
    TradeOutcome,
    EMPTY_POSITION,
    settle_trade,
    settle_buy,
    settle_sell,
    to_money,
    to_cost,
)

__all__ = [
    "PositionState",
    "TradeOutcome",
    "EMPTY_POSITION",
    "settle_trade",
    "settle_buy",
    "settle_sell",
    "to_money",
    "to_cost",
]
