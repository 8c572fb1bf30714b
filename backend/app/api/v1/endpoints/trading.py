"""
Trading Simulator - Trading Endpoints

Market orders against the caller's wallet, plus trade history.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.trading.service import TradingService
from app.dependencies import get_current_active_user, get_trading_service
from app.db.models.user import User
from app.schemas.portfolio import PortfolioSummaryResponse
from app.schemas.trading import (
    TradeRequest,
    TradeResponse,
    TransactionHistoryResponse,
    TransactionResponse,
)

router = APIRouter()


@router.post("/buy", response_model=TradeResponse)
async def buy(
    order: TradeRequest,
    current_user: User = Depends(get_current_active_user),
    trading: TradingService = Depends(get_trading_service),
):
    """Buy shares at the current price."""
    execution = await trading.buy(current_user.id, order.symbol, order.quantity)
    return TradeResponse.model_validate(execution)


@router.post("/sell", response_model=TradeResponse)
async def sell(
    order: TradeRequest,
    current_user: User = Depends(get_current_active_user),
    trading: TradingService = Depends(get_trading_service),
):
    """Sell held shares at the current price."""
    execution = await trading.sell(current_user.id, order.symbol, order.quantity)
    return TradeResponse.model_validate(execution)


@router.get("/transactions", response_model=TransactionHistoryResponse)
async def get_transactions(
    symbol: Optional[str] = Query(None, max_length=20),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_active_user),
    trading: TradingService = Depends(get_trading_service),
):
    """Executed trades, newest first."""
    symbol = symbol.strip().upper() if symbol and symbol.strip() else None
    history = await trading.get_transaction_history(current_user.id, symbol=symbol, limit=limit, offset=offset)
    return TransactionHistoryResponse(
        transactions=[TransactionResponse.model_validate(t) for t in history],
        limit=limit,
        offset=offset,
    )


@router.get("/summary", response_model=PortfolioSummaryResponse)
async def get_summary(
    current_user: User = Depends(get_current_active_user),
    trading: TradingService = Depends(get_trading_service),
):
    summary = await trading.get_portfolio_summary(current_user.id)
    return PortfolioSummaryResponse.from_summary(summary)
