"""
Trading Simulator - Price Endpoints

Current quotes for the enabled universe and charts for held symbols.
"""
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.dependencies import get_chart_service, get_current_active_user, get_price_service
from app.db.models.user import User
from app.schemas.market import QuoteResponse
from app.services.chart_service import ChartService
from app.services.price_service import PriceService

router = APIRouter()


@router.get("/current", response_model=Dict[str, QuoteResponse])
async def get_all_current_prices(
    current_user: User = Depends(get_current_active_user),
    prices: PriceService = Depends(get_price_service),
):
    """Quotes for every enabled symbol, keyed by ticker."""
    quotes = await prices.get_all_current_prices()
    return {symbol: QuoteResponse.model_validate(q) for symbol, q in quotes.items()}


@router.get("/current/{symbol}", response_model=QuoteResponse)
async def get_current_price(
    symbol: str,
    current_user: User = Depends(get_current_active_user),
    prices: PriceService = Depends(get_price_service),
):
    quote = await prices.get_current_price(symbol)
    if quote is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No price available for {symbol.strip().upper()}"
        )
    return QuoteResponse.model_validate(quote)


@router.get("/quote/{symbol}", response_model=QuoteResponse)
async def get_last_quote(
    symbol: str,
    current_user: User = Depends(get_current_active_user),
    prices: PriceService = Depends(get_price_service),
):
    """Last-trade snapshot from Finnhub."""
    quote = await prices.get_last_quote(symbol)
    if quote is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No quote available for {symbol.strip().upper()}"
        )
    return QuoteResponse.model_validate(quote)


@router.get("/charts", response_model=List[Dict[str, Any]])
async def get_charts(
    range_: str = Query("1d", alias="range", max_length=5),
    current_user: User = Depends(get_current_active_user),
    charts: ChartService = Depends(get_chart_service),
):
    """Chart data for each symbol the caller holds."""
    return await charts.get_charts(current_user.id, range_)
