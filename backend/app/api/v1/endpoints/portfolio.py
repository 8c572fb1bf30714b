"""
Trading Simulator - Portfolio Endpoints
"""
from fastapi import APIRouter, Depends

from app.core.portfolio import PortfolioService
from app.dependencies import get_current_active_user, get_portfolio_service
from app.db.models.user import User
from app.schemas.portfolio import HoldingResponse, PortfolioResponse, PortfolioSummaryResponse

router = APIRouter()


@router.get("/", response_model=PortfolioResponse)
async def get_portfolio(
    current_user: User = Depends(get_current_active_user),
    portfolio: PortfolioService = Depends(get_portfolio_service),
):
    """Holdings at cost with wallet totals."""
    return PortfolioResponse.model_validate(await portfolio.get_user_portfolio(current_user.id))


@router.get("/summary", response_model=PortfolioSummaryResponse)
async def get_portfolio_summary(
    current_user: User = Depends(get_current_active_user),
    portfolio: PortfolioService = Depends(get_portfolio_service),
):
    """Holdings at current market prices."""
    return PortfolioSummaryResponse.from_summary(await portfolio.get_portfolio_summary(current_user.id))


@router.get("/holdings/{symbol}", response_model=HoldingResponse)
async def get_holding(
    symbol: str,
    current_user: User = Depends(get_current_active_user),
    portfolio: PortfolioService = Depends(get_portfolio_service),
):
    """One holding; quantity 0 when the symbol is not held."""
    return HoldingResponse.model_validate(await portfolio.get_user_holding(current_user.id, symbol))
