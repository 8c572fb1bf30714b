"""
Trading Simulator - API v1 Router
"""
from fastapi import APIRouter

from app.api.v1.endpoints import (
    auth, users, trading, portfolio, wallet, prices, symbols, notifications
)
from app.api.v1.streaming import price_stream_router, market_stream_router

api_router = APIRouter()


# API v1 root endpoint
@api_router.get("/", tags=["API Info"])
async def api_root():
    """API v1 root - returns version info."""
    return {
        "api": "Trading Simulator",
        "version": "v1",
        "status": "operational"
    }


# Include all endpoint routers
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(trading.router, prefix="/trading", tags=["Trading"])
api_router.include_router(portfolio.router, prefix="/portfolio", tags=["Portfolio"])
api_router.include_router(wallet.router, prefix="/wallet", tags=["Wallet"])
api_router.include_router(prices.router, prefix="/prices", tags=["Prices"])
api_router.include_router(symbols.router, prefix="/symbols", tags=["Symbols"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])

# Streaming routers
api_router.include_router(price_stream_router, tags=["Streaming - Prices"])
api_router.include_router(market_stream_router, tags=["WebSocket - Prices"])
