"""
Portfolio Module

Holdings and market valuation.
"""
from app.core.portfolio.valuation import (
    HoldingValuation,
    PortfolioValuation,
    value_holding,
    summarize,
)
from app.core.portfolio.service import (
    PortfolioService,
    PortfolioSummary,
    UserPortfolio,
    Holding,
)

__all__ = [
    "HoldingValuation",
    "PortfolioValuation",
    "value_holding",
    "summarize",
    "PortfolioService",
    "PortfolioSummary",
    "UserPortfolio",
    "Holding",
]
