"""
Portfolio Service

Holdings, wallet totals and market valuation for a user.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Protocol

from loguru import logger
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.portfolio.valuation import PortfolioValuation, summarize, value_holding
from app.core.trading.accounting import to_money
from app.core.wallet.service import WalletService
from app.db.models.transaction import Transaction
from app.db.repositories.position import PositionRepository
from app.utils.exceptions import InvalidOrderError


class PriceSource(Protocol):
    async def get_prices_for(self, symbols: list[str]) -> dict[str, Decimal]: ...


@dataclass
class Holding:
    """A held position at cost."""
    symbol: str
    quantity: int
    average_cost: Decimal
    total_cost: Decimal
    last_trade_date: Optional[datetime] = None


@dataclass
class WalletTotals:
    cash: Decimal
    total_invested: Decimal
    total_value: Decimal


@dataclass
class UserPortfolio:
    user_id: int
    holdings: List[Holding] = field(default_factory=list)
    wallet: Optional[WalletTotals] = None


@dataclass
class PortfolioSummary:
    """Valuation plus realized P&L to date."""
    user_id: int
    valuation: PortfolioValuation
    total_realized_pnl: Decimal
    as_of: datetime


class PortfolioService:
    """
    Service for reading a user's portfolio.

    Usage:
        service = PortfolioService(db, price_service)
        portfolio = await service.get_user_portfolio(user_id=1)
        summary = await service.get_portfolio_summary(user_id=1)
    """

    def __init__(self, db: AsyncSession, prices: Optional[PriceSource] = None):
        self.db = db
        self.positions = PositionRepository(db)
        self.wallets = WalletService(db)
        self.prices = prices

    @staticmethod
    def _check_user(user_id: int) -> None:
        if user_id is None or user_id <= 0:
            raise InvalidOrderError("User id must be positive")

    # ==================== Holdings ====================

    async def get_user_portfolio(self, user_id: int) -> UserPortfolio:
        """Holdings at cost and wallet totals (cash + invested)."""
        self._check_user(user_id)

        positions = await self.positions.get_all_by_user(user_id)
        holdings = [
            Holding(
                symbol=p.symbol,
                quantity=p.quantity,
                average_cost=Decimal(p.avg_cost),
                total_cost=to_money(p.total_cost),
                last_trade_date=p.last_trade_at,
            )
            for p in positions
        ]

        cash = await self.wallets.get_balance(user_id)
        invested = sum((h.total_cost for h in holdings), Decimal("0"))
        return UserPortfolio(
            user_id=user_id,
            holdings=holdings,
            wallet=WalletTotals(cash=cash, total_invested=invested, total_value=cash + invested),
        )

    async def get_user_holding(self, user_id: int, symbol: str) -> Holding:
        """One holding; a symbol not held returns a zero-quantity holding."""
        self._check_user(user_id)
        symbol = (symbol or "").strip().upper()

        position = await self.positions.get_by_symbol(user_id, symbol)
        if position is None or position.quantity <= 0:
            return Holding(symbol=symbol, quantity=0, average_cost=Decimal("0"), total_cost=Decimal("0"))

        return Holding(
            symbol=position.symbol,
            quantity=position.quantity,
            average_cost=Decimal(position.avg_cost),
            total_cost=to_money(position.total_cost),
            last_trade_date=position.last_trade_at,
        )

    # ==================== Valuation ====================

    async def get_portfolio_summary(self, user_id: int) -> PortfolioSummary:
        """Value every holding at its current price."""
        self._check_user(user_id)

        positions = await self.positions.get_all_by_user(user_id)
        symbols = [p.symbol for p in positions]
        prices = await self.prices.get_prices_for(symbols) if (self.prices and symbols) else {}

        unpriced = [s for s in symbols if s not in prices]
        if unpriced:
            logger.warning(f"No current price for {unpriced}, valuing at cost")

        holdings = [
            value_holding(p.symbol, p.quantity, Decimal(p.avg_cost), prices.get(p.symbol))
            for p in positions
        ]
        cash = await self.wallets.get_balance(user_id)

        return PortfolioSummary(
            user_id=user_id,
            valuation=summarize(cash, holdings),
            total_realized_pnl=await self.get_realized_pnl(user_id),
            as_of=datetime.utcnow(),
        )

    async def get_realized_pnl(self, user_id: int) -> Decimal:
        result = await self.db.execute(
            select(func.coalesce(func.sum(Transaction.realized_pnl), 0)).where(Transaction.user_id == user_id)
        )
        return to_money(result.scalar() or 0)
