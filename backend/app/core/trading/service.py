"""
Trading Service

Executes market orders for a user at the current price:

1. Normalize the ticker and require it in the universe.
2. Price it (PriceUnavailableError when no quote is available).
3. Lock the wallet row, load the position, settle with
   app.core.trading.accounting.settle_trade.
4. Persist wallet, position (deleted when fully closed) and a
   transaction record.

All writes share the caller's session transaction, so a rejected or
failed order leaves wallet, position and history untouched.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Protocol

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.portfolio.service import PortfolioService, PortfolioSummary
from app.core.trading.accounting import (
    EMPTY_POSITION,
    PositionState,
    TradeOutcome,
    settle_trade,
    to_cost,
)
from app.db.models.transaction import Transaction, TransactionType
from app.db.repositories.position import PositionRepository
from app.db.repositories.symbol import SymbolRepository
from app.db.repositories.transaction import TransactionRepository
from app.db.repositories.wallet import WalletRepository
from app.utils.exceptions import (
    InsufficientFundsError,
    InsufficientSharesError,
    InvalidOrderError,
    PositionNotFoundError,
    PriceUnavailableError,
    SymbolNotFoundError,
    WalletNotFoundError,
)


class PriceLookup(Protocol):
    async def get_price_value(self, symbol: str) -> Optional[Decimal]: ...

    async def get_prices_for(self, symbols: list[str]) -> dict[str, Decimal]: ...


@dataclass
class TradeExecution:
    """Result returned to the caller of buy/sell."""
    transaction_id: int
    symbol: str
    side: TransactionType
    quantity: int
    price_per_share: Decimal
    total_amount: Decimal
    new_cash_balance: Decimal
    new_shares_owned: int
    average_cost: Decimal
    realized_pnl: Optional[Decimal]
    executed_at: datetime
    message: str


def execution_message(side: TransactionType, quantity: int, symbol: str, price: Decimal) -> str:
    verb = "bought" if side == TransactionType.BUY else "sold"
    return f"Successfully {verb} {quantity} shares of {symbol} at ${price:.2f} per share"


class TradingService:
    """
    Order execution against simulated wallets.

    Usage:
        service = TradingService(db, price_service)
        result = await service.buy(user_id=1, symbol="AAPL", quantity=10)
        result = await service.sell(user_id=1, symbol="AAPL", quantity=5)
    """

    def __init__(self, db: AsyncSession, prices: PriceLookup):
        self.db = db
        self.prices = prices
        self.symbols = SymbolRepository(db)
        self.wallets = WalletRepository(db)
        self.positions = PositionRepository(db)
        self.transactions = TransactionRepository(db)

    # ==================== Orders ====================

    async def buy(self, user_id: int, symbol: str, quantity: int) -> TradeExecution:
        """Buy `quantity` shares at the current price."""
        return await self._execute(user_id, symbol, TransactionType.BUY, quantity)

    async def sell(self, user_id: int, symbol: str, quantity: int) -> TradeExecution:
        """Sell `quantity` held shares at the current price."""
        return await self._execute(user_id, symbol, TransactionType.SELL, quantity)

    async def _execute(
        self,
        user_id: int,
        symbol: str,
        side: TransactionType,
        quantity: int,
    ) -> TradeExecution:
        symbol = (symbol or "").strip().upper()
        if not symbol:
            raise InvalidOrderError("Symbol is required")
        if quantity is None or quantity <= 0:
            raise InvalidOrderError("Quantity must be positive")

        if await self.symbols.get_by_symbol(symbol) is None:
            raise SymbolNotFoundError(symbol)

        price = await self.prices.get_price_value(symbol)
        if price is None:
            raise PriceUnavailableError(symbol)
        price = to_cost(price)

        # Wallet lock first; the position is only read while it is held
        wallet = await self.wallets.get_by_user(user_id, for_update=True)
        if wallet is None:
            raise WalletNotFoundError(user_id)

        position = await self.positions.get_by_symbol(user_id, symbol, for_update=True)
        if side == TransactionType.SELL and (position is None or position.quantity <= 0):
            raise PositionNotFoundError(symbol)

        state = (
            PositionState(quantity=position.quantity, average_cost=Decimal(position.avg_cost))
            if position is not None
            else EMPTY_POSITION
        )

        try:
            outcome = settle_trade(Decimal(wallet.cash_balance), state, side, quantity, price)
        except (InsufficientFundsError, InsufficientSharesError) as e:
            logger.warning(f"Rejected {side.value} {quantity} {symbol} for user {user_id}: {e}")
            raise

        executed_at = datetime.utcnow()
        await self.wallets.set_balance(wallet, outcome.wallet_balance)
        await self._apply_position(position, user_id, symbol, outcome, executed_at)

        transaction = await self.transactions.create(Transaction(
            user_id=user_id,
            symbol=symbol,
            transaction_type=side,
            quantity=quantity,
            price_per_share=outcome.price,
            total_amount=outcome.total,
            realized_pnl=outcome.realized_pnl if side == TransactionType.SELL else None,
            executed_at=executed_at,
        ))

        message = execution_message(side, quantity, symbol, outcome.price)
        logger.info(f"User {user_id}: {message}; cash ${outcome.wallet_balance}")

        return TradeExecution(
            transaction_id=transaction.id,
            symbol=symbol,
            side=side,
            quantity=quantity,
            price_per_share=outcome.price,
            total_amount=outcome.total,
            new_cash_balance=outcome.wallet_balance,
            new_shares_owned=outcome.position.quantity,
            average_cost=outcome.position.average_cost,
            realized_pnl=transaction.realized_pnl,
            executed_at=executed_at,
            message=message,
        )

    async def _apply_position(self, position, user_id: int, symbol: str, outcome: TradeOutcome, at: datetime):
        if outcome.closed:
            await self.positions.delete(position)
            return
        await self.positions.upsert(
            position,
            user_id=user_id,
            symbol=symbol,
            quantity=outcome.position.quantity,
            avg_cost=outcome.position.average_cost,
            traded_at=at,
        )

    # ==================== Queries ====================

    async def get_transaction_history(
        self,
        user_id: int,
        symbol: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Transaction]:
        """Executed trades, newest first."""
        return await self.transactions.get_history(user_id, symbol=symbol, limit=limit, offset=offset)

    async def get_portfolio_summary(self, user_id: int) -> PortfolioSummary:
        return await PortfolioService(self.db, self.prices).get_portfolio_summary(user_id)
