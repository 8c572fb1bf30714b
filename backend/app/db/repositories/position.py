"""
Position Repository

Database operations for position management.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_
from loguru import logger

from app.db.models.position import Position


class PositionRepository:
    """
    Repository for Position database operations.

    Provides low-level persistence only. Share and cost arithmetic lives
    in app.core.trading.accounting.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_symbol(self, user_id: int, symbol: str, for_update: bool = False) -> Optional[Position]:
        """
        Get a user's position in one symbol.

        With for_update the row is locked and re-read from the database,
        replacing any copy already held by the session.
        """
        query = select(Position).where(
            and_(
                Position.user_id == user_id,
                Position.symbol == symbol.upper(),
            )
        )
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_all_by_user(self, user_id: int) -> List[Position]:
        """Open positions, ordered by symbol."""
        result = await self.db.execute(
            select(Position)
            .where(and_(Position.user_id == user_id, Position.quantity > 0))
            .order_by(Position.symbol)
        )
        return list(result.scalars().all())

    async def get_held_symbols(self, user_id: int) -> List[str]:
        result = await self.db.execute(
            select(Position.symbol)
            .where(and_(Position.user_id == user_id, Position.quantity > 0))
            .distinct()
            .order_by(Position.symbol)
        )
        return list(result.scalars().all())

    async def upsert(
        self,
        position: Optional[Position],
        user_id: int,
        symbol: str,
        quantity: int,
        avg_cost: Decimal,
        traded_at: datetime,
    ) -> Position:
        """Create the row or overwrite its quantity and average cost."""
        if position is None:
            position = Position(
                user_id=user_id,
                symbol=symbol.upper(),
                quantity=quantity,
                avg_cost=avg_cost,
                opened_at=traded_at,
                last_trade_at=traded_at,
            )
            self.db.add(position)
            logger.info(f"Opened position: user={user_id} {symbol} qty={quantity} @ {avg_cost}")
        else:
            position.quantity = quantity
            position.avg_cost = avg_cost
            position.last_trade_at = traded_at
        await self.db.flush()
        return position

    async def delete(self, position: Position) -> None:
        """Remove a fully closed position."""
        await self.db.delete(position)
        await self.db.flush()
        logger.info(f"Closed position: user={position.user_id} {position.symbol}")
