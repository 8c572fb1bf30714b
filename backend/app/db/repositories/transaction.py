"""
Trading Simulator - Transaction Repository

Trade logging and history queries.
"""
from typing import Optional, List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, desc

from app.db.models.transaction import Transaction


class TransactionRepository:
    """Handles all database operations for executed trades."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, transaction: Transaction) -> Transaction:
        """Create a new transaction record."""
        self.db.add(transaction)
        await self.db.flush()
        await self.db.refresh(transaction)
        return transaction

    async def get_history(
        self,
        user_id: int,
        symbol: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Transaction]:
        """Newest first."""
        conditions = [Transaction.user_id == user_id]
        if symbol:
            conditions.append(Transaction.symbol == symbol.upper())

        result = await self.db.execute(
            select(Transaction)
            .where(and_(*conditions))
            .order_by(desc(Transaction.executed_at), desc(Transaction.id))
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())
