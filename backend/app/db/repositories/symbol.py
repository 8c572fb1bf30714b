"""
Trading Simulator - Symbol Repository
"""
from typing import Optional, List, Tuple

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.symbol import Symbol


class SymbolRepository:
    """Database operations for the symbol universe."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, symbol_id: int) -> Optional[Symbol]:
        result = await self.db.execute(select(Symbol).where(Symbol.id == symbol_id))
        return result.scalar_one_or_none()

    async def get_by_symbol(self, symbol: str) -> Optional[Symbol]:
        result = await self.db.execute(select(Symbol).where(Symbol.symbol == symbol))
        return result.scalar_one_or_none()

    async def get_all_keyed(self) -> dict[str, Symbol]:
        """Every row keyed by ticker."""
        result = await self.db.execute(select(Symbol))
        return {row.symbol: row for row in result.scalars().all()}

    async def get_enabled_symbols(self) -> List[str]:
        result = await self.db.execute(
            select(Symbol.symbol).where(Symbol.enabled.is_(True)).order_by(Symbol.symbol)
        )
        return list(result.scalars().all())

    async def search(
        self,
        q: Optional[str] = None,
        enabled: Optional[bool] = None,
        offset: int = 0,
        limit: int = 25,
    ) -> Tuple[List[Symbol], int]:
        """
        Filter by ticker/name substring and enabled flag, ordered by ticker.

        Returns:
            (page of rows, total matching)
        """
        conditions = []
        if q:
            pattern = f"%{q.strip()}%"
            conditions.append(or_(Symbol.symbol.ilike(pattern), Symbol.name.ilike(pattern)))
        if enabled is not None:
            conditions.append(Symbol.enabled.is_(enabled))

        count_result = await self.db.execute(select(func.count(Symbol.id)).where(*conditions))
        total = count_result.scalar() or 0

        result = await self.db.execute(
            select(Symbol).where(*conditions).order_by(Symbol.symbol).offset(offset).limit(limit)
        )
        return list(result.scalars().all()), total

    async def add_all(self, rows: List[Symbol]) -> None:
        self.db.add_all(rows)
        await self.db.flush()
