"""
Chart Service

Historical charts for every symbol a user holds.
"""
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.data_providers.adapters import RapidApiAdapter
from app.db.repositories.position import PositionRepository
from app.utils.exceptions import MarketDataError


class ChartService:
    """Chart data over a user's holdings."""

    def __init__(self, db: AsyncSession, provider: RapidApiAdapter):
        self.positions = PositionRepository(db)
        self.provider = provider

    async def get_charts(self, user_id: int, range_: str = "1d") -> list[dict[str, Any]]:
        """
        One chart per held symbol. A symbol whose fetch fails is logged
        and left out.
        """
        charts = []
        for symbol in await self.positions.get_held_symbols(user_id):
            try:
                charts.append(await self.provider.get_chart(symbol, range_))
            except MarketDataError as e:
                logger.error(f"Chart for {symbol} ({range_}) failed: {e.message}")
        return charts
