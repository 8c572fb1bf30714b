"""
Price Service

Current prices for the tradable universe.

- Only enabled symbols are quoted; unknown or disabled symbols yield None.
- Snapshots are cached in Redis for QUOTE_CACHE_TTL_SECONDS.
- Batch quotes come from RapidAPI, single last-trade snapshots from Finnhub.
"""
from decimal import Decimal
from typing import Dict, Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.data_providers.adapters import FinnhubAdapter, Quote, RapidApiAdapter
from app.db.redis_client import RedisClient
from app.db.repositories.symbol import SymbolRepository
from app.utils.exceptions import MarketDataError


class PriceService:
    """
    Quote lookup over the enabled universe.

    Usage:
        service = PriceService(db, rapidapi_adapter, finnhub_adapter, redis_client)
        quote = await service.get_current_price("AAPL")
    """

    def __init__(
        self,
        db: AsyncSession,
        quotes_provider: RapidApiAdapter,
        last_quote_provider: FinnhubAdapter,
        cache: Optional[RedisClient] = None,
    ):
        self.db = db
        self.symbols = SymbolRepository(db)
        self.quotes_provider = quotes_provider
        self.last_quote_provider = last_quote_provider
        self.cache = cache

    async def get_current_price(self, symbol: str) -> Optional[Quote]:
        """
        Current quote for one symbol.

        Returns:
            Quote, or None if the symbol is unknown, disabled or unquoted

        Raises:
            RateLimitExceededError, MarketDataUnavailableError
        """
        symbol = symbol.strip().upper()
        entity = await self.symbols.get_by_symbol(symbol)
        if entity is None:
            logger.warning(f"Symbol {symbol} not found in database")
            return None
        if not entity.enabled:
            logger.warning(f"Symbol {symbol} is disabled")
            return None

        cached = await self._cached(symbol)
        if cached is not None:
            return cached

        quote = await self.quotes_provider.get_quote(symbol)
        if quote is None:
            logger.warning(f"No quote returned for {symbol}")
            return None

        await self._store(quote)
        return quote

    async def get_price_value(self, symbol: str) -> Optional[Decimal]:
        """Just the price, for trade execution."""
        quote = await self.get_current_price(symbol)
        return quote.price if quote else None

    async def get_all_current_prices(self) -> Dict[str, Quote]:
        """Quotes for every enabled symbol, keyed by ticker."""
        symbols = await self.symbols.get_enabled_symbols()
        logger.info(f"Found {len(symbols)} enabled symbols")

        if not symbols:
            logger.warning("No enabled symbols found in database")
            return {}

        result = await self._cached_many(symbols)
        missing = [s for s in symbols if s not in result]
        if missing:
            result.update(await self._fetch_many(missing))

        absent = len(symbols) - len(result)
        if absent > 0:
            logger.warning(f"Missing {absent} quotes from provider response")
        return result

    async def get_last_quote(self, symbol: str) -> Optional[Quote]:
        """Finnhub last-trade snapshot, regardless of the universe."""
        return await self.last_quote_provider.get_quote(symbol.strip().upper())

    async def get_prices_for(self, symbols: list[str]) -> Dict[str, Decimal]:
        """
        Prices for the given tickers, for portfolio valuation.

        Cached quotes are used first and the rest are fetched in one batch.
        Tickers outside the enabled universe, missing from the provider
        response, or in a batch the provider refused are omitted.
        """
        enabled = set(await self.symbols.get_enabled_symbols())
        wanted = []
        for symbol in symbols:
            symbol = symbol.strip().upper()
            if symbol in enabled and symbol not in wanted:
                wanted.append(symbol)
        if not wanted:
            return {}

        quotes = await self._cached_many(wanted)
        missing = [s for s in wanted if s not in quotes]
        if missing:
            try:
                quotes.update(await self._fetch_many(missing))
            except MarketDataError as e:
                logger.warning(f"Quotes unavailable for {missing}: {e}")

        return {symbol: quote.price for symbol, quote in quotes.items()}

    async def _cached(self, symbol: str) -> Optional[Quote]:
        if self.cache is None:
            return None
        data = await self.cache.get_quote(symbol)
        return Quote.from_dict(data) if data else None

    async def _cached_many(self, symbols: list[str]) -> Dict[str, Quote]:
        if self.cache is None:
            return {}
        cached = await self.cache.get_quotes(symbols)
        return {symbol: Quote.from_dict(data) for symbol, data in cached.items() if data}

    async def _fetch_many(self, symbols: list[str]) -> Dict[str, Quote]:
        requested = set(symbols)
        result: Dict[str, Quote] = {}
        for quote in await self.quotes_provider.get_quotes(symbols):
            if quote.symbol not in requested:
                continue
            result[quote.symbol] = quote
            await self._store(quote)
        return result

    async def _store(self, quote: Quote) -> None:
        if self.cache is not None:
            await self.cache.set_quote(quote.symbol, quote.to_dict())
