"""
RapidAPI (Yahoo Finance) Adapter

Batch quotes for the enabled universe and chart series for the charts
page. Quotes are requested in batches (10 symbols by default) with a
short pause between batches.
"""
import asyncio
from typing import Optional, Any
from loguru import logger

from app.config import settings
from app.data_providers.adapters.base import BaseAdapter, ProviderConfig, Quote, to_decimal


BATCH_PAUSE_SECONDS = 0.25

CHART_INTERVALS = {
    "1mo": "1d",
    "2y": "1wk",
    "5y": "1wk",
}


def create_rapidapi_config(api_key: str, host: str, base_url: str) -> ProviderConfig:
    """Create configuration for the RapidAPI Yahoo Finance adapter."""
    return ProviderConfig(
        name="rapidapi",
        api_key=api_key,
        host=host,
        base_url=base_url,
        timeout_seconds=30.0,
        max_symbols_per_request=settings.QUOTE_BATCH_SIZE,
    )


def interval_for_range(range_: str) -> str:
    """Chart bar size for a range: weekly bars for multi-year ranges."""
    return CHART_INTERVALS.get(range_, "1d")


class RapidApiAdapter(BaseAdapter):
    """Yahoo Finance quotes and charts through RapidAPI."""

    def _headers(self) -> dict[str, str]:
        return {
            "x-rapidapi-key": self.config.api_key or "",
            "x-rapidapi-host": self.config.host or "",
            "User-Agent": "trading-simulator/1.0",
        }

    async def get_quotes(self, symbols: list[str]) -> list[Quote]:
        """
        Quotes for many symbols, batched.

        Entries without a symbol or with a non-positive price are dropped.

        Raises:
            RateLimitExceededError: provider throttled a batch
            MarketDataUnavailableError: any other provider failure
        """
        if not symbols:
            return []

        batch_size = max(1, self.config.max_symbols_per_request)
        quotes: list[Quote] = []

        for i in range(0, len(symbols), batch_size):
            batch = symbols[i:i + batch_size]
            data = await self._get_json(
                "/market/v2/get-quotes",
                {"region": "US", "symbols": ",".join(batch)},
            )
            quotes.extend(self._parse_quotes(data))
            if i + batch_size < len(symbols):
                await asyncio.sleep(BATCH_PAUSE_SECONDS)

        logger.info(f"Fetched {len(quotes)} quotes from RapidAPI out of {len(symbols)} requested")
        return quotes

    async def get_quote(self, symbol: str) -> Optional[Quote]:
        quotes = await self.get_quotes([symbol])
        return quotes[0] if quotes else None

    async def get_chart(self, symbol: str, range_: str = "1d") -> dict[str, Any]:
        """Raw chart payload for one symbol, tagged with symbol/range/interval."""
        interval = interval_for_range(range_)
        data = await self._get_json(
            "/stock/v3/get-chart",
            {
                "interval": interval,
                "symbol": symbol,
                "range": range_,
                "region": "US",
                "includePrePost": "false",
                "useYfid": "true",
                "includeAdjustedClose": "true",
            },
        )
        chart = data if isinstance(data, dict) else {}
        chart["symbol"] = symbol
        chart["range"] = range_
        chart["interval"] = interval
        return chart

    def _parse_quotes(self, data: Any) -> list[Quote]:
        if not isinstance(data, dict):
            return []
        results = (data.get("quoteResponse") or {}).get("result") or []

        quotes = []
        for item in results:
            symbol = item.get("symbol")
            price = to_decimal(item.get("regularMarketPrice"))
            if not symbol or price is None or price <= 0:
                continue
            quotes.append(Quote(
                symbol=symbol.upper(),
                price=price,
                change=to_decimal(item.get("regularMarketChange")),
                change_percent=to_decimal(item.get("regularMarketChangePercent")),
                day_high=to_decimal(item.get("regularMarketDayHigh")),
                day_low=to_decimal(item.get("regularMarketDayLow")),
                day_open=to_decimal(item.get("regularMarketOpen")),
                prev_close=to_decimal(item.get("regularMarketPreviousClose")),
                currency=item.get("currency") or "USD",
                provider="rapidapi",
            ))
        return quotes
