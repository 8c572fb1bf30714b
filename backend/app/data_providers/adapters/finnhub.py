"""
Finnhub Adapter

REST access to Finnhub: last quote snapshot and the US symbol list
used to build the tradable universe. Live trades come through app.services.stream_service.

API Documentation: https://finnhub.io/docs/api
"""
from datetime import datetime, timezone
from typing import Optional, Any

from app.config import settings
from app.data_providers.adapters.base import BaseAdapter, ProviderConfig, Quote, to_decimal


FINNHUB_BASE_URL = "https://finnhub.io/api/v1"
FINNHUB_WS_URL = "wss://ws.finnhub.io"

def create_finnhub_config(api_key: str, base_url: str = FINNHUB_BASE_URL) -> ProviderConfig:
    """Create configuration for Finnhub adapter."""
    return ProviderConfig(
        name="finnhub",
        api_key=api_key,
        base_url=base_url,
        websocket_url=settings.FINNHUB_WS_URL,
        timeout_seconds=30.0,
    )


class FinnhubAdapter(BaseAdapter):
    """
    Finnhub data provider adapter.

    Usage:
        adapter = FinnhubAdapter(create_finnhub_config("your_api_key"))
        quote = await adapter.get_quote("AAPL")
        symbols = await adapter.list_symbols("US")
    """

    def _params(self, **params: Any) -> dict[str, Any]:
        params["token"] = self.config.api_key
        return params

    async def get_quote(self, symbol: str) -> Optional[Quote]:
        """Latest quote, or None when Finnhub has no price for the symbol."""
        symbol = symbol.upper()
        data = await self._get_json("/quote", self._params(symbol=symbol))
        return self._parse_quote(symbol, data or {})

    async def list_symbols(self, exchange: str = "US") -> list[dict[str, Any]]:
        """Raw symbol records for an exchange."""
        data = await self._get_json("/stock/symbol", self._params(exchange=exchange))
        return data if isinstance(data, list) else []

    def _parse_quote(self, symbol: str, data: dict[str, Any]) -> Optional[Quote]:
        price = to_decimal(data.get("c"))
        if price is None or price <= 0:
            return None

        ts = data.get("t")
        timestamp = datetime.fromtimestamp(ts, tz=timezone.utc).replace(tzinfo=None) if ts else datetime.utcnow()

        return Quote(
            symbol=symbol,
            price=price,
            change=to_decimal(data.get("d")),
            change_percent=to_decimal(data.get("dp")),
            day_high=to_decimal(data.get("h")),
            day_low=to_decimal(data.get("l")),
            day_open=to_decimal(data.get("o")),
            prev_close=to_decimal(data.get("pc")),
            timestamp=timestamp,
            provider="finnhub",
        )
