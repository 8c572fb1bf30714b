"""
Base Provider Adapter

Shared aiohttp session handling and HTTP status mapping for the REST
market data providers.
"""
import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional, Any
import aiohttp
from loguru import logger

from app.utils.exceptions import MarketDataUnavailableError, RateLimitExceededError


@dataclass
class ProviderConfig:
    """Configuration for a data provider."""
    name: str
    api_key: Optional[str] = None
    base_url: str = ""
    host: Optional[str] = None
    websocket_url: Optional[str] = None
    timeout_seconds: float = 30.0
    max_symbols_per_request: int = 1


@dataclass
class Quote:
    """Normalized quote data structure."""
    symbol: str
    price: Decimal
    change: Optional[Decimal] = None
    change_percent: Optional[Decimal] = None
    day_high: Optional[Decimal] = None
    day_low: Optional[Decimal] = None
    day_open: Optional[Decimal] = None
    prev_close: Optional[Decimal] = None
    currency: str = "USD"
    timestamp: datetime = field(default_factory=datetime.utcnow)
    provider: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        def _f(value: Optional[Decimal]) -> Optional[float]:
            return float(value) if value is not None else None

        return {
            "symbol": self.symbol,
            "price": float(self.price),
            "change": _f(self.change),
            "change_percent": _f(self.change_percent),
            "day_high": _f(self.day_high),
            "day_low": _f(self.day_low),
            "day_open": _f(self.day_open),
            "prev_close": _f(self.prev_close),
            "currency": self.currency,
            "timestamp": self.timestamp.isoformat(),
            "provider": self.provider,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Quote":
        def _d(value: Any) -> Optional[Decimal]:
            return Decimal(str(value)) if value is not None else None

        return cls(
            symbol=data["symbol"],
            price=Decimal(str(data["price"])),
            change=_d(data.get("change")),
            change_percent=_d(data.get("change_percent")),
            day_high=_d(data.get("day_high")),
            day_low=_d(data.get("day_low")),
            day_open=_d(data.get("day_open")),
            prev_close=_d(data.get("prev_close")),
            currency=data.get("currency", "USD"),
            timestamp=datetime.fromisoformat(data["timestamp"]) if data.get("timestamp") else datetime.utcnow(),
            provider=data.get("provider", ""),
        )


def to_decimal(value: Any) -> Optional[Decimal]:
    """Provider number to Decimal, None for missing or non-numeric values."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return Decimal(str(value))
    except (ArithmeticError, ValueError):
        return None


class BaseAdapter:
    """
    Base class for REST data provider adapters.

    Subclasses call _get_json() which owns the session and maps
    HTTP failures onto the application's market data errors:
    429 -> RateLimitExceededError, anything else -> MarketDataUnavailableError.
    """

    def __init__(self, config: ProviderConfig):
        self.config = config
        self.name = config.name
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.config.api_key)

    async def initialize(self) -> None:
        """Initialize HTTP session."""
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
            logger.info(f"{self.name} adapter initialized")

    async def close(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None
            logger.info(f"{self.name} adapter closed")

    def _headers(self) -> dict[str, str]:
        return {}

    async def _get_json(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        """GET base_url + path and return the decoded JSON body."""
        if not self.is_configured:
            raise MarketDataUnavailableError(self.name, "API key not configured")
        if self._session is None:
            await self.initialize()

        url = f"{self.config.base_url}{path}"
        try:
            async with self._session.get(url, params=params, headers=self._headers()) as response:
                if response.status == 200:
                    return await response.json(content_type=None)

                body = await response.text()
                if response.status == 429:
                    logger.warning(f"{self.name} rate limit hit on {path}")
                    raise RateLimitExceededError(f"{self.name} rate limit exceeded")
                if response.status in (401, 403):
                    logger.error(f"{self.name} authentication failed ({response.status})")
                    raise MarketDataUnavailableError(self.name, "authentication failed")
                logger.error(f"{self.name} request {path} failed: {response.status} - {body[:200]}")
                raise MarketDataUnavailableError(self.name, f"API error {response.status}")

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"{self.name} connection error on {path}: {e}")
            raise MarketDataUnavailableError(self.name, f"Connection error: {e}")
