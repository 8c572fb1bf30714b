"""
Trading Simulator - Redis Client

Short-lived quote snapshot cache. Redis is optional: when it is
disabled or unreachable every call degrades to a cache miss.
"""
import json
import redis.asyncio as redis
from loguru import logger

from app.config import settings


class RedisClient:
    """Async Redis client wrapper."""

    def __init__(self):
        self._client: redis.Redis | None = None

    async def initialize(self):
        """Initialize Redis connection."""
        if not settings.REDIS_ENABLED:
            logger.info("Redis disabled, quote cache off")
            return
        redis_url = settings.redis_url
        try:
            self._client = redis.from_url(
                redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            await self._client.ping()
            logger.info(f"✅ Redis connected: {redis_url.split('@')[-1] if '@' in redis_url else redis_url}")
        except (redis.RedisError, OSError) as e:
            logger.warning(f"⚠️ Redis unavailable, quote cache off: {e}")
            self._client = None

    async def close(self):
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Redis connection closed")

    @property
    def available(self) -> bool:
        return self._client is not None

    async def ping(self) -> bool:
        if not self._client:
            return False
        try:
            return bool(await self._client.ping())
        except (redis.RedisError, OSError) as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    # =========================
    # Quote Cache Methods
    # =========================
    async def set_quote(self, symbol: str, data: dict, ttl: int | None = None):
        """Cache quote data with TTL."""
        if not self._client:
            return
        key = f"quote:{symbol.upper()}"
        try:
            await self._client.setex(key, ttl or settings.QUOTE_CACHE_TTL_SECONDS, json.dumps(data))
        except redis.RedisError as e:
            logger.warning(f"Redis set_quote failed for {symbol}: {e}")

    async def get_quote(self, symbol: str) -> dict | None:
        """Get cached quote data."""
        if not self._client:
            return None
        key = f"quote:{symbol.upper()}"
        try:
            data = await self._client.get(key)
        except redis.RedisError as e:
            logger.warning(f"Redis get_quote failed for {symbol}: {e}")
            return None
        return json.loads(data) if data else None

    async def get_quotes(self, symbols: list[str]) -> dict:
        """Get multiple cached quotes; misses map to None."""
        if not self._client or not symbols:
            return {s: None for s in symbols}
        keys = [f"quote:{s.upper()}" for s in symbols]
        try:
            values = await self._client.mget(keys)
        except redis.RedisError as e:
            logger.warning(f"Redis get_quotes failed: {e}")
            return {s: None for s in symbols}
        return {
            symbols[i]: json.loads(v) if v else None
            for i, v in enumerate(values)
        }


redis_client = RedisClient()
