"""
Finnhub Stream Service

Bridges the Finnhub trade WebSocket to in-process listeners.

- Listeners register per symbol; the first listener for a symbol
  subscribes upstream, removing the last one unsubscribes.
- Every trade updates a last-price cache and a percent change measured
  against the first price seen for the symbol (the session open).
- The connection is re-established with exponential backoff
  (1s doubling, capped at 60s, plus up to 1s of jitter) and all
  registered symbols are re-subscribed on every connect.
- Synchronous listeners run inline; async listeners run as separate
  tasks that the upstream read loop does not wait for.
"""
import asyncio
import inspect
import json
import random
from typing import Any, Awaitable, Callable, Optional, Union

import websockets
from loguru import logger

from app.config import settings


PriceListener = Callable[[str, float, Optional[float]], Union[None, Awaitable[None]]]

BASE_RECONNECT_SECONDS = 1.0
MAX_BACKOFF_EXPONENT = 10


def reconnect_delay(
    attempt: int,
    max_seconds: float = 60.0,
    jitter: Optional[float] = None,
) -> float:
    """
    Seconds to wait before reconnect attempt number `attempt`.

    min(max_seconds, 1 * 2^min(attempt, 10)) + jitter, jitter in [0, 1).
    """
    base = min(max_seconds, BASE_RECONNECT_SECONDS * (2 ** min(attempt, MAX_BACKOFF_EXPONENT)))
    return base + (random.random() if jitter is None else jitter)


class FinnhubStreamService:
    """
    Live price fan-out from Finnhub.

    Usage:
        stream = FinnhubStreamService(api_key="...")
        await stream.start()
        await stream.add_listener("AAPL", on_price)
        ...
        await stream.remove_listener("AAPL", on_price)
        await stream.stop()
    """

    def __init__(
        self,
        api_key: str,
        ws_url: str = "wss://ws.finnhub.io",
        enabled: bool = True,
        max_backoff_seconds: float = 60.0,
        connector: Callable[..., Any] = websockets.connect,
    ):
        self.api_key = api_key or ""
        self.ws_url = ws_url
        self.enabled = enabled
        self.max_backoff_seconds = max_backoff_seconds
        self._connector = connector

        self._listeners: dict[str, list[PriceListener]] = {}
        self._last_prices: dict[str, float] = {}
        self._open_prices: dict[str, float] = {}
        self._percent_changes: dict[str, float] = {}

        self._ws = None
        self._task: Optional[asyncio.Task] = None
        self._pending: set[asyncio.Future] = set()
        self._attempt = 0
        self._stopping = False

    # ==================== State ====================

    @property
    def is_enabled(self) -> bool:
        return self.enabled and bool(self.api_key.strip())

    @property
    def is_connected(self) -> bool:
        return self._ws is not None

    @property
    def reconnect_attempts(self) -> int:
        return self._attempt

    @property
    def pending_listeners(self) -> int:
        return len(self._pending)

    def subscribed_symbols(self) -> list[str]:
        return sorted(self._listeners)

    def listener_count(self, symbol: str) -> int:
        return len(self._listeners.get(symbol.upper(), []))

    def get_last_price(self, symbol: str) -> Optional[float]:
        return self._last_prices.get(symbol.upper())

    def get_percent_change(self, symbol: str) -> Optional[float]:
        return self._percent_changes.get(symbol.upper())

    # ==================== Lifecycle ====================

    async def start(self) -> None:
        """Start the connection loop in the background. No-op when disabled."""
        if not self.is_enabled:
            logger.info("Finnhub stream disabled (flag off or no API key)")
            return
        if self._task and not self._task.done():
            return
        self._stopping = False
        self._task = asyncio.create_task(self._run(), name="finnhub-stream")
        logger.info("Finnhub stream started")

    async def stop(self) -> None:
        self._stopping = True
        if self._ws is not None:
            try:
                await self._ws.close()
            except websockets.WebSocketException as e:
                logger.debug(f"Finnhub close failed: {e}")
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        for pending in list(self._pending):
            pending.cancel()
        self._ws = None
        logger.info("Finnhub stream stopped")

    async def _run(self) -> None:
        url = f"{self.ws_url}?token={self.api_key}"
        while not self._stopping:
            try:
                async with self._connector(url) as ws:
                    self._ws = ws
                    await self._on_open()
                    async for message in ws:
                        await self.handle_message(message)
                logger.warning("Finnhub stream closed by server")
            except (websockets.WebSocketException, OSError, asyncio.TimeoutError) as e:
                logger.warning(f"Finnhub stream error: {e}")
            finally:
                self._ws = None

            if self._stopping:
                break
            delay = reconnect_delay(self._attempt, self.max_backoff_seconds)
            self._attempt += 1
            logger.info(f"Reconnecting to Finnhub in {delay:.1f}s (attempt {self._attempt})")
            await asyncio.sleep(delay)

    async def _on_open(self) -> None:
        self._attempt = 0
        logger.info(f"Connected to Finnhub, resubscribing {len(self._listeners)} symbols")
        for symbol in list(self._listeners):
            await self._send({"type": "subscribe", "symbol": symbol})

    # ==================== Listeners ====================

    async def add_listener(self, symbol: str, listener: PriceListener) -> None:
        """Register a listener; the first one for a symbol subscribes upstream."""
        symbol = symbol.strip().upper()
        listeners = self._listeners.setdefault(symbol, [])
        listeners.append(listener)
        if len(listeners) == 1:
            await self.subscribe(symbol)

    async def remove_listener(self, symbol: str, listener: PriceListener) -> None:
        """Unregister a listener; the last one for a symbol unsubscribes."""
        symbol = symbol.strip().upper()
        listeners = self._listeners.get(symbol)
        if not listeners:
            return
        try:
            listeners.remove(listener)
        except ValueError:
            return
        if not listeners:
            del self._listeners[symbol]
            await self._send({"type": "unsubscribe", "symbol": symbol})

    async def subscribe(self, symbol: str) -> None:
        await self._send({"type": "subscribe", "symbol": symbol.strip().upper()})

    async def _send(self, frame: dict[str, Any]) -> None:
        if self._ws is None:
            return
        try:
            await self._ws.send(json.dumps(frame))
        except websockets.WebSocketException as e:
            logger.debug(f"Finnhub send {frame} failed: {e}")

    # ==================== Messages ====================

    async def handle_message(self, raw: Union[str, bytes]) -> None:
        """Process one upstream frame. Only trade frames are used."""
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.debug(f"Unparseable Finnhub frame: {e}")
            return

        if not isinstance(payload, dict) or payload.get("type") != "trade":
            return

        for item in payload.get("data") or []:
            if not isinstance(item, dict):
                continue
            symbol = item.get("s")
            raw_price = item.get("p")
            if not symbol or raw_price is None or isinstance(raw_price, bool):
                continue
            try:
                price = float(raw_price)
            except (TypeError, ValueError):
                continue
            if price <= 0:
                continue

            symbol = str(symbol).upper()
            percent = self.record_price(symbol, price)
            await self._notify(symbol, price, percent)

    def record_price(self, symbol: str, price: float) -> Optional[float]:
        """Update caches; returns the percent change from the session open."""
        self._last_prices[symbol] = price
        open_price = self._open_prices.setdefault(symbol, price)
        if open_price <= 0:
            return None
        percent = (price - open_price) / open_price * 100.0
        self._percent_changes[symbol] = percent
        return percent

    async def _notify(self, symbol: str, price: float, percent: Optional[float]) -> None:
        for listener in list(self._listeners.get(symbol, [])):
            try:
                result = listener(symbol, price, percent)
            except Exception as e:
                logger.error(f"Price listener for {symbol} failed: {e}")
                continue
            if inspect.isawaitable(result):
                self._dispatch(symbol, result)

    def _dispatch(self, symbol: str, result: Awaitable[None]) -> None:
        """Run an async listener as its own task; the read loop does not wait for it."""
        task = asyncio.ensure_future(result)
        self._pending.add(task)

        def done(finished: asyncio.Future) -> None:
            self._pending.discard(finished)
            if finished.cancelled():
                return
            error = finished.exception()
            if error is not None:
                logger.error(f"Price listener for {symbol} failed: {error}")

        task.add_done_callback(done)


stream_service = FinnhubStreamService(
    api_key=settings.FINNHUB_API_KEY,
    ws_url=settings.FINNHUB_WS_URL,
    enabled=settings.FINNHUB_STREAM_ENABLED,
    max_backoff_seconds=settings.STREAM_RECONNECT_MAX_SECONDS,
)
