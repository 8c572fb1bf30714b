"""
Server-Sent Events endpoint for live prices.

    GET /stream/prices?symbols=AAPL,MSFT&token=<jwt>

Events:
- price:     {"type": "price", "symbol", "price", "percentChange", "ts"}
- heartbeat: {"type": "heartbeat", "ts"} every STREAM_HEARTBEAT_SECONDS
- error:     {"status": 400, "message": ...} then the stream ends
"""
import asyncio
import json
import time
from typing import Any, AsyncIterator, Iterable, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import StreamingResponse
from loguru import logger

from app.config import settings
from app.core.security import verify_token
from app.dependencies import get_stream_service
from app.services.stream_service import FinnhubStreamService

router = APIRouter()

QUEUE_SIZE = 1000

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def now_ms() -> int:
    return int(time.time() * 1000)


def parse_symbols(
    raw: Union[str, Iterable[Any], None],
    limit: Optional[int] = None,
) -> list[str]:
    """
    Normalize a symbol list: comma-split (for strings), strip, upper-case,
    drop blanks and duplicates keeping order, cap at `limit`.
    """
    if raw is None:
        return []
    parts = raw.split(",") if isinstance(raw, str) else raw
    limit = settings.STREAM_MAX_SYMBOLS if limit is None else limit

    symbols: list[str] = []
    for part in parts:
        symbol = str(part).strip().upper() if part is not None else ""
        if symbol and symbol not in symbols:
            symbols.append(symbol)
        if len(symbols) >= limit:
            break
    return symbols


def verify_stream_token(token: Optional[str]) -> Optional[int]:
    """User id from an access token, or None."""
    subject = verify_token(token or "", token_type="access")
    try:
        return int(subject) if subject is not None else None
    except ValueError:
        return None


def format_event(event: str, data: dict[str, Any]) -> str:
    return f"event: {event}\ndata: {json.dumps(data, separators=(',', ':'))}\n\n"


def price_payload(symbol: str, price: float, percent: Optional[float]) -> dict[str, Any]:
    return {
        "type": "price",
        "symbol": symbol,
        "price": price,
        "percentChange": percent,
        "ts": now_ms(),
    }


async def price_events(
    request: Request,
    stream: FinnhubStreamService,
    symbols: list[str],
    heartbeat_seconds: float,
) -> AsyncIterator[str]:
    """Yield SSE frames until the client goes away."""
    if not symbols:
        yield format_event("error", {"status": 400, "message": "At least one symbol is required"})
        return

    queue: asyncio.Queue = asyncio.Queue(maxsize=QUEUE_SIZE)

    def on_price(symbol: str, price: float, percent: Optional[float]) -> None:
        try:
            queue.put_nowait(price_payload(symbol, price, percent))
        except asyncio.QueueFull:
            logger.debug(f"SSE queue full, dropping {symbol} tick")

    for symbol in symbols:
        await stream.add_listener(symbol, on_price)

    try:
        for symbol in symbols:
            last = stream.get_last_price(symbol)
            if last is not None:
                yield format_event("price", price_payload(symbol, last, stream.get_percent_change(symbol)))

        while True:
            if await request.is_disconnected():
                break
            try:
                item = await asyncio.wait_for(queue.get(), timeout=heartbeat_seconds)
                yield format_event("price", item)
            except asyncio.TimeoutError:
                yield format_event("heartbeat", {"type": "heartbeat", "ts": now_ms()})
    finally:
        for symbol in symbols:
            await stream.remove_listener(symbol, on_price)
        logger.debug(f"SSE client left, released {symbols}")


@router.get("/stream/prices")
async def stream_prices(
    request: Request,
    symbols: Optional[str] = Query(None, description="Comma-separated tickers"),
    token: Optional[str] = Query(None, description="Access token"),
    stream: FinnhubStreamService = Depends(get_stream_service),
) -> StreamingResponse:
    """Live prices for the given symbols as Server-Sent Events."""
    user_id = verify_stream_token(token)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing token",
        )

    wanted = parse_symbols(symbols)
    logger.info(f"SSE price stream opened by user {user_id} for {wanted}")
    return StreamingResponse(
        price_events(request, stream, wanted, settings.STREAM_HEARTBEAT_SECONDS),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )
