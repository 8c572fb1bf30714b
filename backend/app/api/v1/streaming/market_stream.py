"""
WebSocket endpoint for live prices.
"""
import asyncio
import json
from typing import Optional, Set

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from loguru import logger

from app.config import settings
from app.services.stream_service import FinnhubStreamService, stream_service
from .price_stream import QUEUE_SIZE, parse_symbols, price_payload, verify_stream_token

router = APIRouter()


class ConnectionManager:
    """
    Manages WebSocket connections and fans stream prices out to them.

    Holds one listener per symbol on the stream service; the listener is
    released when the last socket unsubscribes. Each socket gets its own
    bounded outbox and sender task, so a slow client only delays itself.
    """

    def __init__(self, stream: FinnhubStreamService, queue_size: int = QUEUE_SIZE):
        self.stream = stream
        self.queue_size = queue_size
        # Map of user_id -> set of WebSocket connections
        self.active_connections: dict[int, Set[WebSocket]] = {}
        # Map of symbol -> sockets subscribed to it
        self.symbol_subscriptions: dict[str, Set[WebSocket]] = {}
        # Map of socket -> symbols it follows
        self.socket_subscriptions: dict[WebSocket, Set[str]] = {}
        # Map of socket -> pending price messages and the task sending them
        self.outboxes: dict[WebSocket, asyncio.Queue] = {}
        self.senders: dict[WebSocket, asyncio.Task] = {}

    async def connect(self, websocket: WebSocket, user_id: int):
        """Accept a new WebSocket connection."""
        await websocket.accept()
        self.active_connections.setdefault(user_id, set()).add(websocket)
        self.socket_subscriptions[websocket] = set()
        outbox: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        self.outboxes[websocket] = outbox
        self.senders[websocket] = asyncio.create_task(self._send_prices(websocket, outbox))
        logger.info(f"WebSocket connected: user_id={user_id}")

    async def disconnect(self, websocket: WebSocket, user_id: int):
        """Remove a WebSocket connection and release its symbols."""
        if user_id in self.active_connections:
            self.active_connections[user_id].discard(websocket)
            if not self.active_connections[user_id]:
                del self.active_connections[user_id]

        symbols = list(self.socket_subscriptions.get(websocket, set()))
        await self.unsubscribe(websocket, symbols)
        self.socket_subscriptions.pop(websocket, None)
        self.outboxes.pop(websocket, None)

        sender = self.senders.pop(websocket, None)
        if sender is not None:
            sender.cancel()
            try:
                await sender
            except asyncio.CancelledError:
                pass
        logger.info(f"WebSocket disconnected: user_id={user_id}")

    async def subscribe(self, websocket: WebSocket, symbols: list[str]) -> list[str]:
        """Follow symbols, up to STREAM_MAX_SYMBOLS per socket. Returns those added."""
        current = self.socket_subscriptions.setdefault(websocket, set())
        added = []
        for symbol in symbols:
            if symbol in current:
                continue
            if len(current) >= settings.STREAM_MAX_SYMBOLS:
                break
            current.add(symbol)
            sockets = self.symbol_subscriptions.setdefault(symbol, set())
            sockets.add(websocket)
            if len(sockets) == 1:
                await self.stream.add_listener(symbol, self.on_price)
            added.append(symbol)
        return added

    async def unsubscribe(self, websocket: WebSocket, symbols: list[str]) -> list[str]:
        current = self.socket_subscriptions.get(websocket, set())
        removed = []
        for symbol in symbols:
            if symbol not in current:
                continue
            current.discard(symbol)
            sockets = self.symbol_subscriptions.get(symbol)
            if sockets is not None:
                sockets.discard(websocket)
                if not sockets:
                    del self.symbol_subscriptions[symbol]
                    await self.stream.remove_listener(symbol, self.on_price)
            removed.append(symbol)
        return removed

    def subscriptions(self, websocket: WebSocket) -> list[str]:
        return sorted(self.socket_subscriptions.get(websocket, set()))

    def on_price(self, symbol: str, price: float, percent: Optional[float]) -> None:
        """Stream listener: queue a price for every subscribed socket."""
        message = price_payload(symbol, price, percent)
        for websocket in list(self.symbol_subscriptions.get(symbol, set())):
            outbox = self.outboxes.get(websocket)
            if outbox is None:
                continue
            try:
                outbox.put_nowait(message)
            except asyncio.QueueFull:
                logger.debug(f"WebSocket outbox full, dropping {symbol} tick")

    async def _send_prices(self, websocket: WebSocket, outbox: asyncio.Queue) -> None:
        while True:
            message = await outbox.get()
            try:
                await websocket.send_json(message)
            except (WebSocketDisconnect, RuntimeError) as e:
                logger.debug(f"Stopped sending prices to closed socket: {e}")
                return

    def get_stats(self) -> dict:
        """Get connection statistics."""
        return {
            "total_connections": sum(len(conns) for conns in self.active_connections.values()),
            "unique_users": len(self.active_connections),
            "subscribed_symbols": len(self.symbol_subscriptions),
        }


# Global connection manager
manager = ConnectionManager(stream_service)


async def handle_action(websocket: WebSocket, message: dict, conn: ConnectionManager) -> dict:
    """Apply one client message and build the reply."""
    action = message.get("action")

    if action == "subscribe":
        symbols = await conn.subscribe(websocket, parse_symbols(message.get("symbols") or []))
        return {"type": "subscribed", "symbols": symbols}

    if action == "unsubscribe":
        symbols = await conn.unsubscribe(websocket, parse_symbols(message.get("symbols") or []))
        return {"type": "unsubscribed", "symbols": symbols}

    if action == "ping":
        return {"type": "pong"}

    if action == "get_subscriptions":
        return {"type": "subscriptions", "symbols": conn.subscriptions(websocket)}

    return {"type": "error", "message": f"Unknown action: {action}"}


@router.websocket("/ws/prices")
async def websocket_prices_endpoint(
    websocket: WebSocket,
    token: str = Query(...)
):
    """
    WebSocket endpoint for live prices.

    Connect with: ws://localhost:8000/api/v1/ws/prices?token=<jwt_token>

    Message types to send:
    - {"action": "subscribe", "symbols": ["AAPL", "MSFT"]}
    - {"action": "unsubscribe", "symbols": ["AAPL"]}
    - {"action": "ping"}
    - {"action": "get_subscriptions"}

    Message types received:
    - {"type": "connected", "user_id": ...}
    - {"type": "price", "symbol", "price", "percentChange", "ts"}
    - {"type": "subscribed" | "unsubscribed" | "subscriptions", "symbols": [...]}
    - {"type": "pong"}
    - {"type": "error", "message": "..."}
    """
    user_id = verify_stream_token(token)
    if user_id is None:
        await websocket.close(code=4001, reason="Invalid or expired token")
        return

    await manager.connect(websocket, user_id)

    try:
        await websocket.send_json({
            "type": "connected",
            "message": "Successfully connected to price stream",
            "user_id": user_id
        })

        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "message": "Invalid JSON format"})
                continue
            if not isinstance(message, dict):
                await websocket.send_json({"type": "error", "message": "Expected a JSON object"})
                continue
            await websocket.send_json(await handle_action(websocket, message, manager))

    except WebSocketDisconnect:
        pass
    finally:
        await manager.disconnect(websocket, user_id)


def get_connection_manager() -> ConnectionManager:
    """Get the global connection manager."""
    return manager
