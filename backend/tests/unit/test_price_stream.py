"""
Unit Tests - Price Streaming
SSE framing and the WebSocket connection manager.
"""
import asyncio
import json
import pytest
from unittest.mock import AsyncMock, MagicMock

from app.api.v1.streaming.market_stream import ConnectionManager, handle_action
from app.api.v1.streaming.price_stream import (
    format_event,
    parse_symbols,
    price_events,
    verify_stream_token,
)
from app.core.security import create_access_token
from app.services.stream_service import FinnhubStreamService


def parse_event(frame: str) -> tuple[str, dict]:
    lines = frame.strip().split("\n")
    assert lines[0].startswith("event: ")
    assert lines[1].startswith("data: ")
    return lines[0][len("event: "):], json.loads(lines[1][len("data: "):])


@pytest.fixture
def stream():
    return FinnhubStreamService(api_key="", enabled=False)


@pytest.fixture
def request_stub():
    request = MagicMock()
    request.is_disconnected = AsyncMock(return_value=False)
    return request


class TestParseSymbols:
    """Tests for symbol list normalization."""

    def test_comma_separated(self):
        assert parse_symbols(" aapl, msft ,,AAPL , tsla") == ["AAPL", "MSFT", "TSLA"]

    def test_list_input(self):
        assert parse_symbols(["nvda", "", None, "NVDA"]) == ["NVDA"]

    def test_empty(self):
        assert parse_symbols(None) == []
        assert parse_symbols(" , ,") == []

    def test_capped(self):
        raw = ",".join(f"S{chr(65 + i // 26)}{chr(65 + i % 26)}" for i in range(80))
        assert len(parse_symbols(raw)) == 50
        assert len(parse_symbols(raw, limit=3)) == 3


class TestStreamToken:
    """Tests for query-string token checks."""

    def test_valid_access_token(self):
        token, _ = create_access_token(42)
        assert verify_stream_token(token) == 42

    @pytest.mark.parametrize("token", [None, "", "garbage"])
    def test_invalid_token(self, token):
        assert verify_stream_token(token) is None


class TestPriceEvents:
    """Tests for the SSE event generator."""

    def test_format_event(self):
        assert format_event("heartbeat", {"ts": 1}) == 'event: heartbeat\ndata: {"ts":1}\n\n'

    @pytest.mark.asyncio
    async def test_no_symbols_yields_single_error(self, request_stub, stream):
        frames = [f async for f in price_events(request_stub, stream, [], 15)]

        assert len(frames) == 1
        event, data = parse_event(frames[0])
        assert event == "error"
        assert data == {"status": 400, "message": "At least one symbol is required"}

    @pytest.mark.asyncio
    async def test_initial_live_and_cleanup(self, request_stub, stream):
        stream.record_price("AAPL", 100.0)
        events = price_events(request_stub, stream, ["AAPL", "MSFT"], 15)

        event, data = parse_event(await events.__anext__())
        assert event == "price"
        assert data["type"] == "price"
        assert data["symbol"] == "AAPL"
        assert data["price"] == 100.0
        assert data["percentChange"] == 0.0
        assert isinstance(data["ts"], int)
        assert stream.listener_count("AAPL") == 1
        assert stream.listener_count("MSFT") == 1

        await stream.handle_message(json.dumps({"type": "trade", "data": [{"s": "MSFT", "p": 410.5}]}))
        event, data = parse_event(await events.__anext__())
        assert event == "price"
        assert data["symbol"] == "MSFT"
        assert data["price"] == 410.5

        request_stub.is_disconnected.return_value = True
        with pytest.raises(StopAsyncIteration):
            await events.__anext__()

        assert stream.listener_count("AAPL") == 0
        assert stream.listener_count("MSFT") == 0

    @pytest.mark.asyncio
    async def test_heartbeat_when_idle(self, request_stub, stream):
        events = price_events(request_stub, stream, ["AAPL"], 0.01)

        event, data = parse_event(await events.__anext__())

        assert event == "heartbeat"
        assert data["type"] == "heartbeat"
        await events.aclose()
        assert stream.listener_count("AAPL") == 0


class FakeSocket:
    def __init__(self):
        self.sent = []
        self.accept = AsyncMock()

    async def send_json(self, message):
        self.sent.append(message)


class StalledSocket(FakeSocket):
    """Socket whose sends block until released."""

    def __init__(self):
        super().__init__()
        self.release = asyncio.Event()

    async def send_json(self, message):
        await self.release.wait()
        self.sent.append(message)


async def settle(rounds: int = 5):
    for _ in range(rounds):
        await asyncio.sleep(0)


class TestConnectionManager:
    """Tests for WebSocket fan-out."""

    @pytest.mark.asyncio
    async def test_subscribe_shares_one_stream_listener(self, stream):
        manager = ConnectionManager(stream)
        a, b = FakeSocket(), FakeSocket()
        await manager.connect(a, 1)
        await manager.connect(b, 2)

        assert await manager.subscribe(a, ["AAPL"]) == ["AAPL"]
        assert await manager.subscribe(b, ["AAPL", "MSFT"]) == ["AAPL", "MSFT"]
        assert await manager.subscribe(b, ["AAPL"]) == []

        assert stream.listener_count("AAPL") == 1
        assert stream.listener_count("MSFT") == 1

        await stream.handle_message(json.dumps({"type": "trade", "data": [{"s": "AAPL", "p": 10}]}))
        await settle()
        assert a.sent[-1]["symbol"] == "AAPL"
        assert b.sent[-1]["symbol"] == "AAPL"
        assert a.sent[-1]["type"] == "price"

        await manager.disconnect(a, 1)
        await manager.disconnect(b, 2)

    @pytest.mark.asyncio
    async def test_slow_socket_does_not_hold_up_others(self, stream):
        manager = ConnectionManager(stream)
        slow, fast = StalledSocket(), FakeSocket()
        await manager.connect(slow, 1)
        await manager.connect(fast, 2)
        await manager.subscribe(slow, ["AAPL"])
        await manager.subscribe(fast, ["AAPL", "MSFT"])

        frame = json.dumps({"type": "trade", "data": [{"s": "AAPL", "p": 190}, {"s": "MSFT", "p": 410}]})
        await asyncio.wait_for(stream.handle_message(frame), timeout=1)
        await settle()

        assert [m["symbol"] for m in fast.sent] == ["AAPL", "MSFT"]
        assert slow.sent == []

        slow.release.set()
        await settle()
        assert [m["symbol"] for m in slow.sent] == ["AAPL"]

        await manager.disconnect(slow, 1)
        await manager.disconnect(fast, 2)
        assert manager.senders == {}

    @pytest.mark.asyncio
    async def test_full_outbox_drops_ticks(self, stream):
        manager = ConnectionManager(stream, queue_size=1)
        slow = StalledSocket()
        await manager.connect(slow, 1)
        await manager.subscribe(slow, ["AAPL"])

        for price in (1, 2, 3):
            await stream.handle_message(json.dumps({"type": "trade", "data": [{"s": "AAPL", "p": price}]}))
            await settle()

        slow.release.set()
        await settle()
        assert [m["price"] for m in slow.sent] == [1.0, 2.0]

        await manager.disconnect(slow, 1)

    @pytest.mark.asyncio
    async def test_sender_stops_on_closed_socket(self, stream):
        manager = ConnectionManager(stream)
        closed = FakeSocket()
        closed.send_json = AsyncMock(side_effect=RuntimeError("socket closed"))
        await manager.connect(closed, 1)
        await manager.subscribe(closed, ["AAPL"])

        await stream.handle_message(json.dumps({"type": "trade", "data": [{"s": "AAPL", "p": 10}]}))
        await settle()

        assert manager.senders[closed].done()
        await manager.disconnect(closed, 1)

    @pytest.mark.asyncio
    async def test_disconnect_releases_listeners(self, stream):
        manager = ConnectionManager(stream)
        a = FakeSocket()
        await manager.connect(a, 1)
        await manager.subscribe(a, ["AAPL", "MSFT"])

        await manager.disconnect(a, 1)

        assert stream.subscribed_symbols() == []
        assert manager.get_stats() == {"total_connections": 0, "unique_users": 0, "subscribed_symbols": 0}

    @pytest.mark.asyncio
    async def test_handle_actions(self, stream):
        manager = ConnectionManager(stream)
        a = FakeSocket()
        await manager.connect(a, 1)

        reply = await handle_action(a, {"action": "subscribe", "symbols": ["msft", "aapl"]}, manager)
        assert reply == {"type": "subscribed", "symbols": ["MSFT", "AAPL"]}

        reply = await handle_action(a, {"action": "get_subscriptions"}, manager)
        assert reply == {"type": "subscriptions", "symbols": ["AAPL", "MSFT"]}

        reply = await handle_action(a, {"action": "unsubscribe", "symbols": ["MSFT"]}, manager)
        assert reply == {"type": "unsubscribed", "symbols": ["MSFT"]}

        assert await handle_action(a, {"action": "ping"}, manager) == {"type": "pong"}
        assert (await handle_action(a, {"action": "dance"}, manager))["type"] == "error"
        await manager.disconnect(a, 1)
