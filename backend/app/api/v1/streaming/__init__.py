"""
Streaming endpoints for live prices (SSE and WebSocket).
"""
from .price_stream import router as price_stream_router, parse_symbols
from .market_stream import router as market_stream_router, get_connection_manager

__all__ = [
    "price_stream_router",
    "market_stream_router",
    "parse_symbols",
    "get_connection_manager",
]
