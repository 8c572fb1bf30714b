"""
Trading Simulator - Test Configuration
Shared fixtures and test configuration.
"""
import os
import sys
import tempfile
from datetime import datetime
from decimal import Decimal
from typing import AsyncGenerator
import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock

# Add backend to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set test environment before any app import
os.environ["APP_ENV"] = "testing"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["REDIS_ENABLED"] = "false"
os.environ["FINNHUB_STREAM_ENABLED"] = "false"
os.environ["FINNHUB_API_KEY"] = "test-finnhub-key"
os.environ["RAPIDAPI_KEY"] = "test-rapidapi-key"
os.environ["REGISTRATION_PASSCODE"] = "open-sesame"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="simulator-logs-")

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.data_providers.adapters import Quote
from app.db.database import Base
from tests.factories import FakePriceService


# =========================
# Database Fixtures
# =========================

@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite engine; one shared connection so data outlives sessions."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


# =========================
# Price Fixtures
# =========================

@pytest.fixture
def fake_prices() -> FakePriceService:
    return FakePriceService({"AAPL": "150.00", "MSFT": "300.00"})


@pytest.fixture
def sample_quote() -> Quote:
    return Quote(
        symbol="AAPL",
        price=Decimal("178.50"),
        change=Decimal("2.30"),
        change_percent=Decimal("1.31"),
        day_high=Decimal("179.20"),
        day_low=Decimal("175.80"),
        day_open=Decimal("176.00"),
        prev_close=Decimal("176.20"),
        timestamp=datetime(2026, 1, 5, 15, 30),
        provider="rapidapi",
    )


# =========================
# Mock Fixtures
# =========================

@pytest.fixture
def mock_redis():
    """Mock quote cache."""
    redis = MagicMock()
    redis.get_quote = AsyncMock(return_value=None)
    redis.get_quotes = AsyncMock(side_effect=lambda symbols: {s: None for s in symbols})
    redis.set_quote = AsyncMock()
    return redis


@pytest.fixture
def mock_finnhub():
    """Mock Finnhub REST adapter."""
    adapter = MagicMock()
    adapter.get_quote = AsyncMock(return_value=None)
    adapter.list_symbols = AsyncMock(return_value=[])
    return adapter


@pytest.fixture
def mock_rapidapi():
    """Mock RapidAPI adapter."""
    adapter = MagicMock()
    adapter.get_quote = AsyncMock(return_value=None)
    adapter.get_quotes = AsyncMock(return_value=[])
    adapter.get_chart = AsyncMock(side_effect=lambda symbol, range_="1d": {"symbol": symbol, "range": range_})
    return adapter
