"""
Trading Simulator - Configuration Settings
"""
from decimal import Decimal
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # =========================
    # Application Settings
    # =========================
    APP_NAME: str = "Trading Simulator"
    APP_VERSION: str = "1.0.0"
    APP_ENV: str = "development"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"

    # =========================
    # Server Configuration
    # =========================
    BACKEND_HOST: str = "0.0.0.0"
    BACKEND_PORT: int = 8000
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # =========================
    # Database - PostgreSQL
    # =========================
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "trading_simulator"
    POSTGRES_USER: str = "simulator"
    POSTGRES_PASSWORD: str = "simulator"
    # Full URL overrides the individual parts
    DATABASE_URL: str = ""

    @property
    def database_url(self) -> str:
        """Get the async database URL."""
        if self.DATABASE_URL:
            url = self.DATABASE_URL
            if url.startswith("postgresql://"):
                url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
            return url
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @property
    def database_url_sync(self) -> str:
        """Get the sync database URL for Alembic."""
        url = self.database_url
        if "+asyncpg" in url:
            url = url.replace("postgresql+asyncpg://", "postgresql://", 1)
        return url

    # =========================
    # Redis
    # =========================
    REDIS_ENABLED: bool = True
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: str = ""
    REDIS_DB: int = 0
    REDIS_URL: str = ""
    QUOTE_CACHE_TTL_SECONDS: int = 15

    @property
    def redis_url(self) -> str:
        """Get the Redis URL."""
        if self.REDIS_URL:
            return self.REDIS_URL
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # =========================
    # Authentication
    # =========================
    SECRET_KEY: str = "change-this-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    # Seeds the active registration passcode when none is stored yet
    REGISTRATION_PASSCODE: str = ""

    # =========================
    # Market Data Providers
    # =========================
    FINNHUB_API_KEY: str = ""
    FINNHUB_BASE_URL: str = "https://finnhub.io/api/v1"
    FINNHUB_WS_URL: str = "wss://ws.finnhub.io"
    FINNHUB_STREAM_ENABLED: bool = True

    RAPIDAPI_KEY: str = ""
    RAPIDAPI_HOST: str = "apidojo-yahoo-finance-v1.p.rapidapi.com"
    RAPIDAPI_BASE_URL: str = "https://apidojo-yahoo-finance-v1.p.rapidapi.com"
    QUOTE_BATCH_SIZE: int = 10

    # =========================
    # Wallet & Symbol Universe
    # =========================
    INITIAL_WALLET_BALANCE: Decimal = Decimal("5000.00")
    SYMBOL_IMPORT_MAX_NEW: int = 25
    SYMBOL_UNIVERSE_CAP: int = 50

    # =========================
    # Price Streaming
    # =========================
    STREAM_MAX_SYMBOLS: int = 50
    STREAM_HEARTBEAT_SECONDS: int = 15
    STREAM_RECONNECT_MAX_SECONDS: int = 60

    # =========================
    # Logging
    # =========================
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"


# Create global settings instance
settings = Settings()
