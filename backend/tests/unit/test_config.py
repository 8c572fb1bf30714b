"""
Unit Tests - Configuration
"""
from decimal import Decimal

from app.config import Settings


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestDatabaseUrl:
    def test_built_from_parts(self):
        config = make_settings(
            DATABASE_URL="",
            POSTGRES_USER="u",
            POSTGRES_PASSWORD="p",
            POSTGRES_HOST="db",
            POSTGRES_PORT=5433,
            POSTGRES_DB="sim",
        )
        assert config.database_url == "postgresql+asyncpg://u:p@db:5433/sim"
        assert config.database_url_sync == "postgresql://u:p@db:5433/sim"

    def test_plain_postgres_url_gets_async_driver(self):
        config = make_settings(DATABASE_URL="postgresql://u:p@db/sim")
        assert config.database_url == "postgresql+asyncpg://u:p@db/sim"

    def test_other_urls_untouched(self):
        config = make_settings(DATABASE_URL="sqlite+aiosqlite://")
        assert config.database_url == "sqlite+aiosqlite://"
        assert config.database_url_sync == "sqlite+aiosqlite://"


class TestRedisUrl:
    def test_with_password(self):
        config = make_settings(REDIS_URL="", REDIS_PASSWORD="pw", REDIS_HOST="cache", REDIS_DB=2)
        assert config.redis_url == "redis://:pw@cache:6379/2"

    def test_explicit_url_wins(self):
        assert make_settings(REDIS_URL="redis://elsewhere:1/0").redis_url == "redis://elsewhere:1/0"


class TestCorsOrigins:
    def test_json_list(self):
        config = make_settings(CORS_ORIGINS='["http://a.test", "http://b.test"]')
        assert config.CORS_ORIGINS == ["http://a.test", "http://b.test"]

    def test_comma_separated(self):
        config = make_settings(CORS_ORIGINS="http://a.test, http://b.test,")
        assert config.CORS_ORIGINS == ["http://a.test", "http://b.test"]


def test_defaults():
    config = make_settings()
    assert config.INITIAL_WALLET_BALANCE == Decimal("5000.00")
    assert config.SYMBOL_IMPORT_MAX_NEW == 25
    assert config.SYMBOL_UNIVERSE_CAP == 50
    assert config.STREAM_MAX_SYMBOLS == 50
    assert config.STREAM_HEARTBEAT_SECONDS == 15
    assert config.QUOTE_BATCH_SIZE == 10
