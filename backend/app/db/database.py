"""
Trading Simulator - Database Connection
"""
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from loguru import logger

from app.config import settings


def _engine_options(url: str) -> dict:
    options = {"echo": settings.DEBUG, "pool_pre_ping": True}
    # SQLite (local runs) does not take queue pool sizing
    if not url.startswith("sqlite"):
        options.update(pool_size=10, max_overflow=20)
    return options


# Create async engine
engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# Create async session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for models
Base = declarative_base()


async def init_db():
    """Initialize database tables."""
    async with engine.begin() as conn:
        # Register every model on the metadata
        import app.db.models  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created/verified")


async def close_db():
    """Dispose of pooled connections."""
    await engine.dispose()
    logger.info("Database engine disposed")


async def get_db() -> AsyncSession:
    """Dependency for getting database session."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
