"""
Trading Simulator - Main Application Entry Point
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.api.v1.router import api_router
from app.core.auth import PasscodeService
from app.data_providers import close_providers
from app.db.database import async_session_maker, close_db, engine, init_db
from app.db.redis_client import redis_client
from app.services.stream_service import stream_service
from app.utils.exceptions import SimulatorError, simulator_error_handler
from app.utils.logger import setup_logging


async def init_passcode() -> None:
    """Seed the registration passcode on first start."""
    async with async_session_maker() as db:
        await PasscodeService(db).ensure_initialized(settings.REGISTRATION_PASSCODE)
        await db.commit()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events handler."""
    # Startup
    setup_logging()
    logger.info(f"🚀 Starting {settings.APP_NAME} ({settings.APP_ENV})...")

    await init_db()
    logger.info("✅ Database initialized")

    await redis_client.initialize()

    await init_passcode()

    await stream_service.start()

    logger.info(f"✅ {settings.APP_NAME} started successfully!")

    yield

    # Shutdown
    logger.info(f"🛑 Shutting down {settings.APP_NAME}...")

    await stream_service.stop()
    await close_providers()
    await redis_client.close()
    await close_db()
    logger.info("👋 Goodbye!")


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        description="Stock trading simulator with live prices",
        version=settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(SimulatorError, simulator_error_handler)

    # Include API router
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    # Health check endpoint
    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint for load balancers."""
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION
        }

    @app.get("/ready", tags=["Health"])
    async def readiness_check():
        """Readiness check - verifies all dependencies are available."""
        checks = {
            "database": "unknown",
            "redis": "disabled",
            "stream": "disabled",
        }

        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            checks["database"] = "connected"
        except (SQLAlchemyError, OSError) as e:
            checks["database"] = f"error: {str(e)[:50]}"

        if settings.REDIS_ENABLED:
            checks["redis"] = "connected" if await redis_client.ping() else "unavailable"

        if stream_service.is_enabled:
            checks["stream"] = "connected" if stream_service.is_connected else "connecting"

        ready = checks["database"] == "connected"
        return {
            "status": "ready" if ready else "degraded",
            "checks": checks
        }

    return app


# Create the application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.BACKEND_HOST,
        port=settings.BACKEND_PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
