"""
Data Providers Package

Market data adapters and their process-wide instances.
"""
from app.config import settings
from app.data_providers.adapters import (
    FinnhubAdapter,
    RapidApiAdapter,
    create_finnhub_config,
    create_rapidapi_config,
)


finnhub_adapter = FinnhubAdapter(
    create_finnhub_config(settings.FINNHUB_API_KEY, settings.FINNHUB_BASE_URL)
)

rapidapi_adapter = RapidApiAdapter(
    create_rapidapi_config(settings.RAPIDAPI_KEY, settings.RAPIDAPI_HOST, settings.RAPIDAPI_BASE_URL)
)


async def close_providers() -> None:
    """Close provider HTTP sessions."""
    await finnhub_adapter.close()
    await rapidapi_adapter.close()


__all__ = [
    "finnhub_adapter",
    "rapidapi_adapter",
    "close_providers",
]
