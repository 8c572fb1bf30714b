"""
Provider Adapters Package

REST adapters for the market data providers.
"""
from app.data_providers.adapters.base import (
    BaseAdapter,
    ProviderConfig,
    Quote,
)
from app.data_providers.adapters.finnhub import (
    FinnhubAdapter,
    create_finnhub_config,
)
from app.data_providers.adapters.rapidapi import (
    RapidApiAdapter,
    create_rapidapi_config,
    interval_for_range,
)

__all__ = [
    "BaseAdapter",
    "ProviderConfig",
    "Quote",
    "FinnhubAdapter",
    "create_finnhub_config",
    "RapidApiAdapter",
    "create_rapidapi_config",
    "interval_for_range",
]
