"""
Trading Simulator - Services Package
"""
from app.services.chart_service import ChartService
from app.services.price_service import PriceService
from app.services.stream_service import FinnhubStreamService, stream_service

__all__ = [
    "ChartService",
    "PriceService",
    "FinnhubStreamService",
    "stream_service",
]
