"""
Trading Simulator - Symbol Universe Schemas
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class SymbolResponse(BaseModel):
    id: int
    symbol: str
    name: Optional[str] = None
    exchange: Optional[str] = None
    mic: Optional[str] = None
    currency: Optional[str] = None
    enabled: bool

    model_config = ConfigDict(from_attributes=True)


class SymbolPageResponse(BaseModel):
    items: list[SymbolResponse]
    total: int
    page: int
    size: int
    pages: int

    model_config = ConfigDict(from_attributes=True)


class SymbolEnabledUpdate(BaseModel):
    enabled: bool


class ImportSummaryResponse(BaseModel):
    imported: int
    updated: int
    skipped: int

    model_config = ConfigDict(from_attributes=True)


class ImportStatusResponse(BaseModel):
    running: bool
    last_imported_at: Optional[datetime] = None
    last_summary: Optional[ImportSummaryResponse] = None

    model_config = ConfigDict(from_attributes=True)
