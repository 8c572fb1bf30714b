"""
Trading Simulator - Symbol Universe Endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.symbols import SymbolService
from app.dependencies import get_current_active_user, get_current_admin, get_symbol_service
from app.db.models.user import User
from app.schemas.symbol import (
    ImportStatusResponse,
    ImportSummaryResponse,
    SymbolEnabledUpdate,
    SymbolPageResponse,
    SymbolResponse,
)

router = APIRouter()


@router.get("/", response_model=SymbolPageResponse)
async def list_symbols(
    q: Optional[str] = Query(None, max_length=100, description="Substring of ticker or name"),
    enabled: Optional[bool] = Query(None),
    page: int = Query(0, ge=0),
    size: int = Query(25, ge=1, le=200),
    current_user: User = Depends(get_current_active_user),
    symbols: SymbolService = Depends(get_symbol_service),
):
    return SymbolPageResponse.model_validate(
        await symbols.list_symbols(q=q, enabled=enabled, page=page, size=size)
    )


@router.post("/import", response_model=ImportSummaryResponse)
async def import_symbols(
    universe: str = Query("NDX", max_length=10),
    admin: User = Depends(get_current_admin),
    symbols: SymbolService = Depends(get_symbol_service),
):
    """Refresh the universe from Finnhub. One import at a time."""
    return ImportSummaryResponse.model_validate(await symbols.import_universe(universe))


@router.get("/import/status", response_model=ImportStatusResponse)
async def import_status(
    admin: User = Depends(get_current_admin),
    symbols: SymbolService = Depends(get_symbol_service),
):
    return ImportStatusResponse.model_validate(symbols.import_status())


@router.patch("/{symbol_id}/enabled", response_model=SymbolResponse)
async def set_symbol_enabled(
    symbol_id: int,
    data: SymbolEnabledUpdate,
    admin: User = Depends(get_current_admin),
    symbols: SymbolService = Depends(get_symbol_service),
):
    return SymbolResponse.model_validate(await symbols.set_enabled(symbol_id, data.enabled))
