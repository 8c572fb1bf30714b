"""
Symbol Service

Import and curation of the tradable universe.

Imports are single-flight per process: a second import while one is
running raises ImportInProgressError. Existing symbols are refreshed on
every import; new ones are added in ticker order up to
SYMBOL_IMPORT_MAX_NEW per import and SYMBOL_UNIVERSE_CAP overall.
"""
import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, List

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.symbols.filters import is_eligible, normalize_symbol
from app.data_providers.adapters import FinnhubAdapter
from app.db.models.symbol import Symbol
from app.db.repositories.symbol import SymbolRepository
from app.utils.exceptions import ImportInProgressError, SymbolNotFoundError


@dataclass
class ImportSummary:
    imported: int = 0
    updated: int = 0
    skipped: int = 0


@dataclass
class ImportStatus:
    running: bool
    last_imported_at: Optional[datetime] = None
    last_summary: Optional[ImportSummary] = None


@dataclass
class SymbolPage:
    items: List[Symbol] = field(default_factory=list)
    total: int = 0
    page: int = 0
    size: int = 25

    @property
    def pages(self) -> int:
        return (self.total + self.size - 1) // self.size if self.size else 0


class ImportState:
    """Process-wide import bookkeeping."""

    def __init__(self):
        self.lock = asyncio.Lock()
        self.last_imported_at: Optional[datetime] = None
        self.last_summary: Optional[ImportSummary] = None


import_state = ImportState()


def remaining_capacity(current_count: int) -> int:
    """New symbols one import may add."""
    return min(settings.SYMBOL_IMPORT_MAX_NEW, max(0, settings.SYMBOL_UNIVERSE_CAP - current_count))


def select_candidates(records: List[dict[str, Any]], universe: Optional[str]) -> dict[str, dict[str, Any]]:
    """Eligible records keyed by normalized ticker, first occurrence wins."""
    selected: dict[str, dict[str, Any]] = {}
    for item in records:
        if not isinstance(item, dict) or not is_eligible(item, universe):
            continue
        symbol = normalize_symbol(item.get("symbol"))
        if symbol and symbol not in selected:
            selected[symbol] = item
    return selected


class SymbolService:
    """
    Service for the symbol universe.

    Usage:
        service = SymbolService(db, finnhub_adapter)
        summary = await service.import_universe("NDX")
        page = await service.list_symbols(q="app", enabled=True)
    """

    def __init__(self, db: AsyncSession, provider: FinnhubAdapter, state: ImportState = import_state):
        self.db = db
        self.provider = provider
        self.state = state
        self.symbols = SymbolRepository(db)

    # ==================== Import ====================

    async def import_universe(self, universe: Optional[str] = "NDX") -> ImportSummary:
        """
        Refresh the universe from Finnhub's US symbol list.

        Raises:
            ImportInProgressError: another import is running
            MarketDataUnavailableError, RateLimitExceededError: provider failure
        """
        if self.state.lock.locked():
            raise ImportInProgressError()

        async with self.state.lock:
            logger.info(f"Symbol import started (universe={universe})")
            summary = await self._import(universe)
            self.state.last_imported_at = datetime.utcnow()
            self.state.last_summary = summary
            logger.info(
                f"Symbol import finished: imported={summary.imported} "
                f"updated={summary.updated} skipped={summary.skipped}"
            )
            return summary

    async def _import(self, universe: Optional[str]) -> ImportSummary:
        records = await self.provider.list_symbols("US")
        candidates = select_candidates(records, universe)

        all_rows = await self.symbols.get_all_keyed()
        existing = {s: row for s, row in all_rows.items() if s in candidates}
        capacity = remaining_capacity(len(all_rows))

        new_tickers = sorted(s for s in candidates if s not in existing)[:capacity]

        for symbol, row in existing.items():
            self._apply(row, candidates[symbol])

        created = []
        for symbol in new_tickers:
            row = Symbol(symbol=symbol, enabled=True)
            self._apply(row, candidates[symbol])
            created.append(row)
        await self.symbols.add_all(created)

        selected = len(existing) + len(created)
        return ImportSummary(
            imported=len(created),
            updated=len(existing),
            skipped=max(0, len(records) - selected),
        )

    @staticmethod
    def _apply(row: Symbol, item: dict[str, Any]) -> None:
        mic = item.get("mic") or None
        row.name = item.get("description")
        row.exchange = mic or "US"
        row.currency = item.get("currency") or "USD"
        row.mic = mic

    def import_status(self) -> ImportStatus:
        return ImportStatus(
            running=self.state.lock.locked(),
            last_imported_at=self.state.last_imported_at,
            last_summary=self.state.last_summary,
        )

    # ==================== Curation ====================

    async def list_symbols(
        self,
        q: Optional[str] = None,
        enabled: Optional[bool] = None,
        page: int = 0,
        size: int = 25,
    ) -> SymbolPage:
        """Page through the universe ordered by ticker. Blank q means no filter."""
        page = max(0, page)
        size = max(1, min(size, 200))
        items, total = await self.symbols.search(
            q=q if q and q.strip() else None,
            enabled=enabled,
            offset=page * size,
            limit=size,
        )
        return SymbolPage(items=items, total=total, page=page, size=size)

    async def set_enabled(self, symbol_id: int, enabled: bool) -> Symbol:
        row = await self.symbols.get_by_id(symbol_id)
        if row is None:
            raise SymbolNotFoundError(symbol_id)
        row.enabled = enabled
        await self.db.flush()
        logger.info(f"Symbol {row.symbol} {'enabled' if enabled else 'disabled'}")
        return row
