"""
Symbol Universe Module
"""
from app.core.symbols.filters import allowed_mics_for, is_eligible, normalize_symbol
from app.core.symbols.service import SymbolService, ImportSummary, ImportStatus, SymbolPage

__all__ = [
    "allowed_mics_for",
    "is_eligible",
    "normalize_symbol",
    "SymbolService",
    "ImportSummary",
    "ImportStatus",
    "SymbolPage",
]
