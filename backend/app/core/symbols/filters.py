"""
Symbol Universe Filters

Rules deciding which provider symbol records become tradable:
USD common stock on an allowed exchange, no SPAC-style names, no
warrants, units, share-class suffixes or numeric tickers.
"""
import re
from typing import Any, Optional


NDX_MICS = frozenset({"XNAS"})
US_MAJOR_MICS = frozenset({"XNAS", "XNYS"})

EXCLUDED_DESCRIPTION_MARKERS = (
    "ACQUISITION",
    "SPAC",
    "SPECIAL PURPOSE",
    "-A",
    "CORP-A",
    "INC-A",
)

_DIGIT = re.compile(r"\d")


def normalize_symbol(value: Optional[str]) -> str:
    return (value or "").strip().upper()


def allowed_mics_for(universe: Optional[str]) -> frozenset:
    """NDX trades on Nasdaq only; GSPC, blank and anything else allow Nasdaq and NYSE."""
    if universe and universe.strip().upper() == "NDX":
        return NDX_MICS
    return US_MAJOR_MICS


def is_valid_record(item: dict[str, Any]) -> bool:
    """Field-level checks on a provider record, independent of universe."""
    symbol = item.get("symbol")
    description = item.get("description")
    if not (symbol and str(symbol).strip()) or not (description and str(description).strip()):
        return False

    kind = item.get("type")
    if kind is not None and str(kind).lower() != "common stock":
        return False

    currency = item.get("currency")
    if currency is not None and str(currency).upper() != "USD":
        return False

    desc = str(description).upper()
    if any(marker in desc for marker in EXCLUDED_DESCRIPTION_MARKERS):
        return False

    symbol = str(symbol).strip().upper()
    if _DIGIT.search(symbol):
        return False
    # Warrants and units
    if symbol.endswith("W") or symbol.endswith("U") or "." in symbol:
        return False
    if len(symbol) < 2:
        return False

    return True


def is_allowed_exchange(item: dict[str, Any], allowed_mics: frozenset) -> bool:
    """A record with no MIC is allowed."""
    mic = item.get("mic")
    if not mic:
        return True
    return not allowed_mics or mic in allowed_mics


def is_eligible(item: dict[str, Any], universe: Optional[str] = None) -> bool:
    return is_valid_record(item) and is_allowed_exchange(item, allowed_mics_for(universe))
