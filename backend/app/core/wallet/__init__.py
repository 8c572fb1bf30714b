"""
Wallet Module

Per-user cash balances.
"""
from app.core.wallet.service import WalletService

__all__ = ["WalletService"]
