"""
Trading Simulator - Data Repositories

Repository pattern implementations for database operations.
"""
from app.db.repositories.user import UserRepository
from app.db.repositories.wallet import WalletRepository
from app.db.repositories.symbol import SymbolRepository
from app.db.repositories.position import PositionRepository
from app.db.repositories.transaction import TransactionRepository

__all__ = [
    "UserRepository",
    "WalletRepository",
    "SymbolRepository",
    "PositionRepository",
    "TransactionRepository",
]
