"""
Trading Simulator - Database Models
"""
from app.db.models.user import User, Role
from app.db.models.wallet import Wallet
from app.db.models.symbol import Symbol
from app.db.models.position import Position
from app.db.models.transaction import Transaction, TransactionType
from app.db.models.auth import RefreshToken, Passcode
from app.db.models.notification import Notification

__all__ = [
    "User",
    "Role",
    "Wallet",
    "Symbol",
    "Position",
    "Transaction",
    "TransactionType",
    "RefreshToken",
    "Passcode",
    "Notification",
]
