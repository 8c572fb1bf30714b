"""
Wallet Service

Cash balance management. Trade settlement goes through TradingService;
this service covers wallet creation, lookups and manual adjustments.
"""
from decimal import Decimal
from typing import Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.trading.accounting import to_money
from app.db.models.wallet import Wallet
from app.db.repositories.wallet import WalletRepository
from app.utils.exceptions import InvalidOrderError, WalletNotFoundError


class WalletService:
    """Service for wallet operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.wallets = WalletRepository(db)

    async def create_wallet(self, user_id: int, initial_balance: Optional[Decimal] = None) -> Wallet:
        """Create a wallet seeded with INITIAL_WALLET_BALANCE unless given."""
        balance = to_money(initial_balance if initial_balance is not None else settings.INITIAL_WALLET_BALANCE)
        wallet = await self.wallets.create(user_id, balance)
        logger.info(f"Created wallet for user {user_id} with ${balance}")
        return wallet

    async def get_wallet(self, user_id: int, for_update: bool = False) -> Wallet:
        wallet = await self.wallets.get_by_user(user_id, for_update=for_update)
        if wallet is None:
            raise WalletNotFoundError(user_id)
        return wallet

    async def get_balance(self, user_id: int) -> Decimal:
        wallet = await self.get_wallet(user_id)
        return Decimal(wallet.cash_balance)

    async def add_cash(self, user_id: int, amount: Decimal, reason: str = "deposit") -> Wallet:
        """
        Credit cash to a wallet.

        Args:
            user_id: Wallet owner
            amount: Positive amount
            reason: Free text, logged

        Raises:
            InvalidOrderError: amount is not positive
        """
        amount = to_money(amount)
        if amount <= 0:
            raise InvalidOrderError("Amount must be positive")

        wallet = await self.get_wallet(user_id, for_update=True)
        new_balance = Decimal(wallet.cash_balance) + amount
        await self.wallets.set_balance(wallet, new_balance)
        logger.info(f"Added ${amount} to wallet of user {user_id} ({reason}); balance ${new_balance}")
        return wallet

    async def set_balance(self, user_id: int, amount: Decimal) -> Wallet:
        """Overwrite the balance (admin adjustment)."""
        amount = to_money(amount)
        if amount < 0:
            raise InvalidOrderError("Balance cannot be negative")

        wallet = await self.get_wallet(user_id, for_update=True)
        await self.wallets.set_balance(wallet, amount)
        logger.info(f"Wallet of user {user_id} set to ${amount}")
        return wallet
