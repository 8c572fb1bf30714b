"""
Trading Simulator - Wallet Repository
"""
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.wallet import Wallet


class WalletRepository:
    """Database operations for wallets."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_user(self, user_id: int, for_update: bool = False) -> Optional[Wallet]:
        """
        Get a user's wallet.

        Args:
            user_id: Owner id
            for_update: Lock the row until the transaction ends and
                refresh any copy already in the session

        Returns:
            Wallet or None
        """
        query = select(Wallet).where(Wallet.user_id == user_id)
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def create(self, user_id: int, cash_balance: Decimal) -> Wallet:
        wallet = Wallet(user_id=user_id, cash_balance=cash_balance)
        self.db.add(wallet)
        await self.db.flush()
        await self.db.refresh(wallet)
        return wallet

    async def set_balance(self, wallet: Wallet, cash_balance: Decimal) -> Wallet:
        wallet.cash_balance = cash_balance
        await self.db.flush()
        return wallet
