"""
Trading Simulator - Wallet Endpoints
"""
from fastapi import APIRouter, Depends

from app.core.wallet import WalletService
from app.dependencies import get_current_active_user, get_current_admin, get_wallet_service
from app.db.models.user import User
from app.schemas.wallet import BalanceUpdate, DepositRequest, WalletResponse

router = APIRouter()


@router.get("/", response_model=WalletResponse)
async def get_wallet(
    current_user: User = Depends(get_current_active_user),
    wallets: WalletService = Depends(get_wallet_service),
):
    return WalletResponse.model_validate(await wallets.get_wallet(current_user.id))


@router.post("/deposit", response_model=WalletResponse)
async def deposit(
    data: DepositRequest,
    current_user: User = Depends(get_current_active_user),
    wallets: WalletService = Depends(get_wallet_service),
):
    wallet = await wallets.add_cash(current_user.id, data.amount, data.reason)
    return WalletResponse.model_validate(wallet)


@router.put("/{user_id}", response_model=WalletResponse)
async def set_wallet_balance(
    user_id: int,
    data: BalanceUpdate,
    admin: User = Depends(get_current_admin),
    wallets: WalletService = Depends(get_wallet_service),
):
    """Overwrite a user's cash balance."""
    wallet = await wallets.set_balance(user_id, data.cash_balance)
    return WalletResponse.model_validate(wallet)
