"""
Trading Simulator - Dependencies
Dependency injection for FastAPI endpoints
"""
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.auth import AuthService
from app.core.notifications import NotificationService
from app.core.portfolio import PortfolioService
from app.core.security import get_token_claims
from app.core.symbols import SymbolService
from app.core.trading.service import TradingService
from app.core.users import UserService
from app.core.wallet import WalletService
from app.data_providers import finnhub_adapter, rapidapi_adapter
from app.db.database import get_db
from app.db.models.user import Role, User
from app.db.redis_client import redis_client
from app.db.repositories.user import UserRepository
from app.services.chart_service import ChartService
from app.services.price_service import PriceService
from app.services.stream_service import FinnhubStreamService, stream_service


# OAuth2 scheme for token authentication
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/auth/login"
)


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def resolve_user(db: AsyncSession, token: Optional[str]) -> Optional[tuple[User, Role]]:
    """
    Look up the user behind an access token.

    Returns:
        (user, role the token was issued for), or None if the token is
        invalid or the user is gone
    """
    claims = get_token_claims(token or "", token_type="access")
    if claims is None:
        return None
    try:
        user_id = int(claims["sub"])
        role = Role.parse(claims.get("role") or Role.USER.value)
    except (ValueError, TypeError):
        return None

    user = await UserRepository(db).get_by_id(user_id)
    if user is None:
        return None
    return user, role


async def get_token_role(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> tuple[User, Role]:
    resolved = await resolve_user(db, token)
    if resolved is None:
        raise _credentials_exception()
    return resolved


async def get_current_user(
    resolved: tuple[User, Role] = Depends(get_token_role),
) -> User:
    """
    Get current authenticated user from JWT token.

    Raises:
        HTTPException: If token is invalid or user not found
    """
    return resolved[0]


async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Get current active user.

    Raises:
        HTTPException: If user is inactive
    """
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )
    return current_user


async def get_current_admin(
    resolved: tuple[User, Role] = Depends(get_token_role),
) -> User:
    """
    Current user, who must have logged in as admin.

    Raises:
        HTTPException: 403 if the token was not issued for the admin role
    """
    user, role = resolved
    if not user.is_active or role != Role.ADMIN or not user.has_role(Role.ADMIN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="The user doesn't have enough privileges"
        )
    return user


# =========================
# Service factories
# =========================

def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_wallet_service(db: AsyncSession = Depends(get_db)) -> WalletService:
    return WalletService(db)


def get_price_service(db: AsyncSession = Depends(get_db)) -> PriceService:
    return PriceService(db, rapidapi_adapter, finnhub_adapter, redis_client)


def get_portfolio_service(
    db: AsyncSession = Depends(get_db),
    prices: PriceService = Depends(get_price_service),
) -> PortfolioService:
    return PortfolioService(db, prices)


def get_trading_service(
    db: AsyncSession = Depends(get_db),
    prices: PriceService = Depends(get_price_service),
) -> TradingService:
    return TradingService(db, prices)


def get_symbol_service(db: AsyncSession = Depends(get_db)) -> SymbolService:
    return SymbolService(db, finnhub_adapter)


def get_notification_service(db: AsyncSession = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_chart_service(db: AsyncSession = Depends(get_db)) -> ChartService:
    return ChartService(db, rapidapi_adapter)


def get_stream_service() -> FinnhubStreamService:
    return stream_service


__all__ = [
    "get_db",
    "oauth2_scheme",
    "resolve_user",
    "get_current_user",
    "get_current_active_user",
    "get_current_admin",
]
