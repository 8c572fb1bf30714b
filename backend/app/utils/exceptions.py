"""
Trading Simulator - Custom Exceptions
Domain exceptions carrying their HTTP status, plus the FastAPI handler
that renders them.
"""
from typing import Optional, Any, Dict
from fastapi import Request, status
from fastapi.responses import JSONResponse
from loguru import logger


class SimulatorError(Exception):
    """Base exception for the trading simulator."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_code: str = "SIMULATOR_ERROR"

    def __init__(
        self,
        message: str = "An error occurred",
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)


# =========================
# Authentication Exceptions
# =========================

class AuthenticationError(SimulatorError):
    """Authentication related errors."""
    status_code = status.HTTP_401_UNAUTHORIZED


class InvalidCredentialsError(AuthenticationError):
    default_code = "INVALID_CREDENTIALS"

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message=message)


class InvalidRefreshTokenError(AuthenticationError):
    default_code = "INVALID_REFRESH_TOKEN"

    def __init__(self, message: str = "Invalid or expired refresh token"):
        super().__init__(message=message)


class InvalidPasscodeError(AuthenticationError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "INVALID_PASSCODE"

    def __init__(self, message: str = "Invalid registration passcode"):
        super().__init__(message=message)


class RoleNotAssignedError(AuthenticationError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "ROLE_NOT_ASSIGNED"

    def __init__(self, role: str = ""):
        super().__init__(message=f"Role '{role}' is not assigned to this user")


# =========================
# User Exceptions
# =========================

class UserError(SimulatorError):
    """User related errors."""
    pass


class UserNotFoundError(UserError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "USER_NOT_FOUND"

    def __init__(self, identifier: Any = None):
        message = f"User '{identifier}' not found" if identifier is not None else "User not found"
        super().__init__(message=message)


class UserAlreadyExistsError(UserError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "USER_EXISTS"

    def __init__(self, username: str = ""):
        super().__init__(message=f"Username '{username}' is already taken")


class EmailAlreadyExistsError(UserError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "EMAIL_EXISTS"

    def __init__(self, email: str = ""):
        super().__init__(message=f"Email '{email}' is already registered")


class WeakPasswordError(UserError):
    default_code = "WEAK_PASSWORD"

    def __init__(
        self,
        message: str = "Password must be 8-128 characters and contain at least one letter and one digit",
    ):
        super().__init__(message=message)


# =========================
# Wallet Exceptions
# =========================

class WalletError(SimulatorError):
    """Wallet related errors."""
    pass


class WalletNotFoundError(WalletError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "WALLET_NOT_FOUND"

    def __init__(self, user_id: Any = None):
        super().__init__(message=f"Wallet not found for user {user_id}")


class InsufficientFundsError(WalletError):
    default_code = "INSUFFICIENT_FUNDS"

    def __init__(self, required: Any = None, available: Any = None):
        if required is not None and available is not None:
            message = f"Insufficient funds: required ${required}, available ${available}"
        else:
            message = "Insufficient funds"
        super().__init__(
            message=message,
            details={"required": str(required), "available": str(available)},
        )


# =========================
# Trading Exceptions
# =========================

class TradingError(SimulatorError):
    """Trading related errors."""
    pass


class InvalidOrderError(TradingError):
    default_code = "INVALID_ORDER"

    def __init__(self, message: str = "Invalid order"):
        super().__init__(message=message)


class PositionNotFoundError(TradingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "POSITION_NOT_FOUND"

    def __init__(self, symbol: str = ""):
        super().__init__(message=f"No position held in {symbol}" if symbol else "Position not found")


class InsufficientSharesError(TradingError):
    default_code = "INSUFFICIENT_SHARES"

    def __init__(self, requested: Any = None, held: Any = None):
        if requested is not None and held is not None:
            message = f"Insufficient shares: requested {requested}, held {held}"
        else:
            message = "Insufficient shares"
        super().__init__(message=message)


# =========================
# Market Data Exceptions
# =========================

class MarketDataError(SimulatorError):
    """Market data related errors."""
    pass


class SymbolNotFoundError(MarketDataError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "SYMBOL_NOT_FOUND"

    def __init__(self, symbol: Any = ""):
        message = f"Symbol '{symbol}' not found" if symbol else "Symbol not found"
        super().__init__(message=message)


class PriceUnavailableError(MarketDataError):
    default_code = "PRICE_UNAVAILABLE"

    def __init__(self, symbol: str = ""):
        super().__init__(message=f"Current price unavailable for {symbol}")


class MarketDataUnavailableError(MarketDataError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_code = "MARKET_DATA_UNAVAILABLE"

    def __init__(self, provider: str = "", message: str = "Market data unavailable"):
        super().__init__(message=f"{provider}: {message}" if provider else message)


class RateLimitExceededError(MarketDataError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_code = "RATE_LIMIT_EXCEEDED"

    def __init__(self, message: str = "Rate limit exceeded"):
        super().__init__(message=message)


class ImportInProgressError(MarketDataError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "IMPORT_IN_PROGRESS"

    def __init__(self, message: str = "A symbol import is already running"):
        super().__init__(message=message)


# =========================
# Notification Exceptions
# =========================

class NotificationNotFoundError(SimulatorError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOTIFICATION_NOT_FOUND"

    def __init__(self, notification_id: Any = None):
        super().__init__(message=f"Notification {notification_id} not found")


class EmptyNotificationError(SimulatorError):
    default_code = "EMPTY_NOTIFICATION"

    def __init__(self, field: str = "body"):
        super().__init__(message=f"Notification {field} must not be blank")


# =========================
# Exception Handler
# =========================

async def simulator_error_handler(request: Request, exc: SimulatorError) -> JSONResponse:
    """Render a SimulatorError as {"error", "code"} with its status."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({exc.code}): {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "code": exc.code},
    )

