"""
Trading Simulator - Pydantic Schemas
"""
from app.schemas.user import (
    Token,
    RefreshTokenRequest,
    RegisterRequest,
    RegisterResponse,
    LoginRequest,
    UserUpdate,
    User,
    Message,
    ErrorResponse,
)
from app.schemas.trading import TradeRequest, TradeResponse, TransactionResponse, TransactionHistoryResponse
from app.schemas.portfolio import (
    HoldingResponse,
    WalletTotalsResponse,
    PortfolioResponse,
    HoldingValuationResponse,
    PortfolioSummaryResponse,
)
from app.schemas.wallet import WalletResponse, DepositRequest, BalanceUpdate
from app.schemas.symbol import (
    SymbolResponse,
    SymbolPageResponse,
    SymbolEnabledUpdate,
    ImportSummaryResponse,
    ImportStatusResponse,
)
from app.schemas.market import QuoteResponse
from app.schemas.notification import (
    NotificationCreate,
    RoleNotificationCreate,
    NotificationResponse,
    BroadcastResult,
)
