"""
Unit Tests - Exceptions
Status codes and JSON rendering of domain errors.
"""
import json
import pytest
from unittest.mock import MagicMock

from app.utils.exceptions import (
    EmptyNotificationError,
    ImportInProgressError,
    InsufficientFundsError,
    InsufficientSharesError,
    InvalidCredentialsError,
    InvalidPasscodeError,
    MarketDataUnavailableError,
    RateLimitExceededError,
    RoleNotAssignedError,
    SimulatorError,
    SymbolNotFoundError,
    UserAlreadyExistsError,
    simulator_error_handler,
)


@pytest.mark.parametrize("error,status_code,code", [
    (InvalidCredentialsError(), 401, "INVALID_CREDENTIALS"),
    (InvalidPasscodeError(), 403, "INVALID_PASSCODE"),
    (RoleNotAssignedError("admin"), 403, "ROLE_NOT_ASSIGNED"),
    (UserAlreadyExistsError("alice"), 409, "USER_EXISTS"),
    (InsufficientFundsError("10.00", "5.00"), 400, "INSUFFICIENT_FUNDS"),
    (InsufficientSharesError(5, 2), 400, "INSUFFICIENT_SHARES"),
    (SymbolNotFoundError("ZZZZ"), 404, "SYMBOL_NOT_FOUND"),
    (MarketDataUnavailableError("finnhub"), 503, "MARKET_DATA_UNAVAILABLE"),
    (RateLimitExceededError(), 429, "RATE_LIMIT_EXCEEDED"),
    (ImportInProgressError(), 409, "IMPORT_IN_PROGRESS"),
    (EmptyNotificationError("title"), 400, "EMPTY_NOTIFICATION"),
])
def test_status_and_code(error, status_code, code):
    assert isinstance(error, SimulatorError)
    assert error.status_code == status_code
    assert error.code == code


def test_messages():
    assert str(InsufficientFundsError("10.00", "5.00")) == "Insufficient funds: required $10.00, available $5.00"
    assert str(InsufficientSharesError(5, 2)) == "Insufficient shares: requested 5, held 2"
    assert str(RoleNotAssignedError("admin")) == "Role 'admin' is not assigned to this user"
    assert str(MarketDataUnavailableError("finnhub", "timeout")) == "finnhub: timeout"


@pytest.mark.asyncio
async def test_handler_renders_json():
    request = MagicMock()
    request.method = "POST"
    request.url.path = "/api/v1/trading/buy"

    response = await simulator_error_handler(request, InsufficientFundsError("10.00", "5.00"))

    assert response.status_code == 400
    assert json.loads(response.body) == {
        "error": "Insufficient funds: required $10.00, available $5.00",
        "code": "INSUFFICIENT_FUNDS",
    }


@pytest.mark.asyncio
async def test_handler_server_errors():
    request = MagicMock()
    request.method = "GET"
    request.url.path = "/api/v1/prices/quote/AAPL"

    response = await simulator_error_handler(request, MarketDataUnavailableError("rapidapi"))

    assert response.status_code == 503
    assert json.loads(response.body)["code"] == "MARKET_DATA_UNAVAILABLE"
