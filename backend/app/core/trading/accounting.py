"""
Trading Simulator - Order Settlement & Position Accounting

Pure arithmetic for settling a market order against a wallet balance and
an existing position using average-cost accounting:

- BUY blends the purchase into the average cost basis and debits cash.
- SELL credits cash and keeps the average cost; a fully closed position
  resets to zero shares and zero cost.

Nothing here touches the database. TradingService loads state, calls
settle_trade, and persists the outcome.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from app.db.models.transaction import TransactionType
from app.utils.exceptions import (
    InsufficientFundsError,
    InsufficientSharesError,
    InvalidOrderError,
)


CENT = Decimal("0.01")
COST_PRECISION = Decimal("0.0001")


def to_money(value: Union[Decimal, int, float, str]) -> Decimal:
    """Round to cents, half-up."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def to_cost(value: Union[Decimal, int, float, str]) -> Decimal:
    """Round to the 4-decimal precision used for prices and cost basis."""
    return Decimal(str(value)).quantize(COST_PRECISION, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PositionState:
    """Shares held and their average cost. Zero/zero means no position."""
    quantity: int = 0
    average_cost: Decimal = Decimal("0")

    @property
    def is_open(self) -> bool:
        return self.quantity > 0

    @property
    def cost_basis(self) -> Decimal:
        return self.average_cost * self.quantity


EMPTY_POSITION = PositionState()


@dataclass(frozen=True)
class TradeOutcome:
    """Result of settling one order."""
    side: TransactionType
    quantity: int
    price: Decimal
    total: Decimal
    wallet_balance: Decimal
    position: PositionState
    realized_pnl: Decimal = Decimal("0")

    @property
    def closed(self) -> bool:
        """True when a sell took the position to zero."""
        return self.side == TransactionType.SELL and not self.position.is_open


def _validate(quantity: int, price: Decimal) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidOrderError("Quantity must be a whole number of shares")
    if quantity <= 0:
        raise InvalidOrderError("Quantity must be positive")
    if price is None or price <= 0:
        raise InvalidOrderError("Price must be positive")


def settle_buy(wallet_balance: Decimal, position: PositionState, quantity: int, price: Decimal) -> TradeOutcome:
    """
    Settle a BUY.

    total   = to_money(qty * price)
    new_avg = (old_qty * old_avg + total) / (old_qty + qty)

    The cost basis grows by exactly the cents debited from the wallet.

    Raises:
        InsufficientFundsError: cost exceeds the wallet balance
    """
    _validate(quantity, price)
    price = Decimal(price)
    total = to_money(price * quantity)

    if total > wallet_balance:
        raise InsufficientFundsError(required=total, available=wallet_balance)

    new_quantity = position.quantity + quantity
    new_average = to_cost((position.cost_basis + total) / new_quantity)

    return TradeOutcome(
        side=TransactionType.BUY,
        quantity=quantity,
        price=price,
        total=total,
        wallet_balance=wallet_balance - total,
        position=PositionState(quantity=new_quantity, average_cost=new_average),
    )


def settle_sell(wallet_balance: Decimal, position: PositionState, quantity: int, price: Decimal) -> TradeOutcome:
    """
    Settle a SELL. Average cost is unchanged unless the position closes.

    Raises:
        InsufficientSharesError: more shares requested than held
    """
    _validate(quantity, price)
    price = Decimal(price)

    if quantity > position.quantity:
        raise InsufficientSharesError(requested=quantity, held=position.quantity)

    total = to_money(price * quantity)
    remaining = position.quantity - quantity
    realized = to_money((price - position.average_cost) * quantity)

    if remaining == 0:
        new_position = EMPTY_POSITION
    else:
        new_position = PositionState(quantity=remaining, average_cost=position.average_cost)

    return TradeOutcome(
        side=TransactionType.SELL,
        quantity=quantity,
        price=price,
        total=total,
        wallet_balance=wallet_balance + total,
        position=new_position,
        realized_pnl=realized,
    )


def settle_trade(
    wallet_balance: Decimal,
    position: PositionState,
    side: TransactionType,
    quantity: int,
    price: Decimal,
) -> TradeOutcome:
    """
    Settle a market order at the given execution price.

    Args:
        wallet_balance: Cash available before the trade
        position: Current position (EMPTY_POSITION when none is held)
        side: BUY or SELL
        quantity: Whole number of shares, > 0
        price: Execution price per share, > 0

    Returns:
        TradeOutcome with the new balance and position
    """
    side = TransactionType(side)
    if side == TransactionType.BUY:
        return settle_buy(wallet_balance, position, quantity, price)
    return settle_sell(wallet_balance, position, quantity, price)
