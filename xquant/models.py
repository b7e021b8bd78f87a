"""Core trading data types: orders, trades, market data and positions."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

OrderId = str


class OrderSide(Enum):
    BUY = "buy"
    SELL = "sell"


class OrderType(Enum):
    MARKET = "market"
    LIMIT = "limit"


class OrderStatus(Enum):
    NEW = "new"
    PARTIALLY_FILLED = "partially_filled"
    FILLED = "filled"
    CANCELLED = "cancelled"
    REJECTED = "rejected"
    EXPIRED = "expired"

    @property
    def is_open(self) -> bool:
        """Whether an order in this state can still trade."""
        return self in (OrderStatus.NEW, OrderStatus.PARTIALLY_FILLED)


def _new_id() -> OrderId:
    return str(uuid.uuid4())


@dataclass
class Order:
    symbol: str
    side: OrderSide
    order_type: OrderType
    quantity: float
    price: float
    id: OrderId = field(default_factory=_new_id)


@dataclass
class Trade:
    id: str
    symbol: str
    price: float
    quantity: float
    timestamp: int
    order_id: OrderId
    side: OrderSide
    fee: float = 0.0
    realized_pnl: float = 0.0

    @property
    def notional(self) -> float:
        """Traded value in the quote asset."""
        return self.price * self.quantity


@dataclass(frozen=True)
class MarketData:
    symbol: str
    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float

    @property
    def close_price(self) -> float:
        return self.close

    @property
    def time(self) -> datetime:
        """The candle's timestamp (milliseconds since the epoch) as a UTC datetime."""
        return datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc)


@dataclass
class Position:
    symbol: str
    quantity: float = 0.0
    entry_price: float = 0.0
    current_price: float = 0.0
    unrealized_pnl: float = 0.0