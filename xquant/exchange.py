"""Exchange interface and an in-memory simulated exchange."""

from __future__ import annotations

import itertools
import random
import time as _time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime
from itertools import islice

from xquant.config import Config
from xquant.errors import DataNotFoundError, OrderNotFoundError
from xquant.models import MarketData, Order, OrderId, OrderSide, OrderStatus, OrderType, Trade

QUOTE_ASSET = "USDT"
_DEFAULT_BALANCES = {"BTC": 10.0, "ETH": 100.0, "USDT": 50000.0}
_SEED_CANDLES = 1000
_LIMIT_FILL_RATIO = 0.5
_MINUTE_MS = 60_000


def _now_ms() -> int:
    return int(_time.time() * 1000)


def _millis(value: datetime | int | None) -> int:
    if value is None:
        return _now_ms()
    if isinstance(value, datetime):
        return int(value.timestamp() * 1000)
    return int(value)


class Exchange(ABC):
    """Operations every exchange connector provides."""

    @abstractmethod
    async def submit_order(self, order: Order) -> OrderId:
        """Submit a new order and return its exchange id."""

    @abstractmethod
    async def cancel_order(self, order_id: OrderId) -> None:
        """Cancel an existing order."""

    @abstractmethod
    async def modify_order(self, order_id: OrderId, order: Order) -> OrderId:
        """Replace an existing order and return the new id."""

    @abstractmethod
    async def get_order_status(self, order_id: OrderId) -> OrderStatus:
        """Return the status of an order."""

    @abstractmethod
    async def get_open_orders(self) -> list[Order]:
        """Return every order that can still trade."""

    @abstractmethod
    async def get_recent_trades(self, symbol: str, limit: int | None = None) -> list[Trade]:
        """Return the newest trades for a symbol."""

    @abstractmethod
    async def get_market_data(self, symbol: str) -> MarketData:
        """Return the latest candle for a symbol."""

    @abstractmethod
    async def get_historical_data(self, symbol: str, interval: str, start_time: int,
                                  end_time: int | None = None,
                                  limit: int | None = None) -> list[MarketData]:
        """Return candles between two millisecond timestamps."""

    @abstractmethod
    async def get_balance(self, asset: str) -> float:
        """Return the account balance of an asset."""


@dataclass
class _OrderRecord:
    order: Order
    status: OrderStatus
    filled: float = 0.0


def _crosses(order: Order, close: float) -> bool:
    if order.side is OrderSide.BUY:
        return order.price >= close
    return order.price <= close


class MockExchange(Exchange):
    """Simulated exchange with random seed data, for testing and backtesting."""

    def __init__(self, config: Config | None = None, rng: random.Random | None = None) -> None:
        self.config = config if config is not None else Config()
        self._rng = rng if rng is not None else random.Random()
        initial = self.config.exchange.initial_balance
        self._balances: dict[str, float] = dict(_DEFAULT_BALANCES if initial is None else initial)
        self._orders: dict[OrderId, _OrderRecord] = {}
        self._market_data: dict[str, list[MarketData]] = {}
        self._trades: dict[str, list[Trade]] = {}
        self._trade_log: list[Trade] = []
        self._order_counter = itertools.count(1)
        self._seed_market_data()

    def _seed_market_data(self) -> None:
        now = _now_ms()
        for symbol, start_price, volume_range in (
            ("BTCUSDT", 50000.0, (0.1, 10.0)),
            ("ETHUSDT", 3000.0, (1.0, 20.0)),
        ):
            self._market_data[symbol] = list(self._random_walk(symbol, now, start_price, volume_range))

    def _random_walk(self, symbol, now, price, volume_range):
        volume = 0.0
        for minute in range(_SEED_CANDLES):
            change = self._rng.uniform(-200.0, 200.0) / 100.0
            price = max(min(price * (1.0 + change), 100000.0), 10000.0)
            volume += self._rng.uniform(*volume_range)
            yield MarketData(
                symbol=symbol,
                timestamp=now - minute * _MINUTE_MS,
                open=price * (1.0 - 0.001),
                high=price * (1.0 + 0.002),
                low=price * (1.0 - 0.002),
                close=price,
                volume=volume,
            )

    def _next_order_id(self) -> OrderId:
        return f"mock-{next(self._order_counter)}"

    def _latest(self, symbol: str) -> MarketData:
        series = self._market_data.get(symbol)
        if not series:
            raise DataNotFoundError(f"No market data for {symbol}")
        return series[0]

    def _record_trade(self, order: Order, quantity: float, price: float,
                      timestamp: int | None) -> Trade:
        trade = Trade(
            id=str(uuid.uuid4()),
            symbol=order.symbol,
            price=price,
            quantity=quantity,
            timestamp=timestamp if timestamp is not None else _now_ms(),
            order_id=order.id,
            side=order.side,
            fee=quantity * price * self.config.exchange.fee_rate,
        )
        self._update_balances(trade)
        self._trades.setdefault(trade.symbol, []).append(trade)
        self._trade_log.append(trade)
        return trade

    def _update_balances(self, trade: Trade) -> None:
        base, quote = trade.symbol[:3], trade.symbol[3:]
        direction = 1.0 if trade.side is OrderSide.BUY else -1.0
        self._balances[base] = self._balances.get(base, 0.0) + direction * trade.quantity
        self._balances[quote] = (self._balances.get(quote, 0.0)
                                 - direction * trade.notional - trade.fee)

    def _execute(self, order: Order) -> float:
        """Simulate execution; return the quantity filled."""
        latest = self._latest(order.symbol)
        buying = order.side is OrderSide.BUY
        if order.order_type is OrderType.MARKET:
            slip = self.config.exchange.slippage
            price = latest.close * (1.0 + slip if buying else 1.0 - slip)
            self._record_trade(order, order.quantity, price, None)
            return order.quantity
        if order.order_type is OrderType.LIMIT and _crosses(order, latest.close):
            price = order.price if buying else latest.close
            quantity = order.quantity * _LIMIT_FILL_RATIO
            self._record_trade(order, quantity, price, None)
            return quantity
        return 0.0

    def place_order(self, order: Order) -> OrderId:
        """Submit an order synchronously and return its id."""
        order = replace(order, id=self._next_order_id())
        filled = self._execute(order)
        status = (OrderStatus.FILLED if order.order_type is OrderType.MARKET
                  else OrderStatus.PARTIALLY_FILLED)
        self._orders[order.id] = _OrderRecord(order, status, filled)
        return order.id

    async def submit_order(self, order: Order) -> OrderId:
        return self.place_order(order)

    async def cancel_order(self, order_id: OrderId) -> None:
        record = self._orders.get(order_id)
        if record is None:
            raise OrderNotFoundError(order_id)
        record.status = OrderStatus.CANCELLED

    async def modify_order(self, order_id: OrderId, order: Order) -> OrderId:
        if order_id not in self._orders:
            raise OrderNotFoundError(order_id)
        await self.cancel_order(order_id)
        self._next_order_id()  # the replacement consumes an id before submission
        return await self.submit_order(order)

    async def get_order_status(self, order_id: OrderId) -> OrderStatus:
        record = self._orders.get(order_id)
        if record is None:
            raise OrderNotFoundError(order_id)
        return record.status

    async def get_open_orders(self) -> list[Order]:
        return [record.order for record in self._orders.values() if record.status.is_open]

    async def get_recent_trades(self, symbol: str, limit: int | None = None) -> list[Trade]:
        limit = 100 if limit is None else limit
        trades = sorted(self._trades.get(symbol, []), key=lambda t: t.timestamp, reverse=True)
        return trades[:limit]

    async def get_market_data(self, symbol: str) -> MarketData:
        return self._latest(symbol)

    async def get_historical_data(self, symbol: str, interval: str, start_time: int,
                                  end_time: int | None = None,
                                  limit: int | None = None) -> list[MarketData]:
        end_time = _now_ms() if end_time is None else end_time
        limit = 1000 if limit is None else limit
        series = self._market_data.get(symbol)
        if series is None:
            raise DataNotFoundError(f"No data for {symbol}")
        matching = (d for d in series if start_time <= d.timestamp <= end_time)
        return list(islice(matching, limit))

    async def get_balance(self, asset: str) -> float:
        return self._balances.get(asset, 0.0)

    def set_market_data(self, symbol: str, data: list[MarketData]) -> None:
        """Replace the candles of a symbol; the newest becomes the latest price."""
        self._market_data[symbol] = sorted(data, key=lambda d: d.timestamp, reverse=True)

    def update_market_data(self, data: MarketData) -> None:
        """Make ``data`` the latest candle of its symbol."""
        self._market_data.setdefault(data.symbol, []).insert(0, data)

    def process_pending_orders(self, time: datetime | int | None = None) -> list[Trade]:
        """Fill open limit orders whose price the latest candle has reached."""
        timestamp = _millis(time)
        fills = []
        for record in self._orders.values():
            order = record.order
            if not record.status.is_open or order.order_type is not OrderType.LIMIT:
                continue
            latest = self._latest(order.symbol)
            if not _crosses(order, latest.close):
                continue
            remaining = order.quantity - record.filled
            if remaining > 0.0:
                price = order.price if order.side is OrderSide.BUY else latest.close
                fills.append(self._record_trade(order, remaining, price, timestamp))
            record.filled = order.quantity
            record.status = OrderStatus.FILLED
        return fills

    def get_balances(self) -> dict[str, float]:
        return dict(self._balances)

    def get_trades(self) -> list[Trade]:
        return list(self._trade_log)

    def get_portfolio_value(self) -> float:
        """Value of all balances in the quote asset, at the latest prices."""
        total = 0.0
        for asset, amount in self._balances.items():
            if asset == QUOTE_ASSET:
                total += amount
                continue
            series = self._market_data.get(asset + QUOTE_ASSET)
            if series:
                total += amount * series[0].close
        return total