"""Trailing stop orders that follow the market by a percentage."""

from __future__ import annotations

import asyncio
import contextlib
import math
from typing import NamedTuple

from xquant.errors import AlreadyRunningError, InvalidParameterError, TradingError
from xquant.exchange import Exchange
from xquant.models import Order, OrderId, OrderSide, OrderType


class TrailingStopStatus(NamedTuple):
    active: bool
    executed: bool
    trigger_price: float
    quantity: float


class TrailingStopManager:
    """Fires a market order once the price retraces ``trailing_delta`` percent."""

    def __init__(self, exchange: Exchange, symbol: str, side: OrderSide, quantity: float,
                 trailing_delta: float, activation_price: float | None = None, *,
                 poll_interval: float = 0.5) -> None:
        self.exchange = exchange
        self.symbol = symbol
        self.side = side
        self.quantity = quantity
        self.trailing_delta = trailing_delta
        self.activation_price = activation_price
        self.poll_interval = poll_interval
        self.highest_price = 0.0
        self.lowest_price = math.inf
        self.stop_order_id: OrderId | None = None
        self._executed = False
        self._active = False
        self._activated = False
        self._monitor_task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        """Read the current price and start monitoring."""
        if self._active:
            raise AlreadyRunningError("Trailing stop already running")
        self._active = True
        self._executed = False
        try:
            market_data = await self.exchange.get_market_data(self.symbol)
        except TradingError:
            self._active = False
            raise
        self.highest_price = market_data.close
        self.lowest_price = market_data.close
        self._activated = self.activation_price is None
        self._monitor_task = asyncio.create_task(self._monitor())

    async def stop(self) -> None:
        """Stop monitoring; cancel the stop order if it was placed but not executed."""
        if not self._active:
            return
        self._active = False
        task, self._monitor_task = self._monitor_task, None
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if self.stop_order_id is not None and not self._executed:
            with contextlib.suppress(TradingError):
                await self.exchange.cancel_order(self.stop_order_id)

    def _trigger_price(self) -> float:
        if self.side is OrderSide.BUY:
            return self.highest_price - self.highest_price * (self.trailing_delta / 100.0)
        return self.lowest_price + self.lowest_price * (self.trailing_delta / 100.0)

    def status(self) -> TrailingStopStatus:
        return TrailingStopStatus(self._active, self._executed, self._trigger_price(),
                                  self.quantity)

    async def update_delta(self, new_delta: float) -> None:
        if new_delta <= 0.0:
            raise InvalidParameterError("Trailing delta must be positive")
        self.trailing_delta = new_delta

    def _reached_activation(self, price: float) -> bool:
        if self.activation_price is None:
            return True
        if self.side is OrderSide.BUY:
            return price <= self.activation_price
        return price >= self.activation_price

    async def _check(self) -> None:
        try:
            market_data = await self.exchange.get_market_data(self.symbol)
        except TradingError:
            return
        price = market_data.close
        if not self._activated:
            if not self._reached_activation(price):
                return
            self._activated = True
        self.highest_price = max(self.highest_price, price)
        self.lowest_price = min(self.lowest_price, price)
        stop_price = self._trigger_price()
        if self.side is OrderSide.BUY:
            triggered = price <= stop_price
        else:
            triggered = price >= stop_price
        if not triggered or self._executed:
            return
        order = Order(self.symbol, self.side, OrderType.MARKET, self.quantity, price)
        try:
            order_id = await self.exchange.submit_order(order)
        except TradingError:
            return
        self.stop_order_id = order_id
        self._executed = True
        self._active = False

    async def _monitor(self) -> None:
        while self._active:
            await self._check()
            if not self._active:
                break
            await asyncio.sleep(self.poll_interval)