"""Time-weighted order splitting: equal child orders at equal intervals."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import NamedTuple

from xquant.errors import AlreadyRunningError, InvalidParameterError, TradingError
from xquant.exchange import Exchange
from xquant.models import Order, OrderId, OrderSide, OrderType

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[object]]


class ExecutionStatus(NamedTuple):
    active: bool
    executed_quantity: float
    total_quantity: float


class TwapSplitter:
    """Splits a parent order into ``num_slices`` market orders over ``execution_interval`` ms."""

    def __init__(self, exchange: Exchange, symbol: str, side: OrderSide, total_quantity: float,
                 execution_interval: int, num_slices: int, *, sleep: Sleep = asyncio.sleep) -> None:
        if num_slices <= 0:
            raise InvalidParameterError("num_slices must be positive")
        self.exchange = exchange
        self.symbol = symbol
        self.side = side
        self.total_quantity = total_quantity
        self.execution_interval = execution_interval
        self.num_slices = num_slices
        self._sleep = sleep
        self._executed = 0.0
        self._active = False
        self._child_orders: list[OrderId] = []

    @property
    def child_orders(self) -> list[OrderId]:
        return list(self._child_orders)

    async def start(self) -> None:
        """Run the schedule to completion, or until stopped."""
        if self._active:
            raise AlreadyRunningError("TWAP execution already running")
        self._active = True
        self._executed = 0.0
        self._child_orders.clear()

        slice_quantity = self.total_quantity / self.num_slices
        pause = (self.execution_interval // self.num_slices) / 1000.0
        remaining = self.total_quantity
        try:
            for index in range(self.num_slices):
                if index:
                    await self._sleep(pause)
                if not self._active:
                    break
                last = index == self.num_slices - 1
                quantity = remaining if last else min(slice_quantity, remaining)
                if quantity > 0.0:
                    try:
                        order_id = await self._create_child_order(quantity)
                    except TradingError as exc:
                        logger.error("Failed to create TWAP child order: %s", exc)
                    else:
                        self._child_orders.append(order_id)
                        remaining -= quantity
                        self._executed += quantity
                if remaining <= 0.0:
                    break
        finally:
            self._active = False

    async def stop(self) -> None:
        """Stop scheduling and cancel child orders that are still open."""
        if not self._active:
            return
        self._active = False
        for order_id in self._child_orders:
            status = await self.exchange.get_order_status(order_id)
            if status.is_open:
                try:
                    await self.exchange.cancel_order(order_id)
                except TradingError:
                    pass

    def status(self) -> ExecutionStatus:
        return ExecutionStatus(self._active, self._executed, self.total_quantity)

    async def _create_child_order(self, quantity: float) -> OrderId:
        market_data = await self.exchange.get_market_data(self.symbol)
        order = Order(self.symbol, self.side, OrderType.MARKET, quantity, market_data.close)
        return await self.exchange.submit_order(order)