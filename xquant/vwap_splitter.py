"""Volume-weighted order splitting driven by yesterday's volume profile."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence

from xquant.errors import AlreadyRunningError, TradingError
from xquant.exchange import Exchange
from xquant.models import MarketData, Order, OrderId, OrderSide, OrderType
from xquant.twap_splitter import ExecutionStatus

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[object]]

NUM_SLICES = 10
_DAY_MS = 24 * 60 * 60 * 1000


def _volume_profile(data: Sequence[MarketData]) -> list[float]:
    """Share of total volume in each of ``NUM_SLICES`` consecutive buckets."""
    uniform = [1.0 / NUM_SLICES] * NUM_SLICES
    if not data:
        return uniform
    total_volume = sum(candle.volume for candle in data)
    if total_volume == 0.0:
        return uniform
    width = len(data) // NUM_SLICES
    profile = []
    for bucket in range(NUM_SLICES):
        start = bucket * width
        end = min((bucket + 1) * width, len(data))
        profile.append(sum(candle.volume for candle in data[start:end]) / total_volume)
    return profile


class VwapSplitter:
    """Splits a parent order into market orders sized by historical volume."""

    def __init__(self, exchange: Exchange, symbol: str, side: OrderSide, total_quantity: float,
                 execution_interval: int, target_percentage: float | None = None, *,
                 sleep: Sleep = asyncio.sleep) -> None:
        self.exchange = exchange
        self.symbol = symbol
        self.side = side
        self.total_quantity = total_quantity
        self.execution_interval = execution_interval
        self.target_percentage = target_percentage
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
            raise AlreadyRunningError("VWAP execution already running")
        self._active = True
        self._executed = 0.0
        self._child_orders.clear()
        try:
            now = int(time.time() * 1000)
            history = await self._historical_data(now)
            profile = _volume_profile(history)
            pause = (self.execution_interval // NUM_SLICES) / 1000.0
            remaining = self.total_quantity
            for index, ratio in enumerate(profile):
                if index:
                    await self._sleep(pause)
                if not self._active:
                    break
                last = index == NUM_SLICES - 1
                quantity = remaining if last else min(self.total_quantity * ratio, remaining)
                if quantity > 0.0:
                    try:
                        order_id = await self._create_child_order(quantity)
                    except TradingError as exc:
                        logger.error("Failed to create VWAP child order: %s", exc)
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

    async def _historical_data(self, now: int) -> list[MarketData]:
        start_time = now - _DAY_MS
        end_time = start_time + self.execution_interval
        return await self.exchange.get_historical_data(self.symbol, "1m", start_time, end_time, None)

    async def _create_child_order(self, quantity: float) -> OrderId:
        market_data = await self.exchange.get_market_data(self.symbol)
        order = Order(self.symbol, self.side, OrderType.MARKET, quantity, market_data.close)
        return await self.exchange.submit_order(order)