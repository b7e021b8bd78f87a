"""Iceberg orders: show only a slice of a large limit order at a time."""

from __future__ import annotations

import asyncio
import contextlib

from xquant.errors import AlreadyRunningError, TradingError
from xquant.exchange import Exchange
from xquant.models import Order, OrderId, OrderSide, OrderStatus, OrderType
from xquant.twap_splitter import ExecutionStatus

_DEAD = (OrderStatus.CANCELLED, OrderStatus.REJECTED, OrderStatus.EXPIRED)


class IcebergManager:
    """Keeps one visible limit order on the book until the total quantity is filled."""

    def __init__(self, exchange: Exchange, symbol: str, side: OrderSide, total_quantity: float,
                 limit_price: float, display_quantity: float, *,
                 poll_interval: float = 1.0) -> None:
        self.exchange = exchange
        self.symbol = symbol
        self.side = side
        self.total_quantity = total_quantity
        self.display_quantity = min(display_quantity, total_quantity)
        self.poll_interval = poll_interval
        self._limit_price = limit_price
        self._executed = 0.0
        self._active = False
        self._current_order_id: OrderId | None = None
        self._current_quantity = 0.0
        self._lock = asyncio.Lock()
        self._monitor_task: asyncio.Task[None] | None = None

    @property
    def current_order_id(self) -> OrderId | None:
        return self._current_order_id

    @property
    def limit_price(self) -> float:
        return self._limit_price

    async def start(self) -> None:
        """Place the first visible slice and start watching it."""
        if self._active:
            raise AlreadyRunningError("Iceberg execution already running")
        self._active = True
        self._executed = 0.0
        self._current_order_id = None
        try:
            await self._submit_visible_portion()
        except TradingError:
            self._active = False
            raise
        if self._active:
            self._monitor_task = asyncio.create_task(self._monitor())

    async def stop(self) -> None:
        """Stop watching and cancel the visible order."""
        if not self._active:
            return
        self._active = False
        await self._stop_monitor()
        if self._current_order_id is not None:
            with contextlib.suppress(TradingError):
                await self.exchange.cancel_order(self._current_order_id)

    def status(self) -> ExecutionStatus:
        return ExecutionStatus(self._active, self._executed, self.total_quantity)

    async def update_price(self, new_price: float) -> None:
        """Change the limit price; an active iceberg replaces its visible order."""
        async with self._lock:
            self._limit_price = new_price
            if not self._active:
                return
            if self._current_order_id is not None:
                with contextlib.suppress(TradingError):
                    await self.exchange.cancel_order(self._current_order_id)
            await self._submit_visible_portion()

    async def _submit_visible_portion(self) -> None:
        remaining = self.total_quantity - self._executed
        if remaining <= 0.0:
            self._active = False
            return
        quantity = min(self.display_quantity, remaining)
        order = Order(self.symbol, self.side, OrderType.LIMIT, quantity, self._limit_price)
        self._current_order_id = await self.exchange.submit_order(order)
        self._current_quantity = quantity

    async def _resubmit(self) -> None:
        with contextlib.suppress(TradingError):
            await self._submit_visible_portion()

    async def _check(self) -> None:
        async with self._lock:
            if self._current_order_id is None:
                return
            try:
                status = await self.exchange.get_order_status(self._current_order_id)
            except TradingError:
                return
            if status is OrderStatus.FILLED:
                self._executed += self._current_quantity
                if self._executed >= self.total_quantity:
                    self._active = False
                    return
                await self._resubmit()
            elif status in _DEAD:
                await self._resubmit()

    async def _monitor(self) -> None:
        while self._active:
            await self._check()
            if not self._active:
                break
            await asyncio.sleep(self.poll_interval)

    async def _stop_monitor(self) -> None:
        task, self._monitor_task = self._monitor_task, None
        if task is None or task is asyncio.current_task():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task