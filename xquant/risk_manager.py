"""Position and loss limits checked before orders are sent."""

from __future__ import annotations

import math

from xquant.exchange import Exchange
from xquant.models import Order, OrderSide, Position


class RiskManager:
    """Rejects orders that would breach position or daily-loss limits."""

    def __init__(self, exchange: Exchange, max_drawdown_percent: float,
                 max_daily_loss: float) -> None:
        self.exchange = exchange
        self.max_drawdown_percent = max_drawdown_percent
        self.max_daily_loss = max_daily_loss
        self.daily_loss = 0.0
        self._max_position_size: dict[str, float] = {}
        self._positions: dict[str, Position] = {}

    def set_max_position_size(self, symbol: str, size: float) -> None:
        self._max_position_size[symbol] = size

    async def check_order(self, order: Order) -> bool:
        """Whether ``order`` passes every risk rule."""
        await self.update_positions()
        max_size = self._max_position_size.get(order.symbol)
        if max_size is not None:
            effect = order.quantity if order.side is OrderSide.BUY else -order.quantity
            if abs(self.get_position_size(order.symbol) + effect) > max_size:
                return False
        return self.daily_loss < self.max_daily_loss

    async def update_positions(self) -> None:
        """Rebuild positions from the exchange's open orders."""
        positions: dict[str, Position] = {}
        for order in await self.exchange.get_open_orders():
            position = positions.setdefault(order.symbol, Position(order.symbol))
            if order.side is OrderSide.BUY:
                position.quantity += order.quantity
            else:
                position.quantity -= order.quantity
        for symbol, position in positions.items():
            market_data = await self.exchange.get_market_data(symbol)
            position.current_price = market_data.close
            if position.quantity != 0.0 and position.entry_price != 0.0:
                direction = math.copysign(1.0, position.quantity)
                position.unrealized_pnl = (direction
                                           * abs(position.current_price - position.entry_price)
                                           * abs(position.quantity))
        self._positions = positions

    def get_position_size(self, symbol: str) -> float:
        position = self._positions.get(symbol)
        return position.quantity if position is not None else 0.0

    def get_unrealized_pnl(self, symbol: str) -> float:
        position = self._positions.get(symbol)
        return position.unrealized_pnl if position is not None else 0.0

    def record_pnl(self, amount: float) -> None:
        """Record a realised profit or loss; only losses count toward the daily limit."""
        if amount < 0.0:
            self.daily_loss += abs(amount)

    def reset_daily_loss(self) -> None:
        self.daily_loss = 0.0

    def get_positions(self) -> list[Position]:
        return list(self._positions.values())