"""Registry that drives a set of trading strategies together."""

from __future__ import annotations

from abc import ABC, abstractmethod

from xquant.errors import DuplicateStrategyError, StrategyNotFoundError
from xquant.models import MarketData, Order


class Strategy(ABC):
    """A trading strategy fed with market data that proposes orders."""

    def __init__(self, name: str, active: bool = True) -> None:
        self.name = name
        self.active = active

    @abstractmethod
    def update(self, market_data: MarketData) -> None:
        """Consume a new candle."""

    @abstractmethod
    def get_orders(self) -> list[Order]:
        """Return the orders the strategy currently wants placed."""


class StrategyManager:
    """Holds strategies by name and fans market data out to the active ones."""

    def __init__(self) -> None:
        self._strategies: dict[str, Strategy] = {}
        self._active: list[str] = []

    def _get(self, name: str) -> Strategy:
        try:
            return self._strategies[name]
        except KeyError:
            raise StrategyNotFoundError(f"Strategy '{name}' not found") from None

    def add_strategy(self, strategy: Strategy) -> None:
        name = strategy.name
        if name in self._strategies:
            raise DuplicateStrategyError(f"Strategy '{name}' already exists")
        self._strategies[name] = strategy
        if strategy.active:
            self._active.append(name)

    def remove_strategy(self, name: str) -> None:
        self._get(name)
        del self._strategies[name]
        self._active = [active for active in self._active if active != name]

    def set_strategy_active(self, name: str, active: bool) -> None:
        strategy = self._get(name)
        strategy.active = active
        if active:
            if name not in self._active:
                self._active.append(name)
        else:
            self._active = [other for other in self._active if other != name]

    def update_all(self, market_data: MarketData) -> None:
        """Feed a candle to every active strategy."""
        for name in list(self._active):
            strategy = self._strategies.get(name)
            if strategy is not None:
                strategy.update(market_data)

    def get_all_orders(self) -> list[Order]:
        """Collect the orders of every active strategy, in activation order."""
        orders: list[Order] = []
        for name in self._active:
            strategy = self._strategies.get(name)
            if strategy is not None:
                orders.extend(strategy.get_orders())
        return orders

    def get_orders_from_strategy(self, name: str) -> list[Order]:
        return self._get(name).get_orders()

    def list_strategies(self) -> list[tuple[str, bool]]:
        """Return ``(name, active)`` for every registered strategy."""
        return [(name, strategy.active) for name, strategy in self._strategies.items()]