"""Named backtest scenarios and a fluent builder for them."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

from xquant.backtest_engine import BacktestEngine
from xquant.backtest_result import BacktestResult
from xquant.errors import InvalidParameterError
from xquant.models import MarketData
from xquant.strategy_manager import Strategy


class BacktestScenario:
    """A configured engine ready to run."""

    def __init__(self, name: str, description: str, engine: BacktestEngine) -> None:
        self.name = name
        self.description = description
        self.engine = engine

    async def run(self) -> BacktestResult:
        return await self.engine.run()


class BacktestScenarioBuilder:
    """Collects scenario settings step by step; every setter returns the builder."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._description = ""
        self._start_time: datetime | None = None
        self._end_time: datetime | None = None
        self._market_data: dict[str, list[MarketData]] = {}
        self._symbols: list[str] = []
        self._initial_balance: dict[str, float] = {}
        self._fee_rate = 0.001
        self._slippage = 0.0005
        self._strategies: list[Strategy] = []

    def description(self, description: str) -> BacktestScenarioBuilder:
        self._description = description
        return self

    def period(self, start_time: datetime, end_time: datetime) -> BacktestScenarioBuilder:
        self._start_time = start_time
        self._end_time = end_time
        return self

    def last_days(self, days: int) -> BacktestScenarioBuilder:
        """Use the ``days`` days up to now as the period."""
        end_time = datetime.now(timezone.utc)
        return self.period(end_time - timedelta(days=days), end_time)

    def market_data(self, symbol: str, data: Iterable[MarketData]) -> BacktestScenarioBuilder:
        self._market_data[symbol] = list(data)
        return self

    def symbol(self, symbol: str) -> BacktestScenarioBuilder:
        self._symbols.append(symbol)
        return self

    def initial_balance(self, asset: str, amount: float) -> BacktestScenarioBuilder:
        self._initial_balance[asset] = amount
        return self

    def fee_rate(self, fee_rate: float) -> BacktestScenarioBuilder:
        self._fee_rate = fee_rate
        return self

    def slippage(self, slippage: float) -> BacktestScenarioBuilder:
        self._slippage = slippage
        return self

    def strategy(self, strategy: Strategy) -> BacktestScenarioBuilder:
        self._strategies.append(strategy)
        return self

    def build(self) -> BacktestScenario:
        """Validate the settings and assemble the scenario."""
        if self._start_time is None:
            raise InvalidParameterError("start time is not set")
        if self._end_time is None:
            raise InvalidParameterError("end time is not set")
        if self._start_time >= self._end_time:
            raise InvalidParameterError("start time must be before end time")
        if not self._strategies:
            raise InvalidParameterError("at least one strategy is required")
        if not self._market_data and self._symbols:
            raise InvalidParameterError("market data is required for the given symbols")

        engine = BacktestEngine(
            self._name,
            self._description,
            self._start_time,
            self._end_time,
            dict(self._initial_balance),
            self._fee_rate,
            self._slippage,
        )
        for symbol, data in self._market_data.items():
            engine.add_market_data(symbol, data)
        for strategy in self._strategies:
            engine.add_strategy(strategy)
        return BacktestScenario(self._name, self._description, engine)