"""Replays historical candles through strategies against a simulated exchange."""

from __future__ import annotations

import inspect
import random
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from xquant.backtest_result import BacktestResult
from xquant.config import Config
from xquant.errors import InsufficientDataError
from xquant.exchange import MockExchange
from xquant.models import MarketData
from xquant.strategy_manager import Strategy, StrategyManager


async def _settle(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class BacktestEngine:
    """Runs strategies over candles between ``start_time`` and ``end_time`` (aware UTC)."""

    def __init__(self, name: str, description: str, start_time: datetime, end_time: datetime,
                 initial_balance: dict[str, float] | None = None, fee_rate: float = 0.001,
                 slippage: float = 0.0005, *, exchange: MockExchange | None = None) -> None:
        self.name = name
        self.description = description
        self.start_time = start_time
        self.end_time = end_time
        self.initial_balance = dict(initial_balance or {})
        self.fee_rate = fee_rate
        self.slippage = slippage
        if exchange is None:
            config = Config()
            config.exchange.initial_balance = dict(self.initial_balance)
            config.exchange.fee_rate = fee_rate
            config.exchange.slippage = slippage
            exchange = MockExchange(config, rng=random.Random())
        self.exchange = exchange
        self._market_data: dict[str, list[MarketData]] = {}
        self._strategies = StrategyManager()

    def add_market_data(self, symbol: str, data: Iterable[MarketData]) -> None:
        """Set the candles for ``symbol``, replacing any loaded before."""
        self._market_data[symbol] = list(data)

    def add_strategy(self, strategy: Strategy) -> None:
        self._strategies.add_strategy(strategy)

    def _latest(self, symbol: str, moment: datetime) -> MarketData | None:
        series = self._market_data.get(symbol, [])
        return max((candle for candle in series if candle.time <= moment),
                   key=lambda candle: candle.timestamp, default=None)

    async def run(self) -> BacktestResult:
        """Replay every candle in the window in time order and summarise the outcome."""
        if not self._market_data:
            raise InsufficientDataError("no market data loaded")

        timeline = sorted(
            ((candle.time, symbol)
             for symbol, series in self._market_data.items() for candle in series),
            key=lambda entry: entry[0],
        )
        window = [entry for entry in timeline if self.start_time <= entry[0] <= self.end_time]

        initial_value = await _settle(self.exchange.get_portfolio_value())
        current_time = self.start_time
        for moment, symbol in window:
            current_time = moment
            data = self._latest(symbol, moment)
            if data is None:
                continue
            self._strategies.update_all(data)
            for order in self._strategies.get_all_orders():
                await _settle(self.exchange.place_order(order))
            await _settle(self.exchange.process_pending_orders(moment))
            await _settle(self.exchange.update_market_data(data))

        final_balance = dict(await _settle(self.exchange.get_balances()))
        final_value = await _settle(self.exchange.get_portfolio_value())
        trades = list(await _settle(self.exchange.get_trades()))
        profit = final_value - initial_value
        profit_percentage = profit / initial_value * 100.0 if initial_value > 0.0 else 0.0

        return BacktestResult(
            name=self.name,
            description=self.description,
            start_time=self.start_time,
            end_time=current_time,
            initial_balance=dict(self.initial_balance),
            final_balance=final_balance,
            initial_value=initial_value,
            final_value=final_value,
            profit=profit,
            profit_percentage=profit_percentage,
            trades=trades,
            fee_paid=sum(trade.fee for trade in trades),
            symbols=list(self._market_data),
        )