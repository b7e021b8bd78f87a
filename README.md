# xquant

A pure-Python library for automated trading. It needs nothing outside the standard library.

| Module | What it provides |
| --- | --- |
| `xquant.models` | `Order`, `Trade`, `MarketData`, `Position` and the enums `OrderSide`, `OrderType`, `OrderStatus` |
| `xquant.exchange` | the asynchronous `Exchange` interface and the in-memory `MockExchange` |
| `xquant.indicators` | streaming indicators: `SimpleMovingAverage`, `ExponentialMovingAverage`, `MovingAverageCrossover`, `RelativeStrengthIndex`, `MACD`, `VolumeWeightedAveragePrice` |
| `xquant.twap_splitter`, `xquant.vwap_splitter` | `TwapSplitter` and `VwapSplitter`, which split a large order into market orders |
| `xquant.iceberg_manager` | `IcebergManager`, which shows one slice of a large limit order at a time |
| `xquant.trailing_stop_manager` | `TrailingStopManager`, which fires a market order once the price retraces by a percentage |
| `xquant.risk_manager` | `RiskManager`, with per-symbol position limits and a daily loss limit |
| `xquant.execution_analyzer` | `ExecutionAnalyzer`, which reports VWAP, TWAP, slippage and market impact |
| `xquant.strategy_manager` | the `Strategy` base class and `StrategyManager` |
| `xquant.backtest_engine`, `xquant.scenario`, `xquant.backtest_result`, `xquant.performance` | backtesting |
| `xquant.config` | `Config`, loaded from a JSON file |
| `xquant.errors` | `TradingError` and its subclasses |

## Indicators

All indicators share one interface:

- `update(price, volume)` feeds in one observation.
- `is_ready()` tells you whether there is enough data to calculate a value.
- `calculate()` returns an `IndicatorResult`. It holds a `value` and a list of `IndicatorSignal`s.

A signal's `strength` runs from -1.0 (strong sell) to 1.0 (strong buy).

```python
from xquant.indicators import RelativeStrengthIndex, SimpleMovingAverage

sma = SimpleMovingAverage(3)
for price in (10.0, 11.0, 12.0):
    sma.update(price, None)
print(sma.calculate().value)  # 11.0

prices = [100.0, 101.5, 99.0, 98.2, 97.5, 99.9, 102.3, 103.0]
rsi = RelativeStrengthIndex(5, 70.0, 30.0)
for price in prices:
    rsi.update(price, None)
if rsi.is_ready():
    for signal in rsi.calculate().signals:
        print(signal.name, signal.strength, signal.message)
```

If you call `calculate()` before the indicator is ready, it raises `InsufficientDataError`. `VolumeWeightedAveragePrice.update` raises `MissingDataError` when you pass no volume.

Two helpers work on a list of indicators:

- `update_indicators` and `update_indicators_with_market_data` feed every indicator in the list.
- `reset_indicators` clears every indicator in the list.

## Exchanges

`MockExchange` implements `Exchange` in memory.

- **Starting data.** It begins with 1000 randomly generated one-minute candles each for `BTCUSDT` and `ETHUSDT`. Pass a `random.Random` if you want repeatable data.
- **Starting balances.** Unless the configuration sets `exchange.initial_balance`, it starts with 10 BTC, 100 ETH and 50000 USDT.
- **Market orders** fill at once at the latest close, adjusted by the configured slippage.
- **Limit orders** whose price crosses the latest close fill half their quantity at once. `process_pending_orders()` fills the rest once the price is reached.
- **Fees** are charged at the configured `fee_rate`. It defaults to zero.

```python
import asyncio
import random

from xquant.config import Config
from xquant.exchange import MockExchange
from xquant.models import Order, OrderSide, OrderType


async def demo():
    exchange = MockExchange(Config(), random.Random(7))
    order = Order("BTCUSDT", OrderSide.BUY, OrderType.MARKET, 0.5, 50000.0)
    order_id = await exchange.submit_order(order)
    print(await exchange.get_order_status(order_id))  # OrderStatus.FILLED
    print(await exchange.get_balance("BTC"))          # 10.5

asyncio.run(demo())
```

## Execution algorithms

All four algorithms take an `Exchange`.

`TwapSplitter(exchange, symbol, side, total_quantity, execution_interval, num_slices)` sends `num_slices` equal market orders spread across `execution_interval` milliseconds.

`VwapSplitter` also sends market orders, in ten slices. It sizes each slice by the volume profile of the same window one day earlier.

- For both splitters, `await start()` runs until the whole quantity has been sent or `stop()` is called.
- Both accept a `sleep` keyword, so you can replace the waits between slices.
- `status()` returns `(active, executed_quantity, total_quantity)`.

`IcebergManager` and `TrailingStopManager` start a background asyncio task in `start()`, so they need a running event loop. The task polls the exchange every `poll_interval` seconds.

- The iceberg keeps a limit order of `display_quantity` on the book until `total_quantity` has filled. `update_price()` replaces the visible order at the new price.
- The trailing stop tracks the highest price (for buys) or the lowest price (for sells). It submits a market order when the price moves `trailing_delta` percent against that extreme. If you give an `activation_price`, tracking begins only once the price reaches it.

## Risk checks

`RiskManager(exchange, max_drawdown_percent, max_daily_loss)` rebuilds positions from the exchange's open orders. It checks each order against them.

`await check_order(order)` returns `False` in either of these cases:

- the order would push the position past the size set with `set_max_position_size`;
- the losses recorded with `record_pnl` have reached the daily limit.

## Backtesting

A strategy subclasses `Strategy` and implements two methods:

- `update(market_data)`;
- `get_orders()`.

During a backtest, `get_orders()` is called after every candle. Every order it returns is placed, so a strategy should return each order only once.

```python
import asyncio
from datetime import datetime, timedelta, timezone

from xquant.models import MarketData, Order, OrderSide, OrderType
from xquant.scenario import BacktestScenarioBuilder
from xquant.strategy_manager import Strategy


class BuyOnce(Strategy):
    def __init__(self):
        super().__init__("buy-once")
        self._sent = False

    def update(self, market_data):
        pass

    def get_orders(self):
        if self._sent:
            return []
        self._sent = True
        return [Order("BTCUSDT", OrderSide.BUY, OrderType.MARKET, 0.1, 0.0)]


start = datetime(2024, 1, 1, tzinfo=timezone.utc)
candles = [
    MarketData("BTCUSDT", int((start + timedelta(minutes=i)).timestamp() * 1000),
               price, price, price, price, 1.0)
    for i, price in enumerate([42000.0, 42100.0, 41950.0, 42300.0])
]

scenario = (
    BacktestScenarioBuilder("demo")
    .period(start, start + timedelta(days=1))
    .market_data("BTCUSDT", candles)
    .initial_balance("USDT", 10000.0)
    .fee_rate(0.001)
    .strategy(BuyOnce())
    .build()
)
result = asyncio.run(scenario.run())
print(result.summary())
```

Give `period()` timezone-aware UTC datetimes.

`build()` raises `InvalidParameterError` in these cases:

- the period is missing;
- the period is reversed;
- no strategy was added;
- symbols were named with `symbol()` but no market data was given.

`BacktestResult` reports these measures:

- trade count;
- winning and losing trades;
- win rate;
- average profit per trade;
- the best and the worst trade;
- Sharpe ratio, maximum drawdown and profit factor;
- compound annual return (`car()`).

`summary()` returns all of these as text. The trade-based measures use the `realized_pnl` of each `Trade`. The same calculations are available on their own in `xquant.performance`: `sharpe_ratio`, `max_drawdown`, `profit_factor` and `daily_returns`.

## Configuration

`Config.load(path)` reads a JSON file with `server`, `exchange` and `logging` sections. The path defaults to `config.json`.

- If the file does not exist, it returns the defaults.
- If the file cannot be read or parsed, it raises `ConfigError`.

`Config.from_dict` and `Config.to_dict` convert to and from plain data.

## Errors

Every error the package raises derives from `xquant.errors.TradingError`. You can catch that class, or one of its more specific subclasses such as `OrderNotFoundError`, `InsufficientDataError` or `StrategyNotFoundError`.

## What this package does not do

This is a library only.

- It has no command-line program and no HTTP API.
- It does not connect to a real exchange or stream live market data. `MockExchange` is the only `Exchange` it includes.
- It does not read historical data from files. Backtests take candles that you pass to `market_data()` or `BacktestEngine.add_market_data()`.
- It ships no ready-made trading strategies.
- `MockExchange` does not compute the realised profit of each trade, so on its own it leaves `realized_pnl` at zero.

## Running the tests

Install the `test` extra, then run `pytest` from the project root.