import asyncio
import math

import pytest

from xquant.errors import AlreadyRunningError, DataNotFoundError, InvalidParameterError
from xquant.exchange import MockExchange
from xquant.models import MarketData, OrderSide, OrderStatus
from xquant.trailing_stop_manager import TrailingStopManager


def candle(close, timestamp=1):
    return MarketData("BTCUSDT", timestamp, close, close, close, close, 1.0)


def make_exchange(close=100.0):
    exchange = MockExchange()
    exchange.set_market_data("BTCUSDT", [candle(close)])
    return exchange


async def wait_until(predicate, steps=500):
    for _ in range(steps):
        if predicate():
            return True
        await asyncio.sleep(0.002)
    return predicate()


@pytest.mark.asyncio
async def test_trailing_stop():
    exchange = MockExchange()
    trailing = TrailingStopManager(exchange, "BTCUSDT", OrderSide.SELL, 0.1, 2.0, None)
    await trailing.start()
    is_active, executed, trigger_price, quantity = trailing.status()
    assert is_active
    assert not executed
    assert trigger_price > 0.0
    assert quantity == 0.1
    await trailing.stop()
    assert trailing.status().active is False


@pytest.mark.asyncio
async def test_status_trigger_prices():
    sell = TrailingStopManager(make_exchange(), "BTCUSDT", OrderSide.SELL, 1.0, 2.0)
    assert math.isinf(sell.status().trigger_price)
    await sell.start()
    assert sell.status().trigger_price == pytest.approx(102.0)
    await sell.stop()

    buy = TrailingStopManager(make_exchange(), "BTCUSDT", OrderSide.BUY, 1.0, 2.0)
    await buy.start()
    assert buy.status().trigger_price == pytest.approx(98.0)
    await buy.stop()


@pytest.mark.asyncio
async def test_sell_stop_triggers_on_rise():
    exchange = make_exchange()
    trailing = TrailingStopManager(exchange, "BTCUSDT", OrderSide.SELL, 0.5, 2.0,
                                   poll_interval=0.001)
    await trailing.start()
    exchange.update_market_data(candle(103.0, timestamp=2))
    assert await wait_until(lambda: trailing.status().executed)
    status = trailing.status()
    trades = exchange.get_trades()
    assert status.active is False
    assert [(t.quantity, t.price, t.side) for t in trades] == [(0.5, 103.0, OrderSide.SELL)]
    assert await exchange.get_order_status(trailing.stop_order_id) is OrderStatus.FILLED


@pytest.mark.asyncio
async def test_activation_price_delays_trigger():
    exchange = make_exchange()
    trailing = TrailingStopManager(exchange, "BTCUSDT", OrderSide.SELL, 1.0, 2.0,
                                   activation_price=110.0, poll_interval=0.001)
    await trailing.start()
    exchange.update_market_data(candle(103.0, timestamp=2))
    await asyncio.sleep(0.05)
    assert exchange.get_trades() == []
    assert trailing.status().executed is False
    exchange.update_market_data(candle(110.0, timestamp=3))
    assert await wait_until(lambda: trailing.status().executed)
    assert [t.price for t in exchange.get_trades()] == [110.0]


@pytest.mark.asyncio
async def test_update_delta():
    trailing = TrailingStopManager(make_exchange(), "BTCUSDT", OrderSide.BUY, 1.0, 2.0)
    await trailing.update_delta(5.0)
    assert trailing.trailing_delta == 5.0
    with pytest.raises(InvalidParameterError):
        await trailing.update_delta(0.0)
    with pytest.raises(InvalidParameterError):
        await trailing.update_delta(-1.0)
    assert trailing.trailing_delta == 5.0


@pytest.mark.asyncio
async def test_start_twice_raises():
    trailing = TrailingStopManager(make_exchange(), "BTCUSDT", OrderSide.SELL, 1.0, 2.0)
    await trailing.start()
    with pytest.raises(AlreadyRunningError):
        await trailing.start()
    await trailing.stop()
    assert trailing.status().active is False


@pytest.mark.asyncio
async def test_start_unknown_symbol_raises():
    trailing = TrailingStopManager(MockExchange(), "XYZUSDT", OrderSide.SELL, 1.0, 2.0)
    with pytest.raises(DataNotFoundError):
        await trailing.start()
    assert trailing.status().active is False