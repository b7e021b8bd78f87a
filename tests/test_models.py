import dataclasses
from datetime import datetime, timezone

import pytest

from xquant.models import MarketData, Order, OrderSide, OrderStatus, OrderType, Position, Trade


def _candle():
    return MarketData("BTCUSDT", 1000, 50000.0, 50100.0, 49900.0, 50000.0, 10.0)


def test_orders_get_distinct_ids():
    first = Order("BTCUSDT", OrderSide.BUY, OrderType.MARKET, 0.5, 50000.0)
    second = Order("BTCUSDT", OrderSide.BUY, OrderType.MARKET, 0.5, 50000.0)
    assert first.id != second.id
    assert first.quantity == 0.5 and first.order_type is OrderType.MARKET


def test_close_price_alias():
    candle = _candle()
    assert candle.close_price == candle.close


def test_market_data_time():
    assert _candle().time == datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)


def test_market_data_is_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        _candle().close = 1.0


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        (OrderStatus.NEW, True),
        (OrderStatus.PARTIALLY_FILLED, True),
        (OrderStatus.FILLED, False),
        (OrderStatus.CANCELLED, False),
        (OrderStatus.REJECTED, False),
        (OrderStatus.EXPIRED, False),
    ],
)
def test_status_is_open(status, expected):
    assert status.is_open is expected


def test_trade_defaults_and_notional():
    trade = Trade("trade1", "BTCUSDT", 50050.0, 0.5, 1500, "order1", OrderSide.BUY)
    assert trade.fee == 0.0
    assert trade.realized_pnl == 0.0
    assert trade.notional == pytest.approx(50050.0 * 0.5)


def test_position_defaults():
    position = Position("BTCUSDT")
    assert (position.quantity, position.entry_price, position.unrealized_pnl) == (0.0, 0.0, 0.0)