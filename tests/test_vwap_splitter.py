import pytest

from xquant.errors import AlreadyRunningError, DataNotFoundError
from xquant.exchange import MockExchange
from xquant.models import MarketData, OrderSide
from xquant.vwap_splitter import VwapSplitter


def candle(volume, timestamp=0, close=50000.0):
    return MarketData("BTCUSDT", timestamp, close, close, close, close, volume)


class HistoryExchange(MockExchange):
    def __init__(self, history):
        super().__init__()
        self.history = history
        self.set_market_data("BTCUSDT", [candle(1.0, timestamp=1)])

    async def get_historical_data(self, symbol, interval, start_time, end_time=None, limit=None):
        return list(self.history)


async def no_sleep(seconds):
    return None


@pytest.mark.asyncio
async def test_vwap_splitter_completes():
    exchange = MockExchange()
    vwap = VwapSplitter(exchange, "BTCUSDT", OrderSide.BUY, 1.0, 3600000, 10.0, sleep=no_sleep)
    await vwap.start()
    active, executed, total = vwap.status()
    assert not active
    assert executed > 0.0
    assert executed == pytest.approx(1.0)
    assert total == 1.0
    assert len(vwap.child_orders) == 10


@pytest.mark.asyncio
async def test_slices_follow_volume_profile():
    history = [candle(1.0)] * 10 + [candle(3.0)] * 10
    exchange = HistoryExchange(history)
    vwap = VwapSplitter(exchange, "BTCUSDT", OrderSide.BUY, 1.0, 3600000, sleep=no_sleep)
    await vwap.start()
    quantities = [trade.quantity for trade in exchange.get_trades()]
    assert quantities == pytest.approx([0.05] * 5 + [0.15] * 5)
    assert vwap.status().executed_quantity == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_short_history_puts_everything_in_last_slice():
    exchange = HistoryExchange([candle(2.0)] * 5)
    vwap = VwapSplitter(exchange, "BTCUSDT", OrderSide.SELL, 2.0, 3600000, sleep=no_sleep)
    await vwap.start()
    trades = exchange.get_trades()
    assert [trade.quantity for trade in trades] == [2.0]
    assert trades[0].side is OrderSide.SELL
    assert len(vwap.child_orders) == 1


@pytest.mark.asyncio
async def test_zero_volume_history_splits_evenly():
    exchange = HistoryExchange([candle(0.0)] * 20)
    vwap = VwapSplitter(exchange, "BTCUSDT", OrderSide.BUY, 1.0, 3600000, sleep=no_sleep)
    await vwap.start()
    assert [trade.quantity for trade in exchange.get_trades()] == pytest.approx([0.1] * 10)


@pytest.mark.asyncio
async def test_pauses_between_slices():
    pauses = []

    async def recording_sleep(seconds):
        pauses.append(seconds)

    exchange = MockExchange()
    vwap = VwapSplitter(exchange, "BTCUSDT", OrderSide.BUY, 1.0, 3600000, sleep=recording_sleep)
    await vwap.start()
    assert pauses == [360.0] * 9
    active, executed, total = vwap.status()
    assert not active
    assert executed == pytest.approx(1.0)
    assert total == 1.0
    assert len(vwap.child_orders) == 10


@pytest.mark.asyncio
async def test_stop_halts_schedule():
    exchange = MockExchange()
    holder = {}

    async def stopping_sleep(seconds):
        await holder["vwap"].stop()

    vwap = VwapSplitter(exchange, "BTCUSDT", OrderSide.BUY, 1.0, 3600000, sleep=stopping_sleep)
    holder["vwap"] = vwap
    await vwap.start()
    active, executed, _ = vwap.status()
    assert not active
    assert executed == pytest.approx(0.1)
    assert len(vwap.child_orders) == 1


@pytest.mark.asyncio
async def test_start_while_running_raises():
    exchange = MockExchange()
    errors = []
    holder = {}

    async def restarting_sleep(seconds):
        if not errors:
            try:
                await holder["vwap"].start()
            except AlreadyRunningError as exc:
                errors.append(exc)

    vwap = VwapSplitter(exchange, "BTCUSDT", OrderSide.BUY, 1.0, 3600000, sleep=restarting_sleep)
    holder["vwap"] = vwap
    await vwap.start()
    assert len(errors) == 1
    assert str(errors[0]) == "Already running: VWAP execution already running"
    active, executed, total = vwap.status()
    assert not active
    assert executed == pytest.approx(1.0)
    assert total == 1.0
    assert len(vwap.child_orders) == 10


@pytest.mark.asyncio
async def test_unknown_symbol_raises_and_resets():
    vwap = VwapSplitter(MockExchange(), "XYZUSDT", OrderSide.BUY, 1.0, 3600000, sleep=no_sleep)
    with pytest.raises(DataNotFoundError):
        await vwap.start()
    assert vwap.status().active is False