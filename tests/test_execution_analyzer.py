import pytest

from xquant.execution_analyzer import ExecutionAnalyzer
from xquant.models import MarketData, OrderSide, Trade


def md(timestamp, close, symbol="BTCUSDT"):
    return MarketData(symbol, timestamp, 50000.0, close + 100.0, close - 100.0, close, 10.0)


def trade(name, price, quantity, timestamp, side=OrderSide.BUY, symbol="BTCUSDT"):
    return Trade(
        id=name, symbol=symbol, price=price, quantity=quantity,
        timestamp=timestamp, order_id=f"order-{name}", side=side,
    )


def populated(side=OrderSide.BUY):
    analyzer = ExecutionAnalyzer("BTCUSDT")
    analyzer.add_market_data(md(1000, 50000.0))
    analyzer.add_market_data(md(2000, 50100.0))
    analyzer.add_trade(trade("trade1", 50050.0, 0.5, 1500, side))
    analyzer.add_trade(trade("trade2", 50080.0, 0.3, 1800, side))
    return analyzer


def test_execution_analyzer():
    report = populated().get_report()
    for key in ("vwap", "twap", "slippage", "market_impact", "average_price", "total_quantity"):
        assert key in report
    assert report["vwap"] > 0.0
    assert report["trade_count"] == 2.0
    assert report["total_quantity"] == 0.8


def test_vwap_and_twap_values():
    report = populated().get_report()
    assert report["vwap"] == pytest.approx((50050.0 * 0.5 + 50080.0 * 0.3) / 0.8)
    assert report["twap"] == pytest.approx(50050.0)
    assert report["average_price"] == pytest.approx(report["vwap"])


def test_slippage_against_own_vwap_is_zero():
    assert populated().get_report()["slippage"] == pytest.approx(0.0, abs=1e-9)


def test_market_impact_sign_follows_side():
    buy = populated(OrderSide.BUY).get_report()["market_impact"]
    sell = populated(OrderSide.SELL).get_report()["market_impact"]
    assert buy == pytest.approx(0.2)
    assert sell == pytest.approx(-buy)


def test_other_symbols_ignored():
    analyzer = populated()
    analyzer.add_trade(trade("eth", 3000.0, 5.0, 1900, symbol="ETHUSDT"))
    analyzer.add_market_data(md(3000, 1.0, symbol="ETHUSDT"))
    report = analyzer.get_report()
    assert report["trade_count"] == 2.0
    assert report["twap"] == pytest.approx(50050.0)


def test_no_metrics_without_market_data():
    analyzer = ExecutionAnalyzer("BTCUSDT")
    analyzer.add_trade(trade("t", 50000.0, 1.0, 1000))
    report = analyzer.get_report()
    assert report["vwap"] == 0.0
    assert report["total_quantity"] == 1.0


def test_empty_report_has_only_base_keys():
    report = ExecutionAnalyzer("BTCUSDT").get_report()
    assert set(report) == {"vwap", "twap", "slippage", "market_impact"}