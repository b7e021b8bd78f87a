import math
from datetime import datetime, timedelta, timezone

import pytest

from xquant.models import OrderSide, Trade
from xquant.performance import daily_returns, max_drawdown, profit_factor, sharpe_ratio

BASE = datetime(2024, 3, 1, tzinfo=timezone.utc)


def make_trade(pnl, day=0, hour=0):
    moment = BASE + timedelta(days=day, hours=hour)
    return Trade(
        id=f"t-{day}-{hour}-{pnl}",
        symbol="BTCUSDT",
        price=100.0,
        quantity=1.0,
        timestamp=int(moment.timestamp() * 1000),
        order_id="order",
        side=OrderSide.BUY,
        realized_pnl=pnl,
    )


def test_empty_trades_give_zero_everywhere():
    assert sharpe_ratio([], 1000.0) == 0.0
    assert max_drawdown([], 1000.0) == 0.0
    assert profit_factor([]) == 0.0
    assert daily_returns([], 1000.0) == []


def test_profit_factor_ratio():
    trades = [make_trade(10.0), make_trade(-5.0)]
    assert profit_factor(trades) == pytest.approx(2.0)


def test_profit_factor_without_losses_is_infinite():
    assert profit_factor([make_trade(3.0), make_trade(4.0)]) == math.inf


def test_profit_factor_only_flat_trades_is_zero():
    assert profit_factor([make_trade(0.0)]) == 0.0


def test_daily_returns_group_by_day():
    trades = [make_trade(10.0, 0, 1), make_trade(5.0, 0, 5), make_trade(-3.0, 1)]
    returns = daily_returns(trades, 1000.0)
    assert len(returns) == 2


def test_daily_returns_compound_to_total_pnl():
    trades = [make_trade(10.0, 0), make_trade(-20.0, 1), make_trade(7.5, 3), make_trade(2.0, 3)]
    capital = 1000.0
    grown = capital
    for value in daily_returns(trades, capital):
        grown *= 1.0 + value
    assert grown == pytest.approx(capital + sum(t.realized_pnl for t in trades))


def test_daily_returns_are_ordered_by_date():
    trades = [make_trade(30.0, 2), make_trade(10.0, 0)]
    returns = daily_returns(trades, 1000.0)
    assert returns[0] == pytest.approx(10.0 / 1000.0)
    assert returns[1] == pytest.approx(30.0 / 1010.0)


def test_sharpe_single_day_has_no_deviation():
    assert sharpe_ratio([make_trade(10.0), make_trade(5.0)], 1000.0) == 0.0


def test_sharpe_sign_follows_returns():
    gains = [make_trade(10.0, 0), make_trade(30.0, 1), make_trade(5.0, 2)]
    losses = [make_trade(-10.0, 0), make_trade(-30.0, 1), make_trade(-5.0, 2)]
    assert sharpe_ratio(gains, 1000.0) > 0.0
    assert sharpe_ratio(losses, 1000.0) < 0.0


def test_sharpe_is_scale_invariant():
    pnls = [10.0, -5.0, 20.0, 3.0]
    small = [make_trade(p, i) for i, p in enumerate(pnls)]
    large = [make_trade(p * 2, i) for i, p in enumerate(pnls)]
    assert sharpe_ratio(small, 1000.0) == pytest.approx(sharpe_ratio(large, 2000.0))


def test_max_drawdown_zero_for_rising_equity():
    trades = [make_trade(5.0), make_trade(10.0), make_trade(1.0)]
    assert max_drawdown(trades, 1000.0) == 0.0


def test_max_drawdown_measures_fall_from_peak():
    trades = [make_trade(100.0), make_trade(-50.0), make_trade(-50.0), make_trade(300.0)]
    assert max_drawdown(trades, 1000.0) == pytest.approx(100.0 / 1100.0)


def test_max_drawdown_is_a_fraction():
    trades = [make_trade(p) for p in (-100.0, 40.0, -300.0, 80.0, -10.0)]
    result = max_drawdown(trades, 1000.0)
    assert 0.0 < result <= 1.0