"""Performance statistics computed from a list of closed trades."""

from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Sequence
from datetime import datetime, timezone

from xquant.models import Trade

TRADING_DAYS_PER_YEAR = 252


def _trade_date(trade: Trade) -> str:
    moment = datetime.fromtimestamp(trade.timestamp / 1000, tz=timezone.utc)
    return moment.strftime("%Y-%m-%d")


def daily_returns(trades: Sequence[Trade], initial_capital: float) -> list[float]:
    """Realised return of each trading day, in date order, compounding the capital."""
    if not trades:
        return []
    pnl_by_day: dict[str, float] = defaultdict(float)
    for trade in trades:
        pnl_by_day[_trade_date(trade)] += trade.realized_pnl
    capital = initial_capital
    returns = []
    for day in sorted(pnl_by_day):
        day_pnl = pnl_by_day[day]
        returns.append(day_pnl / capital if capital else math.nan)
        capital += day_pnl
    return returns


def sharpe_ratio(trades: Sequence[Trade], initial_capital: float) -> float:
    """Annualised Sharpe ratio of the daily returns (zero risk-free rate)."""
    if not trades or initial_capital <= 0.0:
        return 0.0
    returns = daily_returns(trades, initial_capital)
    if not returns:
        return 0.0
    mean = sum(returns) / len(returns)
    variance = sum((value - mean) ** 2 for value in returns) / len(returns)
    std_dev = math.sqrt(variance)
    if std_dev == 0.0:
        return 0.0
    return mean / std_dev * math.sqrt(TRADING_DAYS_PER_YEAR)


def max_drawdown(trades: Sequence[Trade], initial_capital: float) -> float:
    """Largest peak-to-trough fall of the equity curve, as a fraction of the peak."""
    if not trades:
        return 0.0
    equity = initial_capital
    peak = initial_capital
    worst = 0.0
    for value in (initial_capital, *(equity := equity + t.realized_pnl for t in trades)):
        if value > peak:
            peak = value
            continue
        fall = peak - value
        if peak == 0.0:
            drawdown = math.inf if fall > 0.0 else 0.0
        else:
            drawdown = fall / peak
        worst = max(worst, drawdown)
    return worst


def profit_factor(trades: Sequence[Trade]) -> float:
    """Gross profit divided by gross loss; infinite when there are gains and no losses."""
    gross_profit = sum(t.realized_pnl for t in trades if t.realized_pnl > 0.0)
    gross_loss = sum(abs(t.realized_pnl) for t in trades if t.realized_pnl < 0.0)
    if gross_loss == 0.0:
        return math.inf if gross_profit > 0.0 else 0.0
    return gross_profit / gross_loss