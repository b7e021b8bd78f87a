"""Outcome of a backtest run and the statistics derived from it."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from xquant import performance
from xquant.models import Trade


def _format_time(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d %H:%M:%S UTC")


@dataclass
class BacktestResult:
    name: str
    description: str
    start_time: datetime
    end_time: datetime
    initial_balance: dict[str, float]
    final_balance: dict[str, float]
    initial_value: float
    final_value: float
    profit: float
    profit_percentage: float
    trades: list[Trade] = field(default_factory=list)
    fee_paid: float = 0.0
    symbols: list[str] = field(default_factory=list)

    def trade_count(self) -> int:
        return len(self.trades)

    def winning_trades(self) -> int:
        return sum(1 for trade in self.trades if trade.realized_pnl > 0.0)

    def losing_trades(self) -> int:
        return sum(1 for trade in self.trades if trade.realized_pnl < 0.0)

    def win_rate(self) -> float:
        """Percentage of trades that made money."""
        if not self.trades:
            return 0.0
        return self.winning_trades() / len(self.trades) * 100.0

    def average_profit_per_trade(self) -> float:
        if not self.trades:
            return 0.0
        return sum(trade.realized_pnl for trade in self.trades) / len(self.trades)

    def max_profit_trade(self) -> tuple[Trade, float] | None:
        winners = [trade for trade in self.trades if trade.realized_pnl > 0.0]
        if not winners:
            return None
        best = max(winners, key=lambda trade: trade.realized_pnl)
        return best, best.realized_pnl

    def max_loss_trade(self) -> tuple[Trade, float] | None:
        losers = [trade for trade in self.trades if trade.realized_pnl < 0.0]
        if not losers:
            return None
        worst = min(losers, key=lambda trade: trade.realized_pnl)
        return worst, worst.realized_pnl

    def sharpe_ratio(self) -> float:
        return performance.sharpe_ratio(self.trades, self.initial_value)

    def max_drawdown(self) -> float:
        return performance.max_drawdown(self.trades, self.initial_value)

    def profit_factor(self) -> float:
        return performance.profit_factor(self.trades)

    def car(self) -> float:
        """Compound annual return as a fraction, over whole days of the run."""
        days = int((self.end_time - self.start_time).total_seconds() / 86400)
        if days <= 0 or self.initial_value <= 0.0:
            return 0.0
        years = days / 365.0
        return (self.final_value / self.initial_value) ** (1.0 / years) - 1.0

    def summary(self) -> str:
        lines = [
            f"===== Backtest result: {self.name} =====",
            f"Description: {self.description}",
            f"Period: {_format_time(self.start_time)} ~ {_format_time(self.end_time)}",
            f"Symbols: {', '.join(self.symbols)}",
            "",
            f"Initial value: ${self.initial_value:.2f}",
            f"Final value: ${self.final_value:.2f}",
            f"Net profit: ${self.profit:.2f} ({self.profit_percentage:.2f}%)",
            f"Fees paid: ${self.fee_paid:.2f}",
            "",
            f"Total trades: {self.trade_count()}",
            f"Winning trades: {self.winning_trades()}",
            f"Losing trades: {self.losing_trades()}",
            f"Win rate: {self.win_rate():.2f}%",
            f"Average profit per trade: ${self.average_profit_per_trade():.2f}",
            "",
            f"Sharpe ratio: {self.sharpe_ratio():.4f}",
            f"Max drawdown: {self.max_drawdown() * 100.0:.2f}%",
            f"Profit factor: {self.profit_factor():.2f}",
            f"Compound annual return: {self.car() * 100.0:.2f}%",
        ]
        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        return self.summary()