"""Execution quality metrics: VWAP, TWAP, slippage and market impact."""

from __future__ import annotations

from xquant.models import MarketData, OrderSide, Trade


class ExecutionAnalyzer:
    """Measures how well the trades of one symbol were executed."""

    def __init__(self, symbol: str) -> None:
        self.symbol = symbol
        self._trades: list[Trade] = []
        self._market_data: list[MarketData] = []
        self.vwap = 0.0
        self.twap = 0.0
        self.slippage = 0.0
        self.market_impact = 0.0

    def add_trade(self, trade: Trade) -> None:
        if trade.symbol == self.symbol:
            self._trades.append(trade)
            self.calculate_metrics()

    def add_market_data(self, data: MarketData) -> None:
        if data.symbol == self.symbol:
            self._market_data.append(data)
            self.calculate_metrics()

    def calculate_metrics(self) -> None:
        """Recompute every metric; nothing changes until trades and data both exist."""
        if not self._trades or not self._market_data:
            return
        self._calculate_vwap()
        self._calculate_twap()
        self._calculate_slippage()
        self._calculate_market_impact()

    def _calculate_vwap(self) -> None:
        volume = sum(trade.quantity for trade in self._trades)
        if volume > 0.0:
            self.vwap = sum(trade.notional for trade in self._trades) / volume

    def _calculate_twap(self) -> None:
        if self._market_data:
            self.twap = sum(data.close for data in self._market_data) / len(self._market_data)

    def _calculate_slippage(self) -> None:
        if self.vwap == 0.0 or not self._trades:
            return
        weighted = 0.0
        volume = 0.0
        for trade in self._trades:
            if trade.side is OrderSide.BUY:
                diff = trade.price - self.vwap
            else:
                diff = self.vwap - trade.price
            weighted += diff / self.vwap * 100.0 * trade.quantity
            volume += trade.quantity
        if volume > 0.0:
            self.slippage = weighted / volume

    def _calculate_market_impact(self) -> None:
        if not self._trades or len(self._market_data) < 2:
            return
        start = self._market_data[0].close
        end = self._market_data[-1].close
        change = (end - start) / start * 100.0
        buying = self._trades[-1].side is OrderSide.BUY
        self.market_impact = change if buying else -change

    def get_report(self) -> dict[str, float]:
        report = {
            "vwap": self.vwap,
            "twap": self.twap,
            "slippage": self.slippage,
            "market_impact": self.market_impact,
        }
        if not self._trades:
            return report
        total_value = sum(trade.notional for trade in self._trades)
        total_quantity = sum(trade.quantity for trade in self._trades)
        report["average_price"] = total_value / total_quantity if total_quantity > 0.0 else 0.0
        report["total_quantity"] = total_quantity
        report["total_value"] = total_value
        report["trade_count"] = float(len(self._trades))
        return report