"""Streaming technical indicators: moving averages, RSI, MACD and VWAP."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field

from xquant.errors import CalculationError, InsufficientDataError, MissingDataError
from xquant.models import MarketData


@dataclass
class IndicatorSignal:
    """A trading hint; strength runs from -1.0 (strong sell) to 1.0 (strong buy)."""

    name: str
    strength: float
    message: str


@dataclass
class IndicatorResult:
    value: float
    signals: list[IndicatorSignal] = field(default_factory=list)


class Indicator(ABC):
    """An indicator fed one price (and optionally volume) at a time."""

    name: str

    @abstractmethod
    def update(self, price: float, volume: float | None = None) -> None:
        """Feed a new observation."""

    @abstractmethod
    def calculate(self) -> IndicatorResult:
        """Return the current value; raise InsufficientDataError if not ready."""

    @abstractmethod
    def is_ready(self) -> bool:
        """Whether enough data has been seen to calculate a value."""

    @abstractmethod
    def reset(self) -> None:
        """Forget all observations."""


class SimpleMovingAverage(Indicator):
    def __init__(self, period: int) -> None:
        self.name = f"SMA-{period}"
        self._period = period
        self._values: deque[float] = deque()
        self._sum = 0.0

    @property
    def period(self) -> int:
        return self._period

    def update(self, price: float, volume: float | None = None) -> None:
        self._values.append(price)
        self._sum += price
        if len(self._values) > self._period:
            self._sum -= self._values.popleft()

    def calculate(self) -> IndicatorResult:
        if not self.is_ready():
            raise InsufficientDataError()
        return IndicatorResult(self._sum / len(self._values))

    def is_ready(self) -> bool:
        return len(self._values) >= self._period

    def reset(self) -> None:
        self._values.clear()
        self._sum = 0.0


class ExponentialMovingAverage(Indicator):
    """EMA seeded with the simple average of the first ``period`` prices."""

    def __init__(self, period: int) -> None:
        self.name = f"EMA-{period}"
        self._period = period
        self._alpha = 2.0 / (period + 1.0)
        self._values: deque[float] = deque(maxlen=period * 2)
        self._ema: float | None = None
        self._count = 0

    @property
    def period(self) -> int:
        return self._period

    def update(self, price: float, volume: float | None = None) -> None:
        self._values.append(price)
        self._count += 1
        if self._count == self._period:
            self._ema = sum(self._values) / self._period
        elif self._count > self._period and self._ema is not None:
            self._ema = price * self._alpha + self._ema * (1.0 - self._alpha)

    def calculate(self) -> IndicatorResult:
        if self._ema is None:
            raise InsufficientDataError()
        return IndicatorResult(self._ema)

    def is_ready(self) -> bool:
        return self._ema is not None

    def reset(self) -> None:
        self._values.clear()
        self._ema = None
        self._count = 0


class MovingAverageCrossover(Indicator):
    """Difference between a fast and a slow average, signalling when they cross."""

    def __init__(self, fast_ma: Indicator, slow_ma: Indicator) -> None:
        self.name = f"{fast_ma.name}/{slow_ma.name} Crossover"
        self._fast = fast_ma
        self._slow = slow_ma
        self._last_fast: float | None = None
        self._last_slow: float | None = None

    @classmethod
    def with_sma(cls, fast_period: int, slow_period: int) -> MovingAverageCrossover:
        return cls(SimpleMovingAverage(fast_period), SimpleMovingAverage(slow_period))

    @classmethod
    def with_ema(cls, fast_period: int, slow_period: int) -> MovingAverageCrossover:
        return cls(ExponentialMovingAverage(fast_period), ExponentialMovingAverage(slow_period))

    def update(self, price: float, volume: float | None = None) -> None:
        if self.is_ready():
            self._last_fast = self._fast.calculate().value
            self._last_slow = self._slow.calculate().value
        self._fast.update(price, volume)
        self._slow.update(price, volume)

    def calculate(self) -> IndicatorResult:
        if not self.is_ready():
            raise InsufficientDataError()
        fast = self._fast.calculate().value
        slow = self._slow.calculate().value
        signals = []
        if self._last_fast is not None and self._last_slow is not None:
            if self._last_fast <= self._last_slow and fast > slow:
                signals.append(IndicatorSignal(
                    "Golden Cross", 0.8,
                    f"{self._fast.name} crossed above {self._slow.name}"))
            elif self._last_fast >= self._last_slow and fast < slow:
                signals.append(IndicatorSignal(
                    "Death Cross", -0.8,
                    f"{self._fast.name} crossed below {self._slow.name}"))
        return IndicatorResult(fast - slow, signals)

    def is_ready(self) -> bool:
        return self._fast.is_ready() and self._slow.is_ready()

    def reset(self) -> None:
        self._fast.reset()
        self._slow.reset()
        self._last_fast = None
        self._last_slow = None


class RelativeStrengthIndex(Indicator):
    """RSI with Wilder smoothing and overbought/oversold signals."""

    def __init__(self, period: int, overbought: float | None = None,
                 oversold: float | None = None) -> None:
        self.name = f"RSI-{period}"
        self._period = period
        self._prices: deque[float] = deque(maxlen=period + 1)
        self._gains: deque[float] = deque()
        self._losses: deque[float] = deque()
        self._avg_gain: float | None = None
        self._avg_loss: float | None = None
        self._prev_price: float | None = None
        self.overbought_threshold = 70.0 if overbought is None else overbought
        self.oversold_threshold = 30.0 if oversold is None else oversold

    @property
    def period(self) -> int:
        return self._period

    def update(self, price: float, volume: float | None = None) -> None:
        self._prices.append(price)
        if self._prev_price is not None:
            change = price - self._prev_price
            gain = max(change, 0.0)
            loss = max(-change, 0.0)
            self._gains.append(gain)
            self._losses.append(loss)
            if len(self._gains) == self._period:
                self._avg_gain = sum(self._gains) / self._period
                self._avg_loss = sum(self._losses) / self._period
            elif len(self._gains) > self._period and self._avg_gain is not None \
                    and self._avg_loss is not None:
                keep = self._period - 1.0
                self._avg_gain = (self._avg_gain * keep + gain) / self._period
                self._avg_loss = (self._avg_loss * keep + loss) / self._period
                self._gains.popleft()
                self._losses.popleft()
        self._prev_price = price

    def calculate(self) -> IndicatorResult:
        if not self.is_ready():
            raise InsufficientDataError()
        if self._avg_gain is None or self._avg_loss is None:
            raise CalculationError("RSI averages not calculated")
        rs = 100.0 if self._avg_loss == 0.0 else self._avg_gain / self._avg_loss
        rsi = 100.0 - 100.0 / (1.0 + rs)
        signals = []
        if rsi > self.overbought_threshold:
            signals.append(IndicatorSignal(
                "RSI Overbought",
                -0.5 - (rsi - self.overbought_threshold) / 60.0,
                f"RSI is overbought at {rsi:.2f}"))
        elif rsi < self.oversold_threshold:
            signals.append(IndicatorSignal(
                "RSI Oversold",
                0.5 + (self.oversold_threshold - rsi) / 60.0,
                f"RSI is oversold at {rsi:.2f}"))
        return IndicatorResult(rsi, signals)

    def is_ready(self) -> bool:
        return self._avg_gain is not None and self._avg_loss is not None

    def reset(self) -> None:
        self._prices.clear()
        self._gains.clear()
        self._losses.clear()
        self._avg_gain = None
        self._avg_loss = None
        self._prev_price = None


class MACD(Indicator):
    """MACD histogram (MACD line minus its signal line) with crossover signals."""

    def __init__(self, fast_period: int, slow_period: int, signal_period: int) -> None:
        self.name = f"MACD-{fast_period}-{slow_period}-{signal_period}"
        self._fast = ExponentialMovingAverage(fast_period)
        self._slow = ExponentialMovingAverage(slow_period)
        self._signal = ExponentialMovingAverage(signal_period)
        self._histogram: deque[float] = deque(maxlen=3)

    def update(self, price: float, volume: float | None = None) -> None:
        self._fast.update(price, volume)
        self._slow.update(price, volume)
        if self._fast.is_ready() and self._slow.is_ready():
            macd_line = self._fast.calculate().value - self._slow.calculate().value
            self._signal.update(macd_line)
            if self._signal.is_ready():
                self._histogram.append(macd_line - self._signal.calculate().value)

    def calculate(self) -> IndicatorResult:
        if not self.is_ready():
            raise InsufficientDataError()
        macd_line = self._fast.calculate().value - self._slow.calculate().value
        histogram = macd_line - self._signal.calculate().value
        signals = []
        if len(self._histogram) >= 2:
            previous = self._histogram[-2]
            if previous < 0.0 < histogram:
                signals.append(IndicatorSignal(
                    "MACD Bullish Crossover", 0.7, "MACD crossed above signal line"))
            elif previous > 0.0 > histogram:
                signals.append(IndicatorSignal(
                    "MACD Bearish Crossover", -0.7, "MACD crossed below signal line"))
        if macd_line > 0.0 and histogram > 0.0:
            signals.append(IndicatorSignal("MACD Above Zero", 0.3, "MACD is above zero line"))
        elif macd_line < 0.0 and histogram < 0.0:
            signals.append(IndicatorSignal("MACD Below Zero", -0.3, "MACD is below zero line"))
        return IndicatorResult(histogram, signals)

    def is_ready(self) -> bool:
        return self._fast.is_ready() and self._slow.is_ready() and self._signal.is_ready()

    def reset(self) -> None:
        self._fast.reset()
        self._slow.reset()
        self._signal.reset()
        self._histogram.clear()


class VolumeWeightedAveragePrice(Indicator):
    """Rolling VWAP over the last ``period`` observations."""

    def __init__(self, period: int) -> None:
        self.name = f"VWAP-{period}"
        self._period = period
        self._prices: deque[float] = deque(maxlen=period)
        self._volumes: deque[float] = deque(maxlen=period)
        self._products: deque[float] = deque(maxlen=period)

    def update(self, price: float, volume: float | None = None) -> None:
        if volume is None:
            raise MissingDataError("Volume data required for VWAP")
        self._prices.append(price)
        self._volumes.append(volume)
        self._products.append(price * volume)

    def calculate(self) -> IndicatorResult:
        if not self.is_ready():
            raise InsufficientDataError()
        total_volume = sum(self._volumes)
        if total_volume == 0.0:
            raise CalculationError("Total volume is zero")
        vwap = sum(self._products) / total_volume
        last = self._prices[-1]
        signals = []
        if last > vwap:
            ratio = last / vwap
            signals.append(IndicatorSignal(
                "Price Above VWAP", 0.2 + min((ratio - 1.0) * 2.0, 0.3),
                f"Price is {(ratio - 1.0) * 100.0:.2f}% above VWAP"))
        elif last < vwap:
            ratio = vwap / last
            signals.append(IndicatorSignal(
                "Price Below VWAP", -0.2 - min((ratio - 1.0) * 2.0, 0.3),
                f"Price is {(ratio - 1.0) * 100.0:.2f}% below VWAP"))
        return IndicatorResult(vwap, signals)

    def is_ready(self) -> bool:
        return bool(self._prices) and bool(self._volumes)

    def reset(self) -> None:
        self._prices.clear()
        self._volumes.clear()
        self._products.clear()


def update_indicators(indicators: Iterable[Indicator], price: float,
                      volume: float | None = None) -> None:
    """Feed the same observation to every indicator."""
    for indicator in indicators:
        indicator.update(price, volume)


def update_indicators_with_market_data(indicators: Iterable[Indicator],
                                       market_data: MarketData) -> None:
    """Feed a candle's close price and volume to every indicator."""
    update_indicators(indicators, market_data.close_price, market_data.volume)


def reset_indicators(indicators: Iterable[Indicator]) -> None:
    for indicator in indicators:
        indicator.reset()