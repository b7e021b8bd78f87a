"""Trading library: simulated exchange, execution algorithms, indicators, risk checks, backtesting."""

__version__ = "0.1.0"