"""Exception hierarchy used throughout the trading system."""

from __future__ import annotations


class TradingError(Exception):
    """Base class for every error raised by the trading system."""

    label = "Trading error"

    def __init__(self, detail: object = None) -> None:
        self.detail = detail
        message = self.label if detail is None else f"{self.label}: {detail}"
        super().__init__(message)


class OrderNotFoundError(TradingError):
    label = "Order not found"


class DataNotFoundError(TradingError):
    label = "Data not found"


class InvalidParameterError(TradingError):
    label = "Invalid parameter"


class ExecutionError(TradingError):
    label = "Execution error"


class AlreadyRunningError(TradingError):
    label = "Already running"


class ExchangeError(TradingError):
    label = "Exchange error"


class ConfigError(TradingError):
    label = "Configuration error"


class SerializationError(TradingError):
    label = "Serialization error"


class ChannelNotFoundError(TradingError):
    label = "Channel not found"


class NotConnectedError(TradingError):
    label = "Not connected"


class NotSubscribedError(TradingError):
    label = "Not subscribed to"

    def __init__(self, detail: object = None) -> None:
        self.detail = detail
        message = self.label if detail is None else f"{self.label} {detail}"
        Exception.__init__(self, message)


class LockError(TradingError):
    label = "Lock error"


class TaskNotFoundError(TradingError):
    label = "Task not found"


class NoAvailableProviderError(TradingError):
    label = "No available provider"


class InsufficientBalanceError(TradingError):
    label = "Insufficient balance"


class RiskLimitExceededError(TradingError):
    label = "Risk limit exceeded"


class ParseError(TradingError):
    label = "Parse error"


class UnknownError(TradingError):
    label = "Unknown error"


class InsufficientDataError(TradingError):
    label = "Insufficient data"


class CalculationError(TradingError):
    label = "Calculation error"


class MissingDataError(TradingError):
    label = "Missing data"


class DuplicateStrategyError(TradingError):
    label = "Duplicate strategy"


class StrategyNotFoundError(TradingError):
    label = "Strategy not found"