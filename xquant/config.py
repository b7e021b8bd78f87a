"""Application configuration loaded from a JSON file."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from os import PathLike
from pathlib import Path
from typing import Any, ClassVar

from xquant.errors import ConfigError

_MISSING = object()

# Optional text fields of the exchange section; absent or null means None.
_OPTIONAL_EXCHANGE_TEXT = ("api_key", "api_secret", "base_url")


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 3030


@dataclass
class ExchangeConfig:
    name: str = "Mock"
    api_key: str | None = None
    api_secret: str | None = None
    base_url: str | None = None
    use_mock: bool = True
    initial_balance: dict[str, float] | None = None
    fee_rate: float = 0.0
    slippage: float = 0.0


@dataclass
class LoggingConfig:
    level: str = "info"
    file_path: str | None = None


def _value(section: Mapping[str, Any], where: str, key: str, kinds: tuple[type, ...],
           default: Any = _MISSING, nullable: bool = False) -> Any:
    if key not in section:
        if default is _MISSING:
            raise ConfigError(f"Failed to parse config file: missing field `{where}.{key}`")
        return default
    value = section[key]
    if value is None and nullable:
        return None
    if (isinstance(value, bool) and bool not in kinds) or not isinstance(value, kinds):
        raise ConfigError(f"Failed to parse config file: invalid type for `{where}.{key}`")
    return value


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    if key not in data:
        raise ConfigError(f"Failed to parse config file: missing field `{key}`")
    section = data[key]
    if not isinstance(section, Mapping):
        raise ConfigError(f"Failed to parse config file: `{key}` must be an object")
    return section


def _balances(raw: Any) -> dict[str, float] | None:
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise ConfigError("Failed to parse config file: `exchange.initial_balance` must be an object")
    balances = {}
    for asset, amount in raw.items():
        if isinstance(amount, bool) or not isinstance(amount, (int, float)):
            raise ConfigError(f"Failed to parse config file: invalid balance for `{asset}`")
        balances[str(asset)] = float(amount)
    return balances


@dataclass
class Config:
    """Top-level configuration of server, exchange and logging."""

    DEFAULT_PATH: ClassVar[str] = "config.json"

    server: ServerConfig = field(default_factory=ServerConfig)
    exchange: ExchangeConfig = field(default_factory=ExchangeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, path: str | PathLike[str] = DEFAULT_PATH) -> Config:
        """Load the file at ``path``; fall back to defaults when it does not exist."""
        config_path = Path(path)
        if not config_path.exists():
            return cls()
        try:
            handle = config_path.open(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Failed to open config file: {exc}") from exc
        with handle:
            try:
                contents = handle.read()
            except (OSError, UnicodeDecodeError) as exc:
                raise ConfigError(f"Failed to read config file: {exc}") from exc
        try:
            data = json.loads(contents)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Failed to parse config file: {exc}") from exc
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Any) -> Config:
        """Build a configuration from parsed JSON, validating every field."""
        if not isinstance(data, Mapping):
            raise ConfigError("Failed to parse config file: expected an object")

        server = _section(data, "server")
        port = _value(server, "server", "port", (int,))
        if not 0 <= port <= 65535:
            raise ConfigError(f"Failed to parse config file: port {port} out of range")

        exchange = _section(data, "exchange")
        logging = _section(data, "logging")
        number = (int, float)
        optional_text = {
            key: _value(exchange, "exchange", key, (str,), None, nullable=True)
            for key in _OPTIONAL_EXCHANGE_TEXT
        }
        return cls(
            server=ServerConfig(host=_value(server, "server", "host", (str,)), port=port),
            exchange=ExchangeConfig(
                name=_value(exchange, "exchange", "name", (str,)),
                use_mock=_value(exchange, "exchange", "use_mock", (bool,)),
                initial_balance=_balances(exchange.get("initial_balance")),
                fee_rate=float(_value(exchange, "exchange", "fee_rate", number, 0.0)),
                slippage=float(_value(exchange, "exchange", "slippage", number, 0.0)),
                **optional_text,
            ),
            logging=LoggingConfig(
                level=_value(logging, "logging", "level", (str,)),
                file_path=_value(logging, "logging", "file_path", (str,), None, nullable=True),
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the configuration as plain JSON-compatible data."""
        return asdict(self)