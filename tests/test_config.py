import json

import pytest

from xquant.config import Config, ExchangeConfig
from xquant.errors import ConfigError


def _valid_data():
    return {
        "server": {"host": "0.0.0.0", "port": 8080},
        "exchange": {"name": "Mock", "use_mock": True},
        "logging": {"level": "debug"},
    }


def test_defaults():
    config = Config()
    assert config.server.host == "127.0.0.1"
    assert config.server.port == 3030
    assert config.exchange.name == "Mock"
    assert config.exchange.use_mock is True
    assert config.exchange.api_key is None
    assert config.logging.level == "info"
    assert config.logging.file_path is None


def test_load_missing_file_gives_defaults(tmp_path):
    assert Config.load(tmp_path / "absent.json") == Config()


def test_load_round_trip(tmp_path):
    original = Config(exchange=ExchangeConfig(api_key="placeholder", initial_balance={"USDT": 5.0}))
    path = tmp_path / "config.json"
    path.write_text(json.dumps(original.to_dict()), encoding="utf-8")
    assert Config.load(path) == original


def test_optional_fields_may_be_absent():
    config = Config.from_dict(_valid_data())
    assert config.server.port == 8080
    assert config.exchange.base_url is None
    assert config.exchange.initial_balance is None
    assert config.logging.level == "debug"


def test_invalid_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError, match="Failed to parse config file"):
        Config.load(path)


def test_missing_required_field():
    data = _valid_data()
    del data["exchange"]["use_mock"]
    with pytest.raises(ConfigError, match="use_mock"):
        Config.from_dict(data)


def test_port_out_of_range():
    data = _valid_data()
    data["server"]["port"] = 70000
    with pytest.raises(ConfigError):
        Config.from_dict(data)


def test_wrong_type():
    data = _valid_data()
    data["server"]["host"] = 12
    with pytest.raises(ConfigError):
        Config.from_dict(data)


def test_unopenable_path(tmp_path):
    with pytest.raises(ConfigError, match="Failed to open config file"):
        Config.load(tmp_path)