"""Unit tests for core.config."""

import pytest
from signal_bot.core.config import Config, load_config
from signal_bot.core.errors import ConfigurationError


def valid(**overrides):
    values = dict(notifier="log", state_db="")
    values.update(overrides)
    return Config(**values)


def test_defaults_validate():
    assert valid().validate().provider == "binance"


def test_telegram_notifier_needs_credentials():
    with pytest.raises(ConfigurationError):
        valid(notifier="telegram").validate()
    valid(notifier="telegram", telegram_bot_token="t", telegram_chat_id="1").validate()


@pytest.mark.parametrize("overrides", [
    {"provider": "kraken"},
    {"provider": "twelvedata"},
    {"provider": "alphavantage"},
    {"notifier": "email"},
    {"ema_short": 100, "ema_long": 100},
    {"atr_len": 0},
    {"risk_reward_ratio": 0},
    {"atr_smoothing": "ema"},
    {"candle_limit": 50},
    {"retry_attempts": 0},
    {"use_macd_filter": True, "macd_fast": 26, "macd_slow": 12},
    {"telegram_commands": True},
])
def test_invalid_configs(overrides):
    with pytest.raises(ConfigurationError):
        valid(**overrides).validate()


def test_load_config_yaml_and_env(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text(
        "market:\n  provider: coinex\n  symbol: ETHUSDT\n  candle_limit: 200\n"
        "indicators:\n  ema_short: 21\n  cpr_len: 10\n"
        "strategy:\n  risk_reward_ratio: 3.0\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("INTERVAL", "5m")
    monkeypatch.setenv("EMA_LONG", "55")
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "secret")
    monkeypatch.delenv("PROVIDER", raising=False)
    monkeypatch.delenv("SYMBOL", raising=False)
    monkeypatch.delenv("CANDLE_LIMIT", raising=False)
    monkeypatch.delenv("EMA_SHORT", raising=False)
    monkeypatch.delenv("RISK_REWARD_RATIO", raising=False)
    config = load_config(path, project_root=tmp_path)
    assert config.provider == "coinex"
    assert config.symbol == "ETHUSDT"
    assert config.candle_limit == 200
    assert config.interval == "5m"
    assert config.ema_short == 21
    assert config.ema_long == 55
    assert config.risk_reward_ratio == 3.0
    assert config.telegram_bot_token == "secret"


def test_load_config_bad_env_number_falls_back(tmp_path, monkeypatch):
    monkeypatch.setenv("ATR_LEN", "twenty")
    config = load_config(tmp_path / "missing.yaml", project_root=tmp_path)
    assert config.atr_len == 20


def test_interval_checked_against_provider():
    with pytest.raises(ConfigurationError):
        valid(provider="alphavantage", alpha_vantage_api_key="k", interval="3m").validate()
    with pytest.raises(ConfigurationError):
        valid(interval="3 minutes").validate()
    valid(provider="alphavantage", alpha_vantage_api_key="k", interval="5m").validate()


def test_coingecko_days_must_cover_lookback():
    # 1 day of CoinGecko OHLC is 48 thirty-minute candles, short of ema_long=100.
    with pytest.raises(ConfigurationError):
        valid(provider="coingecko", symbol="bitcoin", coingecko_days=1).validate()
    with pytest.raises(ConfigurationError):
        valid(provider="coingecko", symbol="bitcoin", coingecko_days=16).validate()
    valid(provider="coingecko", symbol="bitcoin").validate()
    valid(provider="coingecko", symbol="bitcoin", coingecko_days=1, ema_short=10, ema_long=30).validate()


def test_binance_interval_must_be_a_kline_interval():
    with pytest.raises(ConfigurationError):
        valid(interval="45m").validate()
    valid(interval="8h").validate()
