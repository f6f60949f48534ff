"""
Load configuration from config.yaml and .env. API keys and bot tokens only from env.
"""

from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from signal_bot.core.errors import ConfigurationError

PROVIDERS = ("binance", "coinex", "twelvedata", "alphavantage", "coingecko")
NOTIFIERS = ("telegram", "log")
ATR_SMOOTHING = ("sma", "wilder")


def _env_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path(__file__).resolve().parents[2]
    return root / ".env"


def load_dotenv_if_exists(project_root: Optional[Path] = None) -> None:
    """Load .env from project root if present."""
    path = _env_path(project_root)
    if path.exists():
        load_dotenv(path)


def load_config(config_path: Optional[Path] = None, project_root: Optional[Path] = None) -> "Config":
    """Load config.yaml and overlay with env. Returns Config (not yet validated)."""
    load_dotenv_if_exists(project_root)
    root = project_root or Path(__file__).resolve().parents[2]
    path = config_path or root / "config.yaml"
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    def env(key: str, default: str = "") -> str:
        return os.getenv(key, default).strip()

    def env_bool(key: str, default: bool = False) -> bool:
        return os.getenv(key, str(default)).lower() in ("true", "1", "yes")

    def env_int(key: str, default: int = 0) -> int:
        try:
            return int(os.getenv(key, str(default)))
        except ValueError:
            return default

    def env_float(key: str, default: float = 0.0) -> float:
        try:
            return float(os.getenv(key, str(default)))
        except ValueError:
            return default

    market = data.get("market", {})
    indicators = data.get("indicators", {})
    strategy = data.get("strategy", {})
    schedule = data.get("schedule", {})
    state = data.get("state", {})
    telegram = data.get("telegram", {})
    logging_cfg = data.get("logging", {})

    return Config(
        # Market data
        provider=env("PROVIDER", market.get("provider", "binance")).lower(),
        symbol=env("SYMBOL", market.get("symbol", "BTCUSDT")),
        interval=env("INTERVAL", market.get("interval", "3m")),
        candle_limit=env_int("CANDLE_LIMIT", market.get("candle_limit", 150)),
        binance_market=env("BINANCE_MARKET", market.get("binance_market", "futures")).lower(),
        coingecko_vs_currency=env("COINGECKO_VS_CURRENCY", market.get("coingecko_vs_currency", "usd")),
        coingecko_days=env_int("COINGECKO_DAYS", market.get("coingecko_days", 30)),
        retry_attempts=env_int("RETRY_ATTEMPTS", market.get("retry_attempts", 1)),
        retry_backoff_s=env_float("RETRY_BACKOFF_S", market.get("retry_backoff_s", 2.0)),
        # Credentials (env only)
        binance_api_key=env("BINANCE_API_KEY"),
        binance_api_secret=env("BINANCE_API_SECRET"),
        twelve_data_api_key=env("TWELVE_DATA_API_KEY"),
        alpha_vantage_api_key=env("ALPHA_VANTAGE_API_KEY"),
        coingecko_api_key=env("COINGECKO_API_KEY"),
        # Indicators
        atr_len=env_int("ATR_LEN", indicators.get("atr_len", 20)),
        atr_smoothing=env("ATR_SMOOTHING", indicators.get("atr_smoothing", "sma")).lower(),
        ema_short=env_int("EMA_SHORT", indicators.get("ema_short", 30)),
        ema_long=env_int("EMA_LONG", indicators.get("ema_long", 100)),
        cpr_len=env_int("CPR_LEN", indicators.get("cpr_len", 15)),
        rsi_len=env_int("RSI_LEN", indicators.get("rsi_len", 0)),  # 0 = off
        macd_fast=env_int("MACD_FAST", indicators.get("macd_fast", 12)),
        macd_slow=env_int("MACD_SLOW", indicators.get("macd_slow", 26)),
        macd_signal=env_int("MACD_SIGNAL", indicators.get("macd_signal", 9)),
        # Strategy
        atr_stop_mult=env_float("ATR_STOP_MULT", strategy.get("atr_stop_mult", 1.0)),
        risk_reward_ratio=env_float("RISK_REWARD_RATIO", strategy.get("risk_reward_ratio", 2.0)),
        trailing_stop_atr_mult=env_float("TRAILING_STOP_ATR_MULT", strategy.get("trailing_stop_atr_mult", 0.0)),  # 0 = off
        rsi_buy_min=env_float("RSI_BUY_MIN", strategy.get("rsi_buy_min", 50.0)),
        rsi_sell_max=env_float("RSI_SELL_MAX", strategy.get("rsi_sell_max", 50.0)),
        use_macd_filter=env_bool("USE_MACD_FILTER", strategy.get("use_macd_filter", False)),
        breakout_len=env_int("BREAKOUT_LEN", strategy.get("breakout_len", 0)),  # 0 = off
        # Schedule
        signal_interval_s=env_float("SIGNAL_INTERVAL_S", schedule.get("signal_interval_s", 180.0)),
        monitor_interval_s=env_float("MONITOR_INTERVAL_S", schedule.get("monitor_interval_s", 60.0)),
        report_interval_s=env_float("REPORT_INTERVAL_S", schedule.get("report_interval_s", 3600.0)),
        command_poll_s=env_float("COMMAND_POLL_S", schedule.get("command_poll_s", 5.0)),
        # State
        state_db=env("STATE_DB", state.get("db_path", "state.db")),
        # Telegram
        notifier=env("NOTIFIER", telegram.get("notifier", "telegram")).lower(),
        telegram_bot_token=env("TELEGRAM_BOT_TOKEN"),
        telegram_chat_id=env("TELEGRAM_CHAT_ID", str(telegram.get("chat_id", ""))),
        telegram_commands=env_bool("TELEGRAM_COMMANDS", telegram.get("commands", False)),
        # Logging
        log_level=env("LOG_LEVEL", logging_cfg.get("level", "INFO")),
        log_dir=Path(logging_cfg.get("log_dir", "logs")),
        log_file=logging_cfg.get("log_file", "signal_bot.log"),
    )


class Config:
    """Unified configuration. Treat as immutable after load."""

    __slots__ = (
        "provider", "symbol", "interval", "candle_limit", "binance_market",
        "coingecko_vs_currency", "coingecko_days", "retry_attempts", "retry_backoff_s",
        "binance_api_key", "binance_api_secret", "twelve_data_api_key",
        "alpha_vantage_api_key", "coingecko_api_key",
        "atr_len", "atr_smoothing", "ema_short", "ema_long", "cpr_len", "rsi_len",
        "macd_fast", "macd_slow", "macd_signal",
        "atr_stop_mult", "risk_reward_ratio", "trailing_stop_atr_mult",
        "rsi_buy_min", "rsi_sell_max", "use_macd_filter", "breakout_len",
        "signal_interval_s", "monitor_interval_s", "report_interval_s", "command_poll_s",
        "state_db",
        "notifier", "telegram_bot_token", "telegram_chat_id", "telegram_commands",
        "log_level", "log_dir", "log_file",
    )

    def __init__(
        self,
        provider: str = "binance",
        symbol: str = "BTCUSDT",
        interval: str = "3m",
        candle_limit: int = 150,
        binance_market: str = "futures",
        coingecko_vs_currency: str = "usd",
        coingecko_days: int = 30,
        retry_attempts: int = 1,
        retry_backoff_s: float = 2.0,
        binance_api_key: str = "",
        binance_api_secret: str = "",
        twelve_data_api_key: str = "",
        alpha_vantage_api_key: str = "",
        coingecko_api_key: str = "",
        atr_len: int = 20,
        atr_smoothing: str = "sma",
        ema_short: int = 30,
        ema_long: int = 100,
        cpr_len: int = 15,
        rsi_len: int = 0,
        macd_fast: int = 12,
        macd_slow: int = 26,
        macd_signal: int = 9,
        atr_stop_mult: float = 1.0,
        risk_reward_ratio: float = 2.0,
        trailing_stop_atr_mult: float = 0.0,
        rsi_buy_min: float = 50.0,
        rsi_sell_max: float = 50.0,
        use_macd_filter: bool = False,
        breakout_len: int = 0,
        signal_interval_s: float = 180.0,
        monitor_interval_s: float = 60.0,
        report_interval_s: float = 3600.0,
        command_poll_s: float = 5.0,
        state_db: str = "state.db",
        notifier: str = "telegram",
        telegram_bot_token: str = "",
        telegram_chat_id: str = "",
        telegram_commands: bool = False,
        log_level: str = "INFO",
        log_dir: Path = None,
        log_file: str = "signal_bot.log",
    ):
        self.provider = provider
        self.symbol = symbol
        self.interval = interval
        self.candle_limit = candle_limit
        self.binance_market = binance_market
        self.coingecko_vs_currency = coingecko_vs_currency
        self.coingecko_days = coingecko_days
        self.retry_attempts = retry_attempts
        self.retry_backoff_s = retry_backoff_s
        self.binance_api_key = binance_api_key
        self.binance_api_secret = binance_api_secret
        self.twelve_data_api_key = twelve_data_api_key
        self.alpha_vantage_api_key = alpha_vantage_api_key
        self.coingecko_api_key = coingecko_api_key
        self.atr_len = atr_len
        self.atr_smoothing = atr_smoothing
        self.ema_short = ema_short
        self.ema_long = ema_long
        self.cpr_len = cpr_len
        self.rsi_len = rsi_len
        self.macd_fast = macd_fast
        self.macd_slow = macd_slow
        self.macd_signal = macd_signal
        self.atr_stop_mult = atr_stop_mult
        self.risk_reward_ratio = risk_reward_ratio
        self.trailing_stop_atr_mult = trailing_stop_atr_mult
        self.rsi_buy_min = rsi_buy_min
        self.rsi_sell_max = rsi_sell_max
        self.use_macd_filter = use_macd_filter
        self.breakout_len = breakout_len
        self.signal_interval_s = signal_interval_s
        self.monitor_interval_s = monitor_interval_s
        self.report_interval_s = report_interval_s
        self.command_poll_s = command_poll_s
        self.state_db = state_db
        self.notifier = notifier
        self.telegram_bot_token = telegram_bot_token
        self.telegram_chat_id = telegram_chat_id
        self.telegram_commands = telegram_commands
        self.log_level = log_level
        self.log_dir = Path(log_dir) if log_dir else Path("logs")
        self.log_file = log_file

    def validate(self) -> "Config":
        """Raise ConfigurationError on anything that would break the loop later. Returns self."""
        from signal_bot.indicators.engine import IndicatorSettings
        from signal_bot.utils import timeframes

        if self.provider not in PROVIDERS:
            raise ConfigurationError(f"unknown provider {self.provider!r}, expected one of {', '.join(PROVIDERS)}")
        if self.notifier not in NOTIFIERS:
            raise ConfigurationError(f"unknown notifier {self.notifier!r}")
        if self.provider == "twelvedata" and not self.twelve_data_api_key:
            raise ConfigurationError("TWELVE_DATA_API_KEY is required for provider twelvedata")
        if self.provider == "alphavantage" and not self.alpha_vantage_api_key:
            raise ConfigurationError("ALPHA_VANTAGE_API_KEY is required for provider alphavantage")
        if self.notifier == "telegram" and (not self.telegram_bot_token or not self.telegram_chat_id):
            raise ConfigurationError("TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID are required for the telegram notifier")
        if self.telegram_commands and not self.telegram_bot_token:
            raise ConfigurationError("telegram commands need TELEGRAM_BOT_TOKEN")
        try:
            timeframes.timeframe_minutes(self.interval)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        tables = {
            "coinex": timeframes.COINEX_INTERVALS,
            "twelvedata": timeframes.TWELVE_DATA_INTERVALS,
            "alphavantage": timeframes.ALPHA_VANTAGE_INTERVALS,
        }
        if self.provider in tables:
            timeframes.provider_interval(self.interval, tables[self.provider], self.provider)
        if self.provider == "binance" and self.interval not in timeframes.BINANCE_INTERVALS:
            raise ConfigurationError(f"binance has no {self.interval} klines")
        if self.binance_market not in ("futures", "spot"):
            raise ConfigurationError(f"binance_market must be futures or spot, got {self.binance_market!r}")
        if self.atr_smoothing not in ATR_SMOOTHING:
            raise ConfigurationError(f"atr_smoothing must be one of {', '.join(ATR_SMOOTHING)}")
        for name in ("atr_len", "ema_short", "ema_long", "cpr_len", "candle_limit"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive")
        for name in ("rsi_len", "breakout_len"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be >= 0 (0 disables it)")
        if self.use_macd_filter and not (0 < self.macd_fast < self.macd_slow and self.macd_signal > 0):
            raise ConfigurationError("MACD needs 0 < macd_fast < macd_slow and macd_signal > 0")
        if self.ema_short >= self.ema_long:
            raise ConfigurationError("ema_short must be shorter than ema_long")
        if self.risk_reward_ratio <= 0 or self.atr_stop_mult <= 0:
            raise ConfigurationError("risk_reward_ratio and atr_stop_mult must be positive")
        if self.trailing_stop_atr_mult < 0:
            raise ConfigurationError("trailing_stop_atr_mult must be >= 0 (0 disables it)")
        if self.retry_attempts < 1:
            raise ConfigurationError("retry_attempts must be at least 1")
        required = IndicatorSettings.from_config(self).required_candles()
        if self.candle_limit < required:
            raise ConfigurationError(
                f"candle_limit {self.candle_limit} is below the longest lookback ({required} candles)"
            )
        if self.provider == "coingecko":
            # CoinGecko sizes the window from days, not candle_limit.
            rows = timeframes.coingecko_rows(self.coingecko_days)
            if rows < required:
                raise ConfigurationError(
                    f"coingecko_days {self.coingecko_days} yields about {rows} candles, "
                    f"below the longest lookback ({required} candles)"
                )
        return self

    def secrets(self) -> tuple:
        """Values that must never reach a log line."""
        return (
            self.telegram_bot_token,
            self.binance_api_key,
            self.binance_api_secret,
            self.twelve_data_api_key,
            self.alpha_vantage_api_key,
            self.coingecko_api_key,
        )
