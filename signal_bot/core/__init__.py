"""Core: config, types, errors, logging."""

from signal_bot.core.config import load_config, Config
from signal_bot.core.errors import (
    SignalBotError,
    ProviderError,
    InsufficientDataError,
    ConfigurationError,
    NotificationError,
)
from signal_bot.core.types import (
    Candle,
    Direction,
    IndicatorSnapshot,
    Signal,
    Position,
    PerformanceStats,
)
from signal_bot.core.logger import setup_logging

__all__ = [
    "load_config",
    "Config",
    "SignalBotError",
    "ProviderError",
    "InsufficientDataError",
    "ConfigurationError",
    "NotificationError",
    "Candle",
    "Direction",
    "IndicatorSnapshot",
    "Signal",
    "Position",
    "PerformanceStats",
    "setup_logging",
]
