"""Utils: Telegram notifier/commands, timeframes."""

from signal_bot.utils.telegram import (
    Notifier,
    LogNotifier,
    TelegramNotifier,
    TelegramCommandPoller,
    create_notifier,
)
from signal_bot.utils.timeframes import timeframe_minutes, provider_interval

__all__ = [
    "Notifier",
    "LogNotifier",
    "TelegramNotifier",
    "TelegramCommandPoller",
    "create_notifier",
    "timeframe_minutes",
    "provider_interval",
]
