"""
Exception taxonomy. ProviderError and InsufficientDataError are recoverable
(the tick is skipped); ConfigurationError is fatal at startup; NotificationError
is logged and never aborts the loop.
"""

from __future__ import annotations


class SignalBotError(Exception):
    """Base class for all bot errors."""


class ProviderError(SignalBotError):
    """Network, HTTP or payload failure while fetching market data."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class InsufficientDataError(SignalBotError):
    """Fewer candles than the longest configured lookback."""

    def __init__(self, required: int, available: int):
        super().__init__(f"need {required} candles, have {available}")
        self.required = required
        self.available = available


class ConfigurationError(SignalBotError):
    """Missing credentials, unknown provider or inconsistent parameters."""


class NotificationError(SignalBotError):
    """A message could not be delivered to the notification sink."""
