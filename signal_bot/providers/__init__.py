"""Market data providers: one adapter per exchange/data vendor, selected by config."""

from signal_bot.providers.base import MarketDataAdapter, HttpAdapter, RetryingAdapter
from signal_bot.providers.binance import BinanceAdapter
from signal_bot.providers.coinex import CoinExAdapter
from signal_bot.providers.twelve_data import TwelveDataAdapter
from signal_bot.providers.alpha_vantage import AlphaVantageAdapter
from signal_bot.providers.coingecko import CoinGeckoAdapter
from signal_bot.core.errors import ConfigurationError


def create_adapter(config) -> MarketDataAdapter:
    """Adapter for config.provider, wrapped in RetryingAdapter when retry_attempts > 1."""
    if config.provider == "binance":
        adapter = BinanceAdapter(config.binance_api_key, config.binance_api_secret, market=config.binance_market)
    elif config.provider == "coinex":
        adapter = CoinExAdapter()
    elif config.provider == "twelvedata":
        adapter = TwelveDataAdapter(config.twelve_data_api_key)
    elif config.provider == "alphavantage":
        adapter = AlphaVantageAdapter(config.alpha_vantage_api_key)
    elif config.provider == "coingecko":
        adapter = CoinGeckoAdapter(config.coingecko_vs_currency, config.coingecko_days, config.coingecko_api_key)
    else:
        raise ConfigurationError(f"unknown provider {config.provider!r}")
    if config.retry_attempts > 1:
        return RetryingAdapter(adapter, config.retry_attempts, config.retry_backoff_s)
    return adapter


__all__ = [
    "MarketDataAdapter",
    "HttpAdapter",
    "RetryingAdapter",
    "BinanceAdapter",
    "CoinExAdapter",
    "TwelveDataAdapter",
    "AlphaVantageAdapter",
    "CoinGeckoAdapter",
    "create_adapter",
]
