"""Canonical interval strings ('3m', '1h', '1d') and their provider spellings."""

from signal_bot.core.errors import ConfigurationError


def timeframe_minutes(tf: str) -> int:
    """Convert Binance-style timeframe (e.g. '5m', '1h', '1d') to minutes."""
    tf = tf.strip().lower()
    if tf.endswith("m"):
        return int(tf[:-1])
    if tf.endswith("h"):
        return int(tf[:-1]) * 60
    if tf.endswith("d"):
        return int(tf[:-1]) * 60 * 24
    raise ValueError(f"Unsupported timeframe: {tf}")


COINEX_INTERVALS = {
    1: "1min", 3: "3min", 5: "5min", 15: "15min", 30: "30min",
    60: "1hour", 120: "2hour", 240: "4hour", 360: "6hour", 720: "12hour",
    1440: "1day", 4320: "3day", 10080: "1week",
}
TWELVE_DATA_INTERVALS = {
    1: "1min", 5: "5min", 15: "15min", 30: "30min", 45: "45min",
    60: "1h", 120: "2h", 240: "4h", 1440: "1day", 10080: "1week",
}
ALPHA_VANTAGE_INTERVALS = {1: "1min", 5: "5min", 15: "15min", 30: "30min", 60: "60min"}


def provider_interval(tf: str, table: dict, provider: str) -> str:
    """Translate a canonical interval through a provider table; ConfigurationError if unsupported."""
    try:
        minutes = timeframe_minutes(tf)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    try:
        return table[minutes]
    except KeyError:
        raise ConfigurationError(f"{provider} has no {tf} candles") from None


# Kline intervals accepted by Binance that timeframe_minutes can parse.
BINANCE_INTERVALS = frozenset({
    "1m", "3m", "5m", "15m", "30m", "1h", "2h", "4h", "6h", "8h", "12h", "1d", "3d",
})


def coingecko_rows(days: int) -> int:
    """Rows returned by CoinGecko /ohlc for `days`: 30m candles up to 2 days, 4h up to 30, then 4d."""
    if days <= 0:
        return 0
    if days <= 2:
        return days * 48
    if days <= 30:
        return days * 6
    return days // 4
