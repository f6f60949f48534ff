"""Indicators: EMA, ATR, CPR band, RSI, MACD histogram."""

from signal_bot.indicators.engine import (
    IndicatorSettings,
    compute,
    ema,
    atr,
    true_range,
    rsi,
    macd_histogram,
    cpr,
    recent_range,
)

__all__ = [
    "IndicatorSettings",
    "compute",
    "ema",
    "atr",
    "true_range",
    "rsi",
    "macd_histogram",
    "cpr",
    "recent_range",
]
