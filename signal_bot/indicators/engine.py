"""
Indicator engine: EMA, ATR, CPR band, plus optional RSI, MACD histogram and
recent high/low. Pure functions of the candle window, no hidden state.

CPR here is the simplified pivot proxy the signal rules were tuned on:
upper = (max(high) + min(low)) / 2, lower = mean(close) over the trailing window.
It is not the floor-trader CPR formula.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from signal_bot.core.errors import InsufficientDataError
from signal_bot.core.types import Candle, IndicatorSnapshot


@dataclass(frozen=True)
class IndicatorSettings:
    """Lookbacks for one engine run. rsi_len / breakout_len of 0 and macd=None disable them."""
    atr_len: int = 20
    ema_short: int = 30
    ema_long: int = 100
    cpr_len: int = 15
    atr_smoothing: str = "sma"
    rsi_len: int = 0
    macd: Optional[Tuple[int, int, int]] = None
    breakout_len: int = 0

    @classmethod
    def from_config(cls, config) -> "IndicatorSettings":
        macd = None
        if getattr(config, "use_macd_filter", False):
            macd = (config.macd_fast, config.macd_slow, config.macd_signal)
        return cls(
            atr_len=config.atr_len,
            ema_short=config.ema_short,
            ema_long=config.ema_long,
            cpr_len=config.cpr_len,
            atr_smoothing=config.atr_smoothing,
            rsi_len=config.rsi_len,
            macd=macd,
            breakout_len=config.breakout_len,
        )

    def enabled(self) -> frozenset:
        names = {"atr", "ema", "cpr"}
        if self.rsi_len > 0:
            names.add("rsi")
        if self.macd is not None:
            names.add("macd")
        if self.breakout_len > 0:
            names.add("breakout")
        return frozenset(names)

    def required_candles(self) -> int:
        """Smallest window for which every enabled indicator is defined."""
        lookbacks = [self.atr_len, self.ema_short, self.ema_long, self.cpr_len]
        if self.rsi_len > 0:
            lookbacks.append(self.rsi_len + 1)
        if self.macd is not None:
            _, slow, signal = self.macd
            lookbacks.append(slow + signal - 1)
        if self.breakout_len > 0:
            lookbacks.append(self.breakout_len + 1)
        return max(lookbacks)


def ema(values: Sequence[float], period: int) -> List[float]:
    """
    EMA seeded with the first value, k = 2 / (period + 1).
    The first period-1 warm-up values are dropped: len(out) = max(0, len(values) - period + 1).
    """
    if period <= 0:
        raise ValueError("period must be positive")
    if len(values) < period:
        return []
    series = pd.Series(values, dtype=float).ewm(span=period, adjust=False).mean()
    return series.iloc[period - 1:].tolist()


def _wilder(values: Sequence[float], period: int) -> List[float]:
    """Wilder smoothing seeded with the simple mean of the first `period` values."""
    out = [float(np.mean(values[:period]))]
    for value in values[period:]:
        out.append((out[-1] * (period - 1) + value) / period)
    return out


def true_range(candles: Sequence[Candle]) -> pd.Series:
    """max(high-low, |high-prev_close|, |low-prev_close|); first candle is high-low."""
    high = pd.Series([c.high for c in candles], dtype=float)
    low = pd.Series([c.low for c in candles], dtype=float)
    prev_close = pd.Series([c.close for c in candles], dtype=float).shift()
    ranges = pd.concat([high - low, (high - prev_close).abs(), (low - prev_close).abs()], axis=1)
    return ranges.max(axis=1)


def atr(candles: Sequence[Candle], period: int, smoothing: str = "sma") -> List[float]:
    """Average true range series of length len(candles) - period + 1."""
    if period <= 0:
        raise ValueError("period must be positive")
    if len(candles) < period:
        raise InsufficientDataError(period, len(candles))
    tr = true_range(candles)
    if smoothing == "wilder":
        return _wilder(tr.tolist(), period)
    if smoothing != "sma":
        raise ValueError(f"unknown ATR smoothing: {smoothing}")
    return tr.rolling(period).mean().iloc[period - 1:].tolist()


def rsi(closes: Sequence[float], period: int) -> float:
    """Wilder RSI of the newest close. Flat input gives 50, no losses gives 100."""
    if len(closes) < period + 1:
        raise InsufficientDataError(period + 1, len(closes))
    delta = np.diff(np.asarray(closes, dtype=float))
    avg_gain = _wilder(np.clip(delta, 0, None).tolist(), period)[-1]
    avg_loss = _wilder(np.clip(-delta, 0, None).tolist(), period)[-1]
    if avg_loss == 0:
        return 100.0 if avg_gain > 0 else 50.0
    return 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)


def macd_histogram(closes: Sequence[float], fast: int, slow: int, signal: int) -> float:
    """MACD line (EMA fast - EMA slow) minus its signal EMA, for the newest close."""
    required = slow + signal - 1
    if len(closes) < required:
        raise InsufficientDataError(required, len(closes))
    series = pd.Series(closes, dtype=float)
    line = series.ewm(span=fast, adjust=False).mean() - series.ewm(span=slow, adjust=False).mean()
    line = line.iloc[slow - 1:]
    signal_line = line.ewm(span=signal, adjust=False).mean()
    return float(line.iloc[-1] - signal_line.iloc[-1])


def cpr(candles: Sequence[Candle], length: int) -> Tuple[float, float]:
    """Simplified CPR band (upper, lower) over the trailing `length` candles."""
    if len(candles) < length:
        raise InsufficientDataError(length, len(candles))
    window = candles[-length:]
    highs = np.array([c.high for c in window])
    lows = np.array([c.low for c in window])
    closes = np.array([c.close for c in window])
    upper = (highs.max() + lows.min()) / 2.0
    lower = closes.mean()
    return float(upper), float(lower)


def recent_range(candles: Sequence[Candle], length: int) -> Tuple[float, float]:
    """Highest high and lowest low of the `length` candles before the newest one."""
    if len(candles) < length + 1:
        raise InsufficientDataError(length + 1, len(candles))
    window = candles[-length - 1:-1]
    return max(c.high for c in window), min(c.low for c in window)


def compute(candles: Sequence[Candle], settings) -> IndicatorSnapshot:
    """
    Snapshot for the newest candle. `settings` is IndicatorSettings or a Config.
    Raises InsufficientDataError when the window is shorter than the longest lookback.
    """
    if not isinstance(settings, IndicatorSettings):
        settings = IndicatorSettings.from_config(settings)
    required = settings.required_candles()
    if len(candles) < required:
        raise InsufficientDataError(required, len(candles))

    closes = [c.close for c in candles]
    upper, lower = cpr(candles, settings.cpr_len)
    values = dict(
        atr=atr(candles, settings.atr_len, settings.atr_smoothing)[-1],
        ema_short=ema(closes, settings.ema_short)[-1],
        ema_long=ema(closes, settings.ema_long)[-1],
        cpr_upper=upper,
        cpr_lower=lower,
    )
    if settings.rsi_len > 0:
        values["rsi"] = rsi(closes, settings.rsi_len)
    if settings.macd is not None:
        values["macd_histogram"] = macd_histogram(closes, *settings.macd)
    if settings.breakout_len > 0:
        values["recent_high"], values["recent_low"] = recent_range(candles, settings.breakout_len)
    return IndicatorSnapshot(enabled=settings.enabled(), **values)
