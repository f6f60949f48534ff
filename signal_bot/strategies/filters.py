"""Optional entry filters: RSI, MACD histogram, N-candle breakout."""

from __future__ import annotations
from typing import List

from signal_bot.core.types import Direction, IndicatorSnapshot
from signal_bot.strategies.base import SignalFilter


class RsiFilter(SignalFilter):
    """BUY needs RSI above buy_min, SELL needs RSI below sell_max."""

    requires = "rsi"

    def __init__(self, buy_min: float = 50.0, sell_max: float = 50.0):
        self.buy_min = buy_min
        self.sell_max = sell_max

    def allows(self, direction: Direction, price: float, snapshot: IndicatorSnapshot) -> bool:
        if direction == Direction.BUY:
            return snapshot.rsi > self.buy_min
        return snapshot.rsi < self.sell_max


class MacdFilter(SignalFilter):
    """BUY needs a positive histogram, SELL a negative one."""

    requires = "macd"

    def allows(self, direction: Direction, price: float, snapshot: IndicatorSnapshot) -> bool:
        if direction == Direction.BUY:
            return snapshot.macd_histogram > 0
        return snapshot.macd_histogram < 0


class BreakoutFilter(SignalFilter):
    """Price must break the recent high (BUY) or recent low (SELL)."""

    requires = "breakout"

    def allows(self, direction: Direction, price: float, snapshot: IndicatorSnapshot) -> bool:
        if direction == Direction.BUY:
            return price > snapshot.recent_high
        return price < snapshot.recent_low


def build_filters(config) -> List[SignalFilter]:
    """Filters for every optional indicator enabled in config."""
    filters: List[SignalFilter] = []
    if config.rsi_len > 0:
        filters.append(RsiFilter(config.rsi_buy_min, config.rsi_sell_max))
    if config.use_macd_filter:
        filters.append(MacdFilter())
    if config.breakout_len > 0:
        filters.append(BreakoutFilter())
    return filters
