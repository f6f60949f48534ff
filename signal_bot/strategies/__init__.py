"""Strategies: base interface, entry filters and the CPR/EMA decision."""

from signal_bot.strategies.base import BaseStrategy, SignalFilter
from signal_bot.strategies.filters import RsiFilter, MacdFilter, BreakoutFilter, build_filters
from signal_bot.strategies.cpr_ema import CprEmaStrategy, decide

__all__ = [
    "BaseStrategy",
    "SignalFilter",
    "RsiFilter",
    "MacdFilter",
    "BreakoutFilter",
    "build_filters",
    "CprEmaStrategy",
    "decide",
]
