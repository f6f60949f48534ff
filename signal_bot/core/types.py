"""
Core data types: candles, indicator snapshots, signals, positions and stats.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import FrozenSet, Optional


class Direction(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True)
class Candle:
    """OHLCV candle, normalized from any provider."""
    open_time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


@dataclass(frozen=True)
class IndicatorSnapshot:
    """
    Indicator values for the newest candle of a window.
    Optional fields are set only when listed in `enabled`.
    """
    atr: float
    ema_short: float
    ema_long: float
    cpr_upper: float
    cpr_lower: float
    rsi: Optional[float] = None
    macd_histogram: Optional[float] = None
    recent_high: Optional[float] = None
    recent_low: Optional[float] = None
    enabled: FrozenSet[str] = frozenset()

    def has(self, name: str) -> bool:
        return name in self.enabled


@dataclass(frozen=True)
class Signal:
    """Directional recommendation with risk levels."""
    direction: Direction
    entry_price: float
    stop_loss: float
    take_profit: float
    atr: float = 0.0


@dataclass(frozen=True)
class Position:
    """The single open position. Only trailing_stop changes while open."""
    id: int
    symbol: str
    direction: Direction
    entry_price: float
    stop_loss: float
    take_profit: float
    opened_at: datetime
    trailing_stop: Optional[float] = None
    trail_distance: float = 0.0

    @property
    def effective_stop(self) -> float:
        return self.trailing_stop if self.trailing_stop is not None else self.stop_loss


@dataclass(frozen=True)
class PerformanceStats:
    """Win/loss tally over resolved positions."""
    total_signals: int = 0
    successes: int = 0
    failures: int = 0

    @property
    def success_ratio(self) -> float:
        """Percentage of resolved positions that hit take-profit."""
        resolved = self.successes + self.failures
        if resolved == 0:
            return 0.0
        return self.successes / resolved * 100.0
