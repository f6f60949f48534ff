"""Abstract strategy and entry filter."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from signal_bot.core.types import Candle, Direction, IndicatorSnapshot, Signal


class BaseStrategy(ABC):
    """Strategy computes an indicator snapshot and may return a Signal for the newest candle."""

    @abstractmethod
    def compute_indicators(self, candles: Sequence[Candle]) -> IndicatorSnapshot:
        """Indicator snapshot for the window. Raises InsufficientDataError on short windows."""
        pass

    @abstractmethod
    def get_signal(self, candles: Sequence[Candle]) -> Optional[Signal]:
        """Signal for the newest candle, or None for HOLD."""
        pass


class SignalFilter(ABC):
    """
    Extra gate on a candidate direction. `requires` names the indicator the
    filter reads; it must be enabled in the snapshot.
    """

    requires: str = ""

    @abstractmethod
    def allows(self, direction: Direction, price: float, snapshot: IndicatorSnapshot) -> bool:
        pass
