"""
CPR + EMA trend strategy.
BUY: price above CPR upper and EMA short above EMA long.
SELL: price below CPR lower and EMA short below EMA long.
SL/TP from ATR multiples.
"""

from __future__ import annotations
import logging
from typing import Iterable, Optional, Sequence

from signal_bot.core.errors import ConfigurationError
from signal_bot.core.types import Candle, Direction, IndicatorSnapshot, Signal
from signal_bot.indicators.engine import IndicatorSettings, compute
from signal_bot.strategies.base import BaseStrategy, SignalFilter
from signal_bot.strategies.filters import build_filters

logger = logging.getLogger("signal_bot.strategies.cpr_ema")


def decide(
    current_price: float,
    snapshot: IndicatorSnapshot,
    risk_reward_ratio: float,
    stop_multiplier: float = 1.0,
    filters: Iterable[SignalFilter] = (),
) -> Optional[Signal]:
    """
    Map price + snapshot to a Signal, or None for HOLD. Pure and deterministic.
    stop_loss = price -/+ atr * stop_multiplier, take_profit = price +/- atr * risk_reward_ratio.
    """
    if current_price > snapshot.cpr_upper and snapshot.ema_short > snapshot.ema_long:
        direction = Direction.BUY
    elif current_price < snapshot.cpr_lower and snapshot.ema_short < snapshot.ema_long:
        direction = Direction.SELL
    else:
        return None

    for f in filters:
        if not snapshot.has(f.requires):
            raise ConfigurationError(f"{type(f).__name__} needs indicator {f.requires!r}, which is not enabled")
        if not f.allows(direction, current_price, snapshot):
            return None

    risk = snapshot.atr * stop_multiplier
    reward = snapshot.atr * risk_reward_ratio
    if direction == Direction.BUY:
        stop, tp = current_price - risk, current_price + reward
    else:
        stop, tp = current_price + risk, current_price - reward
    return Signal(
        direction=direction,
        entry_price=current_price,
        stop_loss=stop,
        take_profit=tp,
        atr=snapshot.atr,
    )


class CprEmaStrategy(BaseStrategy):
    """Indicator engine + decide() + filters, all parameterized from Config."""

    def __init__(self, config):
        self.settings = IndicatorSettings.from_config(config)
        self.risk_reward_ratio = config.risk_reward_ratio
        self.stop_multiplier = config.atr_stop_mult
        self.filters = build_filters(config)

    def compute_indicators(self, candles: Sequence[Candle]) -> IndicatorSnapshot:
        return compute(candles, self.settings)

    def get_signal(self, candles: Sequence[Candle]) -> Optional[Signal]:
        """Uses the newest close as the current price."""
        snapshot = self.compute_indicators(candles)
        price = candles[-1].close
        logger.debug(
            "price=%.4f atr=%.4f ema_short=%.4f ema_long=%.4f cpr=[%.4f, %.4f]",
            price, snapshot.atr, snapshot.ema_short, snapshot.ema_long,
            snapshot.cpr_lower, snapshot.cpr_upper,
        )
        return self.evaluate(price, snapshot)

    def evaluate(self, price: float, snapshot: IndicatorSnapshot) -> Optional[Signal]:
        return decide(price, snapshot, self.risk_reward_ratio, self.stop_multiplier, self.filters)
