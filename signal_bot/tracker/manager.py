"""
Position tracker: owns the TrackerState behind a mutex, persists it after each
completed transition and notifies afterwards. A failed notification never undoes
a transition.
"""

from __future__ import annotations
import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from signal_bot.core.types import IndicatorSnapshot, Position, Signal
from signal_bot.tracker import state as sm
from signal_bot.tracker.state import TrackerEvent, TrackerState
from signal_bot.tracker.store import SqliteStateStore
from signal_bot.tracker.messages import format_event, format_new_signal
from signal_bot.utils.telegram import Notifier

logger = logging.getLogger("signal_bot.tracker")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PositionTracker:
    """At most one open position; win/loss tally; notifications on every transition."""

    def __init__(
        self,
        symbol: str,
        notifier: Notifier,
        store: Optional[SqliteStateStore] = None,
        trailing_atr_mult: float = 0.0,
        initial_state: Optional[TrackerState] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.symbol = symbol
        self.notifier = notifier
        self.store = store
        self.trailing_atr_mult = trailing_atr_mult
        self._clock = clock
        self._lock = threading.Lock()
        self._state = initial_state or TrackerState()

    @classmethod
    def restore(cls, symbol: str, notifier: Notifier, store: SqliteStateStore, **kwargs) -> "PositionTracker":
        """Tracker initialized from the store (fresh state if nothing saved)."""
        loaded = store.load()
        if loaded is not None:
            logger.info(
                "Restored state: position=%s stats=%s/%s/%s",
                loaded.position.id if loaded.position else None,
                loaded.stats.total_signals, loaded.stats.successes, loaded.stats.failures,
            )
        return cls(symbol, notifier, store=store, initial_state=loaded, **kwargs)

    def snapshot(self) -> TrackerState:
        with self._lock:
            return self._state

    @property
    def position(self) -> Optional[Position]:
        return self.snapshot().position

    def on_signal(self, signal: Signal, indicators: Optional[IndicatorSnapshot] = None) -> Optional[Position]:
        """Open a position from a non-HOLD decision. Returns None if one is already open."""
        with self._lock:
            transition = sm.open_position(self._state, signal, self.symbol, self._clock(), self.trailing_atr_mult)
            if transition.event is None:
                logger.info("Signal %s ignored: position #%d still open", signal.direction.value, self._state.position.id)
                return None
            self._commit(transition.state)
        event = transition.event
        logger.info(
            "Opened #%d %s %s @ %.4f SL=%.4f TP=%.4f",
            event.position.id, event.position.direction.value, self.symbol,
            event.position.entry_price, event.position.stop_loss, event.position.take_profit,
        )
        self._notify(event, format_new_signal(event.position, indicators))
        return event.position

    def on_price(self, price: float) -> Optional[TrackerEvent]:
        """Monitoring tick. Returns the resolution event, if any."""
        with self._lock:
            before = self._state
            transition = sm.on_price(before, price)
            if transition.state is before:
                return None
            self._commit(transition.state)
        event = transition.event
        if event is None:
            logger.debug("Trailing stop moved to %.4f", transition.state.position.trailing_stop)
            return None
        logger.info(
            "Resolved #%d %s %s at %.4f (%s)",
            event.position.id, event.outcome.value, event.position.direction.value, price, event.exit_reason,
        )
        self._notify(event)
        return event

    def reset(self) -> TrackerEvent:
        """Clear the position and counters without recording an outcome."""
        with self._lock:
            transition = sm.reset(self._state)
            self._commit(transition.state)
        logger.info("Tracker reset")
        self._notify(transition.event)
        return transition.event

    def save(self) -> None:
        if self.store is None:
            return
        with self._lock:
            self.store.save(self._state)

    def _commit(self, new_state: TrackerState) -> None:
        # Caller holds the lock.
        self._state = new_state
        if self.store is not None:
            try:
                self.store.save(new_state)
            except Exception as e:
                logger.exception("Could not persist state: %s", e)

    def _notify(self, event: TrackerEvent, text: Optional[str] = None) -> None:
        try:
            self.notifier.send(text or format_event(event, self.symbol))
        except Exception as e:
            logger.error("Notification for %s event failed: %s", event.kind.value, e)
