"""
Single-position state machine: IDLE -> OPEN -> (WIN | LOSS) -> IDLE.
Transitions are pure: they take a TrackerState and return a new one plus the event.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from signal_bot.core.types import Direction, PerformanceStats, Position, Signal


class EventKind(str, Enum):
    OPENED = "opened"
    RESOLVED = "resolved"
    RESET = "reset"


class Outcome(str, Enum):
    WIN = "WIN"
    LOSS = "LOSS"


@dataclass(frozen=True)
class TrackerState:
    """Everything the tracker owns. position is None when IDLE."""
    position: Optional[Position] = None
    stats: PerformanceStats = field(default_factory=PerformanceStats)
    next_id: int = 1

    @property
    def is_open(self) -> bool:
        return self.position is not None


@dataclass(frozen=True)
class TrackerEvent:
    kind: EventKind
    stats: PerformanceStats
    position: Optional[Position] = None
    outcome: Optional[Outcome] = None
    exit_reason: str = ""  # "take_profit" | "stop_loss" | "trailing_stop"
    price: Optional[float] = None


@dataclass(frozen=True)
class Transition:
    state: TrackerState
    event: Optional[TrackerEvent] = None


def open_position(
    state: TrackerState,
    signal: Signal,
    symbol: str,
    now: datetime,
    trailing_atr_mult: float = 0.0,
) -> Transition:
    """IDLE -> OPEN. No-op while a position is already open."""
    if state.is_open:
        return Transition(state)
    trailing = trailing_atr_mult > 0
    position = Position(
        id=state.next_id,
        symbol=symbol,
        direction=signal.direction,
        entry_price=signal.entry_price,
        stop_loss=signal.stop_loss,
        take_profit=signal.take_profit,
        opened_at=now,
        trailing_stop=signal.stop_loss if trailing else None,
        trail_distance=signal.atr * trailing_atr_mult if trailing else 0.0,
    )
    new_state = replace(state, position=position, next_id=state.next_id + 1)
    return Transition(new_state, TrackerEvent(EventKind.OPENED, new_state.stats, position, price=signal.entry_price))


def _resolution(position: Position, price: float) -> Optional[tuple]:
    stop = position.effective_stop
    stop_reason = "trailing_stop" if position.trailing_stop is not None and stop != position.stop_loss else "stop_loss"
    if position.direction == Direction.BUY:
        if price >= position.take_profit:
            return Outcome.WIN, "take_profit"
        if price <= stop:
            return Outcome.LOSS, stop_reason
    else:
        if price <= position.take_profit:
            return Outcome.WIN, "take_profit"
        if price >= stop:
            return Outcome.LOSS, stop_reason
    return None


def _ratchet(position: Position, price: float) -> Position:
    if position.trailing_stop is None or position.trail_distance <= 0:
        return position
    if position.direction == Direction.BUY:
        trail = max(position.trailing_stop, price - position.trail_distance)
    else:
        trail = min(position.trailing_stop, price + position.trail_distance)
    if trail == position.trailing_stop:
        return position
    return replace(position, trailing_stop=trail)


def on_price(state: TrackerState, price: float) -> Transition:
    """
    Monitoring tick. Resolves on take-profit or (trailing) stop; otherwise ratchets
    the trailing stop in the position's favour only.
    """
    position = state.position
    if position is None:
        return Transition(state)
    resolved = _resolution(position, price)
    if resolved is None:
        moved = _ratchet(position, price)
        if moved is position:
            return Transition(state)
        return Transition(replace(state, position=moved))
    outcome, reason = resolved
    stats = state.stats
    stats = PerformanceStats(
        total_signals=stats.total_signals + 1,
        successes=stats.successes + (1 if outcome == Outcome.WIN else 0),
        failures=stats.failures + (1 if outcome == Outcome.LOSS else 0),
    )
    new_state = replace(state, position=None, stats=stats)
    return Transition(new_state, TrackerEvent(EventKind.RESOLVED, stats, position, outcome, reason, price))


def reset(state: TrackerState) -> Transition:
    """Manual reset: drop the position and zero the stats. The id sequence keeps counting."""
    new_state = TrackerState(next_id=state.next_id)
    return Transition(new_state, TrackerEvent(EventKind.RESET, new_state.stats, state.position))


def to_dict(state: TrackerState) -> dict[str, Any]:
    """JSON-compatible form of the state."""
    position = None
    if state.position is not None:
        p = state.position
        position = {
            "id": p.id,
            "symbol": p.symbol,
            "direction": p.direction.value,
            "entry_price": p.entry_price,
            "stop_loss": p.stop_loss,
            "take_profit": p.take_profit,
            "opened_at": p.opened_at.isoformat(),
            "trailing_stop": p.trailing_stop,
            "trail_distance": p.trail_distance,
        }
    return {
        "position": position,
        "stats": {
            "total_signals": state.stats.total_signals,
            "successes": state.stats.successes,
            "failures": state.stats.failures,
        },
        "next_id": state.next_id,
    }


def from_dict(data: dict[str, Any]) -> TrackerState:
    position = None
    raw = data.get("position")
    if raw:
        position = Position(
            id=int(raw["id"]),
            symbol=raw["symbol"],
            direction=Direction(raw["direction"]),
            entry_price=float(raw["entry_price"]),
            stop_loss=float(raw["stop_loss"]),
            take_profit=float(raw["take_profit"]),
            opened_at=datetime.fromisoformat(raw["opened_at"]),
            trailing_stop=None if raw.get("trailing_stop") is None else float(raw["trailing_stop"]),
            trail_distance=float(raw.get("trail_distance", 0.0)),
        )
    stats = data.get("stats", {})
    return TrackerState(
        position=position,
        stats=PerformanceStats(
            total_signals=int(stats.get("total_signals", 0)),
            successes=int(stats.get("successes", 0)),
            failures=int(stats.get("failures", 0)),
        ),
        next_id=int(data.get("next_id", 1)),
    )
