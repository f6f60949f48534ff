"""Tracker: single-position state machine, persistence, owning service."""

from signal_bot.tracker.state import (
    TrackerState,
    TrackerEvent,
    Transition,
    EventKind,
    Outcome,
    open_position,
    on_price,
    reset,
)
from signal_bot.tracker.store import SqliteStateStore
from signal_bot.tracker.manager import PositionTracker

__all__ = [
    "TrackerState",
    "TrackerEvent",
    "Transition",
    "EventKind",
    "Outcome",
    "open_position",
    "on_price",
    "reset",
    "SqliteStateStore",
    "PositionTracker",
]
