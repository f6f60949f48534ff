"""Unit tests for tracker.manager and tracker.store."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

from signal_bot.core.errors import NotificationError
from signal_bot.core.types import Direction, Signal
from signal_bot.tracker.manager import PositionTracker
from signal_bot.tracker.state import Outcome, TrackerState
from signal_bot.tracker.store import SqliteStateStore

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def buy():
    return Signal(Direction.BUY, 105.0, 100.0, 110.0, 2.0)


def make_tracker(**kwargs):
    notifier = kwargs.pop("notifier", MagicMock())
    return PositionTracker("BTCUSDT", notifier, clock=lambda: NOW, **kwargs), notifier


def test_repeated_signals_open_one_position():
    tracker, notifier = make_tracker()
    assert tracker.on_signal(buy()) is not None
    for _ in range(4):
        assert tracker.on_signal(buy()) is None
    assert tracker.position.id == 1
    assert notifier.send.call_count == 1


def test_resolution_survives_notification_failure():
    notifier = MagicMock()
    notifier.send.side_effect = NotificationError("telegram down")
    tracker, _ = make_tracker(notifier=notifier)
    tracker.on_signal(buy())
    event = tracker.on_price(99.0)
    assert event.outcome == Outcome.LOSS
    assert tracker.position is None
    assert tracker.snapshot().stats.failures == 1


def test_no_event_while_price_between_levels():
    tracker, notifier = make_tracker()
    tracker.on_signal(buy())
    assert tracker.on_price(107.0) is None
    assert tracker.position is not None
    assert notifier.send.call_count == 1


def test_reset_notifies_and_clears():
    tracker, notifier = make_tracker()
    tracker.on_signal(buy())
    tracker.reset()
    assert tracker.position is None
    assert tracker.snapshot().stats.total_signals == 0
    assert "reset" in notifier.send.call_args[0][0]


def test_state_persisted_after_each_transition(tmp_path):
    store = SqliteStateStore(tmp_path / "state.db")
    tracker, _ = make_tracker(store=store)
    tracker.on_signal(buy())
    assert store.load().position.entry_price == 105.0
    tracker.on_price(111.0)
    loaded = store.load()
    assert loaded.position is None
    assert loaded.stats.successes == 1


def test_restore_from_store(tmp_path):
    store = SqliteStateStore(tmp_path / "state.db")
    first, _ = make_tracker(store=store)
    first.on_signal(buy())
    restored = PositionTracker.restore("BTCUSDT", MagicMock(), store)
    assert restored.position == first.position
    assert restored.on_signal(buy()) is None


def test_store_empty_and_round_trip(tmp_path):
    store = SqliteStateStore(tmp_path / "state.db")
    assert store.load() is None
    state = TrackerState(next_id=7)
    store.save(state)
    store.save(state)
    assert store.load() == state
