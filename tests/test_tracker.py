"""Unit tests for tracker.state transitions and messages."""

from datetime import datetime, timezone

import pytest
from signal_bot.core.types import Direction, PerformanceStats, Signal
from signal_bot.tracker.messages import format_event, format_status
from signal_bot.tracker.state import (
    EventKind,
    Outcome,
    TrackerState,
    from_dict,
    on_price,
    open_position,
    reset,
    to_dict,
)

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def buy(entry=105.0, stop=100.0, tp=110.0, atr=2.0):
    return Signal(Direction.BUY, entry, stop, tp, atr)


def sell(entry=95.0, stop=100.0, tp=90.0, atr=2.0):
    return Signal(Direction.SELL, entry, stop, tp, atr)


def opened(signal, trailing=0.0):
    return open_position(TrackerState(), signal, "BTCUSDT", NOW, trailing).state


def test_open_from_idle():
    t = open_position(TrackerState(), buy(), "BTCUSDT", NOW)
    assert t.event.kind == EventKind.OPENED
    assert t.state.position.id == 1
    assert t.state.position.trailing_stop is None
    assert t.state.next_id == 2


def test_only_one_position():
    state = opened(buy())
    for _ in range(5):
        t = open_position(state, buy(entry=120.0), "BTCUSDT", NOW)
        assert t.event is None
        state = t.state
    assert state.position.entry_price == 105.0
    assert state.next_id == 2


def test_buy_stop_loss():
    t = on_price(opened(buy()), 99.0)
    assert t.event.outcome == Outcome.LOSS
    assert t.event.exit_reason == "stop_loss"
    assert t.state.position is None
    assert t.state.stats == PerformanceStats(total_signals=1, successes=0, failures=1)


def test_buy_take_profit():
    t = on_price(opened(buy()), 111.0)
    assert t.event.outcome == Outcome.WIN
    assert t.state.stats.successes == 1
    assert t.state.stats.failures == 0
    assert t.state.position is None


def test_sell_mirrors():
    assert on_price(opened(sell()), 101.0).event.outcome == Outcome.LOSS
    assert on_price(opened(sell()), 89.0).event.outcome == Outcome.WIN


def test_price_between_levels_keeps_position():
    state = opened(buy())
    t = on_price(state, 106.0)
    assert t.event is None
    assert t.state is state


def test_buy_trailing_stop_never_decreases():
    state = opened(buy(), trailing=1.0)  # distance = atr * 1.0 = 2
    assert state.position.trailing_stop == 100.0
    seen = [state.position.trailing_stop]
    for price in (104.0, 107.0, 106.0, 108.5, 103.0, 108.0):
        t = on_price(state, price)
        if t.state.position is None:
            break
        state = t.state
        seen.append(state.position.trailing_stop)
    assert seen == sorted(seen)
    assert seen[-1] == pytest.approx(106.5)


def test_sell_trailing_stop_never_increases():
    state = opened(sell(), trailing=1.0)
    seen = [state.position.trailing_stop]
    for price in (96.0, 93.0, 94.5, 91.5, 95.0):
        t = on_price(state, price)
        if t.state.position is None:
            break
        state = t.state
        seen.append(state.position.trailing_stop)
    assert seen == sorted(seen, reverse=True)
    assert seen[-1] == pytest.approx(93.5)


def test_trailing_stop_resolution():
    state = on_price(opened(buy(), trailing=1.0), 108.0).state
    assert state.position.trailing_stop == pytest.approx(106.0)
    t = on_price(state, 105.9)
    assert t.event.outcome == Outcome.LOSS
    assert t.event.exit_reason == "trailing_stop"


def test_reset_while_open_does_not_count():
    state = on_price(opened(buy()), 111.0).state
    state = open_position(state, buy(), "BTCUSDT", NOW).state
    t = reset(state)
    assert t.event.kind == EventKind.RESET
    assert t.state.position is None
    assert t.state.stats == PerformanceStats()
    assert t.state.next_id == state.next_id


def test_dict_round_trip_with_open_position():
    state = on_price(opened(buy(), trailing=1.0), 108.0).state
    assert from_dict(to_dict(state)) == state


def test_success_ratio():
    assert PerformanceStats().success_ratio == 0.0
    assert PerformanceStats(total_signals=4, successes=3, failures=1).success_ratio == 75.0


def test_messages():
    state = opened(buy())
    assert "Active Signal" in format_status(state, "BTCUSDT")
    assert "No active signal" in format_status(TrackerState(), "BTCUSDT")
    text = format_event(on_price(state, 111.0).event, "BTCUSDT")
    assert "TAKE PROFIT HIT" in text
    assert "Success Ratio: 100.00%" in text
    assert "reset" in format_event(reset(state).event, "BTCUSDT")
