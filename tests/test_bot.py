"""Unit tests for runtime.bot ticks (adapter and notifier mocked)."""

import sqlite3
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from signal_bot.core.config import Config
from signal_bot.core.errors import ConfigurationError, NotificationError, ProviderError
from signal_bot.core.types import Candle, Direction
from signal_bot.runtime.bot import SignalBot, build_bot
from signal_bot.strategies.cpr_ema import CprEmaStrategy
from signal_bot.tracker.manager import PositionTracker
from signal_bot.tracker.state import Outcome
from signal_bot.utils.telegram import TelegramNotifier

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def config(**overrides):
    values = dict(
        provider="coinex", notifier="log", state_db="",
        atr_len=5, ema_short=5, ema_long=10, cpr_len=5, candle_limit=30,
    )
    values.update(overrides)
    return Config(**values)


def uptrend(n=30):
    return [
        Candle(T0 + timedelta(minutes=3 * i), 100.0 + i, 100.5 + i, 99.5 + i, 100.0 + i, 1.0)
        for i in range(n)
    ]


def make_bot(cfg=None):
    cfg = cfg or config()
    adapter = MagicMock()
    notifier = MagicMock()
    tracker = PositionTracker(cfg.symbol, notifier)
    return SignalBot(cfg, adapter, CprEmaStrategy(cfg), tracker, notifier), adapter, notifier


def test_generation_tick_opens_position():
    bot, adapter, notifier = make_bot()
    adapter.fetch.return_value = uptrend()
    position = bot.generation_tick()
    adapter.fetch.assert_called_once_with("BTCUSDT", "3m", 30)
    assert position.direction == Direction.BUY
    assert position.entry_price == 129.0
    assert "New Trading Signal" in notifier.send.call_args[0][0]


def test_generation_tick_skips_while_open():
    bot, adapter, _ = make_bot()
    adapter.fetch.return_value = uptrend()
    first = bot.generation_tick()
    assert bot.generation_tick() is None
    assert bot.tracker.position == first


def test_generation_tick_resolves_before_new_entry():
    bot, adapter, _ = make_bot()
    adapter.fetch.return_value = uptrend()
    bot.generation_tick()  # BUY @129, TP 132
    adapter.fetch.return_value = uptrend(34)  # newest close 133
    position = bot.generation_tick()
    assert bot.tracker.snapshot().stats.successes == 1
    assert position.id == 2


def test_generation_tick_recoverable_errors():
    bot, adapter, _ = make_bot()
    adapter.fetch.side_effect = ProviderError("coinex", "HTTP 502")
    assert bot.generation_tick() is None
    adapter.fetch.side_effect = None
    adapter.fetch.return_value = uptrend(8)
    assert bot.generation_tick() is None
    adapter.fetch.return_value = []
    assert bot.generation_tick() is None
    assert bot.tracker.position is None


def test_monitor_tick():
    bot, adapter, _ = make_bot()
    assert bot.monitor_tick() is None
    adapter.latest_price.assert_not_called()
    adapter.fetch.return_value = uptrend()
    bot.generation_tick()  # SL 127.5
    adapter.latest_price.side_effect = ProviderError("coinex", "timeout")
    assert bot.monitor_tick() is None
    adapter.latest_price.side_effect = None
    adapter.latest_price.return_value = 127.0
    event = bot.monitor_tick()
    assert event.outcome == Outcome.LOSS
    assert bot.tracker.snapshot().stats.failures == 1


def test_report_tick_tolerates_notifier_failure():
    bot, _, notifier = make_bot()
    notifier.send.side_effect = NotificationError("down")
    bot.report_tick()
    assert notifier.send.called


def test_commands():
    bot, adapter, _ = make_bot()
    assert bot.command_poller() is None
    adapter.fetch.return_value = uptrend()
    bot.generation_tick()
    assert "Active Signal" in bot.status_text()
    assert "Total Signals: 0" in bot.stats_text()
    bot.reset_command()
    assert bot.tracker.position is None


def test_scheduler_tasks():
    bot, _, _ = make_bot(config(telegram_commands=True, telegram_bot_token="t", telegram_chat_id="1"))
    scheduler = bot.build_scheduler(bot.command_poller())
    assert [t.name for t in scheduler.tasks] == ["generate", "monitor", "report", "commands"]
    assert [t.interval_s for t in scheduler.tasks[:3]] == [180.0, 60.0, 3600.0]


def test_build_bot(tmp_path):
    bot = build_bot(config(state_db=str(tmp_path / "state.db")))
    assert bot.tracker.store is not None
    with pytest.raises(ConfigurationError):
        build_bot(config(ema_short=20, ema_long=10))


def test_reset_command_replies_without_telegram_notifier():
    bot, adapter, _ = make_bot()
    adapter.fetch.return_value = uptrend()
    bot.generation_tick()
    reply = bot.reset_command()
    assert "have been reset" in reply
    assert bot.tracker.position is None


def test_reset_command_silent_when_tracker_posts_to_telegram():
    cfg = config()
    notifier = MagicMock(spec=TelegramNotifier)
    tracker = PositionTracker(cfg.symbol, notifier)
    bot = SignalBot(cfg, MagicMock(), CprEmaStrategy(cfg), tracker, notifier)
    assert bot.reset_command() == ""
    assert "have been reset" in notifier.send.call_args[0][0]


def test_run_survives_failed_save_on_shutdown():
    bot, _, notifier = make_bot()
    scheduler = MagicMock()
    scheduler.wait.side_effect = KeyboardInterrupt
    bot.build_scheduler = MagicMock(return_value=scheduler)
    bot.tracker.save = MagicMock(side_effect=sqlite3.OperationalError("database is locked"))
    bot.run()
    scheduler.stop.assert_called_once()
    assert notifier.send.call_args[0][0] == "Signal bot stopped."
