"""
Signal bot: generation, monitoring and reporting ticks wired to a scheduler.
No exception escapes a tick; recoverable errors skip the cycle.
"""

from __future__ import annotations
import logging
from typing import Optional

from signal_bot.core.errors import InsufficientDataError, NotificationError, ProviderError
from signal_bot.core.types import Position
from signal_bot.providers import create_adapter
from signal_bot.providers.base import MarketDataAdapter
from signal_bot.runtime.scheduler import PeriodicTask, Scheduler
from signal_bot.strategies.cpr_ema import CprEmaStrategy
from signal_bot.tracker.manager import PositionTracker
from signal_bot.tracker.messages import format_event, format_stats, format_status
from signal_bot.tracker.state import TrackerEvent
from signal_bot.tracker.store import SqliteStateStore
from signal_bot.utils.telegram import Notifier, TelegramCommandPoller, TelegramNotifier, create_notifier

logger = logging.getLogger("signal_bot.runtime.bot")


class SignalBot:
    def __init__(
        self,
        config,
        adapter: MarketDataAdapter,
        strategy: CprEmaStrategy,
        tracker: PositionTracker,
        notifier: Notifier,
    ):
        self.config = config
        self.adapter = adapter
        self.strategy = strategy
        self.tracker = tracker
        self.notifier = notifier

    @property
    def symbol(self) -> str:
        return self.config.symbol

    def generation_tick(self) -> Optional[Position]:
        """Fetch -> indicators -> decide -> open. Returns the opened position, if any."""
        try:
            candles = self.adapter.fetch(self.symbol, self.config.interval, self.config.candle_limit)
        except ProviderError as e:
            logger.warning("Fetch failed, skipping cycle: %s", e)
            return None
        if not candles:
            logger.warning("No candles for %s, skipping cycle", self.symbol)
            return None
        price = candles[-1].close

        # Resolve first so a stale position cannot block an entry on the same tick.
        if self.tracker.position is not None:
            self.tracker.on_price(price)
            if self.tracker.position is not None:
                logger.info("Position #%d still open, no new signal", self.tracker.position.id)
                return None

        try:
            snapshot = self.strategy.compute_indicators(candles)
        except InsufficientDataError as e:
            logger.info("Not enough data to calculate indicators: %s", e)
            return None
        signal = self.strategy.evaluate(price, snapshot)
        if signal is None:
            logger.info(
                "HOLD %s @ %.4f (ema %.4f/%.4f, cpr %.4f-%.4f)",
                self.symbol, price, snapshot.ema_short, snapshot.ema_long, snapshot.cpr_lower, snapshot.cpr_upper,
            )
            return None
        return self.tracker.on_signal(signal, snapshot)

    def monitor_tick(self) -> Optional[TrackerEvent]:
        """Poll the latest price and let the tracker resolve or trail the open position."""
        if self.tracker.position is None:
            return None
        try:
            price = self.adapter.latest_price(self.symbol, self.config.interval)
        except ProviderError as e:
            logger.warning("Price poll failed: %s", e)
            return None
        return self.tracker.on_price(price)

    def status_text(self) -> str:
        return format_status(self.tracker.snapshot(), self.symbol)

    def stats_text(self) -> str:
        return format_stats(self.tracker.snapshot().stats, self.symbol)

    def reset_command(self) -> str:
        event = self.tracker.reset()
        if isinstance(self.notifier, TelegramNotifier):
            return ""  # the tracker already announced the reset in the chat
        return format_event(event, self.symbol)

    def report_tick(self) -> None:
        self._send(self.status_text())

    def _send(self, text: str) -> None:
        try:
            self.notifier.send(text)
        except NotificationError as e:
            logger.error("Notification failed: %s", e)

    def build_scheduler(self, poller: Optional[TelegramCommandPoller] = None) -> Scheduler:
        scheduler = Scheduler()
        scheduler.add(PeriodicTask("generate", self.config.signal_interval_s, self.generation_tick))
        scheduler.add(PeriodicTask("monitor", self.config.monitor_interval_s, self.monitor_tick, run_immediately=False))
        scheduler.add(PeriodicTask("report", self.config.report_interval_s, self.report_tick, run_immediately=False))
        if poller is not None:
            scheduler.add(PeriodicTask("commands", self.config.command_poll_s, poller.poll))
        return scheduler

    def command_poller(self) -> Optional[TelegramCommandPoller]:
        if not self.config.telegram_commands:
            return None
        return TelegramCommandPoller(
            self.config.telegram_bot_token,
            self.config.telegram_chat_id,
            {"/reset": self.reset_command, "/status": self.status_text, "/stats": self.stats_text},
        )

    def run(self) -> None:
        """Run until KeyboardInterrupt; state is saved on the way out."""
        scheduler = self.build_scheduler(self.command_poller())
        self._send(
            f"Signal bot starting | {self.symbol} {self.config.interval} | provider={self.config.provider}"
        )
        scheduler.start()
        try:
            scheduler.wait()
        except KeyboardInterrupt:
            logger.info("Shutdown by user")
        finally:
            scheduler.stop()
            try:
                self.tracker.save()
            except Exception as e:
                logger.exception("Could not persist state on shutdown: %s", e)
            self._send("Signal bot stopped.")


def build_tracker(config, notifier: Notifier) -> PositionTracker:
    kwargs = {"trailing_atr_mult": config.trailing_stop_atr_mult}
    if config.state_db:
        return PositionTracker.restore(config.symbol, notifier, SqliteStateStore(config.state_db), **kwargs)
    return PositionTracker(config.symbol, notifier, **kwargs)


def build_bot(config) -> SignalBot:
    """Validate config and wire adapter, strategy, notifier and tracker. Raises ConfigurationError."""
    config.validate()
    notifier = create_notifier(config)
    return SignalBot(
        config,
        adapter=create_adapter(config),
        strategy=CprEmaStrategy(config),
        tracker=build_tracker(config, notifier),
        notifier=notifier,
    )
