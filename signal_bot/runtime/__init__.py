"""Runtime: periodic scheduler and the bot that owns the ticks."""

from signal_bot.runtime.scheduler import PeriodicTask, Scheduler
from signal_bot.runtime.bot import SignalBot, build_bot, build_tracker

__all__ = ["PeriodicTask", "Scheduler", "SignalBot", "build_bot", "build_tracker"]
