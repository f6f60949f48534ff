#!/usr/bin/env python3
"""
Signal Bot CLI: run | once | status | reset
Usage:
  python main.py run [--config config.yaml]
  python main.py once [--config config.yaml]
  python main.py status [--config config.yaml]
  python main.py reset [--config config.yaml]
"""

from __future__ import annotations
import argparse
import logging
import signal
import sys
from pathlib import Path

# Project root
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from signal_bot.core.config import load_config
from signal_bot.core.errors import ConfigurationError
from signal_bot.core.logger import setup_logging
from signal_bot.runtime.bot import build_bot
from signal_bot.tracker.messages import format_stats, format_status
from signal_bot.tracker.state import TrackerState, reset
from signal_bot.tracker.store import SqliteStateStore

logger = logging.getLogger("signal_bot")


def _raise_keyboard_interrupt(signum, frame):
    raise KeyboardInterrupt


def run_live(config_path: Path | None) -> int:
    """Run the generation/monitor/report timers until interrupted."""
    config = load_config(config_path, ROOT)
    setup_logging(config.log_level, config.log_dir, config.log_file, secrets=config.secrets())
    try:
        bot = build_bot(config)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return 1
    signal.signal(signal.SIGTERM, _raise_keyboard_interrupt)
    bot.run()
    return 0


def run_once(config_path: Path | None) -> int:
    """One generation tick and one monitoring tick, then exit."""
    config = load_config(config_path, ROOT)
    setup_logging(config.log_level, secrets=config.secrets())
    try:
        bot = build_bot(config)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return 1
    opened = bot.generation_tick()
    if opened is None:
        bot.monitor_tick()
    print(bot.status_text())
    return 0


def _load_state(config_path: Path | None):
    config = load_config(config_path, ROOT)
    setup_logging(config.log_level, secrets=config.secrets())
    if not config.state_db:
        logger.error("No state_db configured; there is no persisted state to act on")
        return config, None
    return config, SqliteStateStore(config.state_db)


def show_status(config_path: Path | None) -> int:
    config, store = _load_state(config_path)
    if store is None:
        return 1
    state = store.load() or TrackerState()
    print(format_status(state, config.symbol))
    print()
    print(format_stats(state.stats, config.symbol))
    return 0


def reset_state(config_path: Path | None) -> int:
    """Clear the persisted position and counters. Stop the running bot first."""
    config, store = _load_state(config_path)
    if store is None:
        return 1
    state = store.load() or TrackerState()
    store.save(reset(state).state)
    print(f"State for {config.symbol} reset.")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="CPR/EMA Signal Bot")
    parser.add_argument("mode", choices=["run", "once", "status", "reset"], help="What to do")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    args = parser.parse_args()
    if args.mode == "once":
        return run_once(args.config)
    if args.mode == "status":
        return show_status(args.config)
    if args.mode == "reset":
        return reset_state(args.config)
    return run_live(args.config)


if __name__ == "__main__":
    sys.exit(main())
