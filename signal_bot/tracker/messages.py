"""Plain-text message bodies for the notification channel."""

from __future__ import annotations
from typing import Optional

from signal_bot.core.types import IndicatorSnapshot, PerformanceStats, Position
from signal_bot.tracker.state import EventKind, Outcome, TrackerEvent, TrackerState


def _fmt(value: Optional[float]) -> str:
    return "N/A" if value is None else f"{value:,.2f}"


def _position_lines(position: Position) -> list[str]:
    lines = [
        f"Signal ID: #{position.id}",
        f"Signal: {position.direction.value}",
        f"Entry Price: ${_fmt(position.entry_price)}",
        f"Stop Loss: ${_fmt(position.stop_loss)}",
        f"Take Profit: ${_fmt(position.take_profit)}",
    ]
    if position.trailing_stop is not None:
        lines.append(f"Trailing Stop: ${_fmt(position.trailing_stop)}")
    return lines


def format_new_signal(position: Position, snapshot: Optional[IndicatorSnapshot] = None) -> str:
    lines = [f"📊 New Trading Signal for {position.symbol} 📊", *_position_lines(position)]
    if snapshot is not None:
        lines += [
            f"ATR: {_fmt(snapshot.atr)}",
            f"EMA Short: {_fmt(snapshot.ema_short)}",
            f"EMA Long: {_fmt(snapshot.ema_long)}",
            f"CPR Upper: {_fmt(snapshot.cpr_upper)}",
            f"CPR Lower: {_fmt(snapshot.cpr_lower)}",
        ]
    lines.append(f"Time: {position.opened_at:%Y-%m-%d %H:%M:%S %Z}".rstrip())
    return "\n".join(lines)


def format_outcome(event: TrackerEvent, symbol: str) -> str:
    won = event.outcome == Outcome.WIN
    title = "🎉 TAKE PROFIT HIT" if won else "🚨 STOP LOSS HIT"
    if event.exit_reason == "trailing_stop":
        title = "🚨 TRAILING STOP HIT"
    lines = [
        f"{title} | {symbol}",
        *_position_lines(event.position),
        f"Exit Price: ${_fmt(event.price)}",
        f"Outcome: {event.outcome.value}",
        f"Success Ratio: {event.stats.success_ratio:.2f}% "
        f"({event.stats.successes}W / {event.stats.failures}L)",
    ]
    return "\n".join(lines)


def format_status(state: TrackerState, symbol: str) -> str:
    """Active-signal update sent by the hourly report and /status."""
    if state.position is None:
        return f"ℹ️ No active signal for {symbol}.\nSuccess Ratio: {state.stats.success_ratio:.2f}%"
    return "\n".join([
        f"📊 Active Signal Update for {symbol} 📊",
        *_position_lines(state.position),
        f"Opened: {state.position.opened_at:%Y-%m-%d %H:%M:%S}",
        f"Success Ratio: {state.stats.success_ratio:.2f}%",
    ])


def format_stats(stats: PerformanceStats, symbol: str) -> str:
    return "\n".join([
        f"📈 Signal Stats for {symbol}",
        f"Total Signals: {stats.total_signals}",
        f"Successful: {stats.successes}",
        f"Failed: {stats.failures}",
        f"Success Ratio: {stats.success_ratio:.2f}%",
    ])


def format_event(event: TrackerEvent, symbol: str) -> str:
    if event.kind == EventKind.OPENED:
        return format_new_signal(event.position)
    if event.kind == EventKind.RESOLVED:
        return format_outcome(event, symbol)
    return f"♻️ All signals and stats for {symbol} have been reset."
