"""SQLite key/value store for the tracker state (position + counters)."""

from __future__ import annotations
import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from signal_bot.tracker.state import TrackerState, from_dict, to_dict

logger = logging.getLogger("signal_bot.tracker.store")

STATE_KEY = "tracker_state"


class SqliteStateStore:
    """Persists one JSON blob per key. A fresh connection per call keeps it thread-agnostic."""

    def __init__(self, db_path: Union[str, Path] = "state.db"):
        self.db_path = str(db_path)
        self._init_database()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _init_database(self) -> None:
        conn = self._connect()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()
        finally:
            conn.close()

    def save(self, state: TrackerState) -> None:
        payload = json.dumps(to_dict(state))
        conn = self._connect()
        try:
            conn.execute(
                "INSERT OR REPLACE INTO kv (key, value, updated_at) VALUES (?, ?, ?)",
                (STATE_KEY, payload, datetime.now(timezone.utc).isoformat()),
            )
            conn.commit()
        finally:
            conn.close()
        logger.debug("State saved to %s", self.db_path)

    def load(self) -> Optional[TrackerState]:
        """Stored state, or None if nothing was saved yet."""
        conn = self._connect()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (STATE_KEY,)).fetchone()
        finally:
            conn.close()
        if row is None:
            return None
        return from_dict(json.loads(row[0]))
