"""Settings mirror for the published is-night flag."""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime
from threading import Lock
from typing import Protocol

IS_NIGHT_KEY = "twilight_is_night"


class SettingsMirror(Protocol):
    """Interface for the fire-and-forget is-night settings write."""

    def set_is_night(self, is_night: bool) -> None:
        """Persist the current is-night flag."""

    def get_is_night(self) -> bool | None:
        """Return the last written flag, or None when never written."""


class InMemorySettingsMirror(SettingsMirror):
    """Process-local settings mirror."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._value: bool | None = None
        self.write_count = 0

    def set_is_night(self, is_night: bool) -> None:
        with self._lock:
            self._value = bool(is_night)
            self.write_count += 1

    def get_is_night(self) -> bool | None:
        with self._lock:
            return self._value


class SQLiteSettingsMirror(SettingsMirror):
    """Thread-safe SQLite key/value settings table visible to other processes."""

    def __init__(self, path: str) -> None:
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._lock = Lock()
        with self._lock:
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS settings (
                    name TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at_utc TEXT NOT NULL
                )
                """
            )
            self._conn.commit()

    def set_is_night(self, is_night: bool) -> None:
        """Insert or replace the is-night flag as ``"1"`` or ``"0"``."""
        with self._lock:
            self._conn.execute(
                """
                INSERT OR REPLACE INTO settings (name, value, updated_at_utc)
                VALUES (?, ?, ?)
                """,
                (IS_NIGHT_KEY, "1" if is_night else "0", datetime.now(UTC).isoformat()),
            )
            self._conn.commit()

    def get_is_night(self) -> bool | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM settings WHERE name = ?",
                (IS_NIGHT_KEY,),
            ).fetchone()
        if row is None:
            return None
        return str(row[0]) == "1"

    def close(self) -> None:
        with self._lock:
            self._conn.close()
