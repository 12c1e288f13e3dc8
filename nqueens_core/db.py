from __future__ import annotations

import json
import logging
import os
import sqlite3
from datetime import datetime, timezone
from typing import Dict, Mapping, Optional

from .config import DEFAULT_BOARD_SIZE

logger = logging.getLogger(__name__)

BOARD_SIZE_KEY = "board_size"
SHOW_MOVES_KEY = "show_moves"
BEST_TIMES_KEY = "best_times"


def _ensure_db_dir(db_path: str) -> None:
    """Ensures the directory for the SQLite DB exists before connecting."""
    directory = os.path.dirname(db_path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)


def _ensure_db(conn: sqlite3.Connection) -> None:
    """Ensures the preferences table exists."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS prefs (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """
    )
    conn.commit()


def encode_best_times(times: Mapping[int, int]) -> str:
    return json.dumps({"times": {str(int(k)): int(v) for k, v in times.items()}}, sort_keys=True)


def decode_best_times(text: Optional[str]) -> Dict[int, int]:
    """Decodes stored best times; anything malformed decodes to an empty mapping."""
    if not text:
        return {}
    try:
        data = json.loads(text)
        return {int(k): int(v) for k, v in data.get("times", {}).items()}
    except (ValueError, TypeError, AttributeError):
        logger.warning("discarding malformed best times: %r", text[:100])
        return {}


class SqlitePreferenceStore:
    """
    Key/value preferences (board size, show-moves flag, best times per size) in SQLite.
    Opens a connection per call; the database file and its directory are created on demand.
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path

    def _get(self, key: str) -> Optional[str]:
        _ensure_db_dir(self.db_path)
        conn = sqlite3.connect(self.db_path)
        try:
            _ensure_db(conn)
            row = conn.execute("SELECT value FROM prefs WHERE key = ?", (key,)).fetchone()
            return row[0] if row else None
        finally:
            conn.close()

    def _set(self, key: str, value: str) -> None:
        _ensure_db_dir(self.db_path)
        conn = sqlite3.connect(self.db_path)
        try:
            _ensure_db(conn)
            conn.execute(
                "INSERT OR REPLACE INTO prefs (key, value, updated_at) VALUES (?, ?, ?)",
                (key, value, datetime.now(timezone.utc).isoformat(timespec='seconds')),
            )
            conn.commit()
        finally:
            conn.close()

    def get_board_size(self) -> int:
        raw = self._get(BOARD_SIZE_KEY)
        try:
            return int(raw) if raw is not None else DEFAULT_BOARD_SIZE
        except ValueError:
            return DEFAULT_BOARD_SIZE

    def set_board_size(self, size: int) -> None:
        self._set(BOARD_SIZE_KEY, str(int(size)))

    def get_show_moves(self) -> bool:
        return self._get(SHOW_MOVES_KEY) == "1"

    def set_show_moves(self, show: bool) -> None:
        self._set(SHOW_MOVES_KEY, "1" if show else "0")

    def get_best_times(self) -> Dict[int, int]:
        return decode_best_times(self._get(BEST_TIMES_KEY))

    def set_best_times(self, times: Mapping[int, int]) -> None:
        self._set(BEST_TIMES_KEY, encode_best_times(times))
