"""Local key-value storage for the price history."""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from gold_silver_monitor.config import STORAGE_KEY
from gold_silver_monitor.models import PriceSample


logger = logging.getLogger(__name__)


class SqliteKeyValueStore:
    """SQLite-backed key-value slots."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection with row factory."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

    def get(self, key: str) -> str | None:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO kv_store (key, value, updated_at)
                VALUES (?, ?, ?)
                """,
                (key, value, datetime.now().isoformat()),
            )

    def delete(self, key: str) -> None:
        with self._get_connection() as conn:
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))


class MemoryKeyValueStore:
    """In-memory key-value slots, for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class HistoryStore:
    """Persists the price history as a JSON array in a single key-value slot.

    Read and write failures are logged and degrade to an empty history or a
    skipped write; they are never raised to the caller.
    """

    def __init__(self, kv, key: str = STORAGE_KEY) -> None:
        self.kv = kv
        self.key = key

    def load(self) -> list[PriceSample]:
        """Load the stored history, or an empty list if missing or unreadable."""
        try:
            raw = self.kv.get(self.key)
            if not raw:
                return []
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"Expected a JSON array, got {type(data).__name__}")
            return [PriceSample.from_dict(item) for item in data]
        except Exception as e:
            logger.error(f"Failed to load history: {e}")
            return []

    def save(self, series: list[PriceSample]) -> None:
        """Write the history, logging instead of raising on failure."""
        try:
            payload = json.dumps([sample.to_dict() for sample in series])
            self.kv.set(self.key, payload)
        except (sqlite3.Error, OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save history: {e}")

    def clear(self) -> None:
        """Remove the stored history."""
        self.kv.delete(self.key)
