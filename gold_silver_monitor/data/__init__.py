"""Data fetching and storage."""

from .gemini_fetcher import GeminiFetcher
from .cache import HistoryStore, MemoryKeyValueStore, SqliteKeyValueStore

__all__ = ["GeminiFetcher", "HistoryStore", "MemoryKeyValueStore", "SqliteKeyValueStore"]
