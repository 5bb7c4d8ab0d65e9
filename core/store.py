"""
Key-Value Store
Durable JSON storage shared by the completion log, community board and saved recipes
"""
import asyncio
import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

import aiosqlite

logger = logging.getLogger(__name__)

COMPLETED_RECIPES_KEY = "cooking_assistant_completed_recipes"
REVIEWS_KEY = "cooking_assistant_reviews"
COMMENTS_KEY = "cooking_assistant_comments"
SAVED_RECIPES_KEY = "cooking_assistant_saved_recipes"


def decode_value(key: str, raw: Optional[str]) -> Any:
    """
    Parse a stored JSON string

    A corrupt entry reads as empty so callers start over instead of crashing.

    Args:
        key: store key, used for the log message
        raw: stored text or None

    Returns:
        Parsed value or None
    """
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Discarding unparsable value stored under %r", key)
        return None


class MemoryStore:
    """
    In-memory store
    Values are kept as JSON text so they behave like the durable store
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Any:
        async with self._lock:
            raw = self._data.get(key)
        return decode_value(key, raw)

    async def set(self, key: str, value: Any):
        encoded = json.dumps(value, ensure_ascii=False)
        async with self._lock:
            self._data[key] = encoded

    async def close(self):
        pass


class SQLiteStore:
    """
    SQLite-backed store
    One row per key, last write wins
    """

    def __init__(self, db_path: str = "cooking.db"):
        """
        Args:
            db_path: SQLite database file path
        """
        self.db_path = db_path
        self.connection = None

    async def init_db(self):
        """
        Open the connection and create the table
        """
        self.connection = await aiosqlite.connect(self.db_path)

        await self.connection.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP NOT NULL
            )
        """)
        await self.connection.commit()
        logger.debug("Opened key-value store at %s", self.db_path)

    async def get(self, key: str) -> Any:
        """
        Args:
            key: store key

        Returns:
            Parsed JSON value, or None when missing or corrupt
        """
        if self.connection is None:
            await self.init_db()

        cursor = await self.connection.execute(
            "SELECT value FROM kv_store WHERE key = ?",
            (key,)
        )
        row = await cursor.fetchone()
        return decode_value(key, row[0] if row else None)

    async def set(self, key: str, value: Any):
        """
        Args:
            key: store key
            value: JSON-serializable value
        """
        if self.connection is None:
            await self.init_db()

        await self.connection.execute(
            "INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
            (key, json.dumps(value, ensure_ascii=False), datetime.now().isoformat())
        )
        await self.connection.commit()

    async def close(self):
        """Close the database connection"""
        if self.connection:
            await self.connection.close()
            self.connection = None
