"""
SQLite cache store.

Zero-configuration persistent store: a single table keyed by cache key, with
each record serialized as JSON (bodies base64 encoded). Timestamps are also
kept in their own columns so the file can be inspected with plain SQL.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from cachekeeper.cache.models import CacheRecord
from cachekeeper.cache.store import CacheStore
from cachekeeper.errors import StoreError

logger = logging.getLogger(__name__)


class SQLiteCacheStore(CacheStore):
    """
    SQLite-based cache store.

    Call ``initialize()`` before use and ``close()`` when done. Every
    ``sqlite3`` failure surfaces as ``StoreError``.
    """

    def __init__(self, db_path: str | Path = ".cachekeeper/cache.db"):
        """
        Initialize SQLite cache store.

        Args:
            db_path: Path to SQLite database file (``:memory:`` for a private
                in-memory database)
        """
        self.db_path = db_path if db_path == ":memory:" else Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None

    async def initialize(self) -> None:
        """Open the database and create the schema"""
        try:
            if isinstance(self.db_path, Path):
                self.db_path.parent.mkdir(parents=True, exist_ok=True)

            self._conn = sqlite3.connect(
                self.db_path,
                check_same_thread=False,  # Allow multi-threaded access
                isolation_level=None,  # Autocommit mode
            )
            self._conn.row_factory = sqlite3.Row
            if isinstance(self.db_path, Path):
                self._conn.execute("PRAGMA journal_mode = WAL")

            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS cache_records (
                    cache_key TEXT PRIMARY KEY,
                    call_timestamp TEXT NOT NULL,
                    expiration_time TEXT,
                    record TEXT NOT NULL
                )
                """
            )
        except (OSError, sqlite3.Error) as exc:
            raise StoreError(f"Failed to open cache database {self.db_path}: {exc}") from exc

    async def close(self) -> None:
        """Close database connection"""
        if self._conn:
            self._conn.close()
            self._conn = None

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreError("SQLite cache store is not initialized")
        return self._conn

    async def get(self, key: str) -> Optional[CacheRecord]:
        conn = self._connection()
        try:
            row = conn.execute(
                "SELECT record FROM cache_records WHERE cache_key = ?",
                (key,),
            ).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to read cache record {key!r}: {exc}") from exc

        if row is None:
            return None
        return _load_record(key, row["record"])

    async def put(self, key: str, record: CacheRecord) -> None:
        conn = self._connection()
        expiration_time = record.expiration_time
        try:
            conn.execute(
                """
                INSERT OR REPLACE INTO cache_records
                    (cache_key, call_timestamp, expiration_time, record)
                VALUES (?, ?, ?, ?)
                """,
                (
                    key,
                    record.call_timestamp.isoformat(),
                    expiration_time.isoformat() if expiration_time else None,
                    record.model_dump_json(),
                ),
            )
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to write cache record {key!r}: {exc}") from exc
        logger.debug("Stored cache record for key: %s", key)

    async def delete(self, key: str) -> Optional[CacheRecord]:
        conn = self._connection()
        try:
            row = conn.execute(
                "SELECT record FROM cache_records WHERE cache_key = ?",
                (key,),
            ).fetchone()
            if row is not None:
                conn.execute("DELETE FROM cache_records WHERE cache_key = ?", (key,))
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to delete cache record {key!r}: {exc}") from exc

        if row is None:
            return None
        logger.debug("Deleted cache record for key: %s", key)
        return _load_record(key, row["record"])

    async def count(self) -> int:
        """Number of stored records"""
        conn = self._connection()
        try:
            row = conn.execute("SELECT COUNT(*) AS n FROM cache_records").fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to count cache records: {exc}") from exc
        return int(row["n"])


def _load_record(key: str, payload: str) -> CacheRecord:
    try:
        return CacheRecord.model_validate_json(payload)
    except ValidationError as exc:
        raise StoreError(f"Corrupt cache record {key!r}: {exc}") from exc
