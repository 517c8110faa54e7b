"""
memocache - SQLite Cache Backend

Disk-backed cache stored in a single SQLite file.
Zero external dependencies; values persist across process restarts.

- JSON serialization for values (same codec as the Redis backend)
- Absolute expiry timestamps, checked on read
- Blocking SQLite calls run in worker threads via asyncio.to_thread
"""

import asyncio
import logging
import sqlite3
import time
from datetime import timedelta
from pathlib import Path
from typing import Any

from ...errors import BackendUnavailableError
from ..interface import MISSING, CacheInterface, ttl_seconds
from ..serialization import decode_value, encode_value

logger = logging.getLogger(__name__)


class SQLiteCacheBackend(CacheInterface):
    """
    SQLite-based cache backend.

    Every operation opens a short-lived connection, so one backend can be
    shared by any number of coroutines and worker threads.
    """

    name = "sqlite"

    def __init__(
        self,
        db_path: str = "./data/memocache.db",
        namespace: str = "memocache",
        default_ttl: float = 0,
        timeout: float = 5.0,
    ):
        """
        Initialize SQLite cache backend.

        Args:
            db_path: Path to SQLite database file
            namespace: Cache key namespace/prefix
            default_ttl: Default TTL in seconds (0 = no expiry)
            timeout: Seconds to wait for a database lock
        """
        self.db_path = db_path
        self.namespace = namespace
        self.default_ttl = default_ttl
        self.timeout = timeout

        self._hits = 0
        self._misses = 0
        self._puts = 0
        self._removals = 0

        self._ensure_db_directory()
        self._initialize_database()

    def _ensure_db_directory(self) -> None:
        """Ensure database directory exists."""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection."""
        return sqlite3.connect(self.db_path, timeout=self.timeout)

    def _initialize_database(self) -> None:
        """Initialize database schema."""
        conn = self._get_connection()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS cache_entries (
                    key TEXT PRIMARY KEY,
                    value BLOB NOT NULL,
                    expires_at REAL
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_cache_entries_expires_at
                ON cache_entries(expires_at)
            """)
            conn.commit()
            logger.info("SQLite cache database initialized at %s", self.db_path)
        except sqlite3.Error as e:
            logger.error("Failed to initialize cache database: %s", e, extra={"path": self.db_path})
            raise BackendUnavailableError(self.name, "initialize", str(e), details={"path": self.db_path}) from e
        finally:
            conn.close()

    def _make_key(self, key: str) -> str:
        """Create namespaced cache key."""
        return f"{self.namespace}:{key}"

    async def _run(self, operation: str, key: str | None, func: Any, *args: Any) -> Any:
        """Run a blocking database call in a worker thread, mapping failures."""
        try:
            return await asyncio.to_thread(func, *args)
        except sqlite3.Error as e:
            logger.error(
                "SQLite %s failed: %s",
                operation,
                e,
                extra={"key": key, "path": self.db_path, "error": str(e)},
                exc_info=True,
            )
            raise BackendUnavailableError(
                self.name,
                operation,
                str(e),
                details={"key": key, "path": self.db_path, "error_type": type(e).__name__},
            ) from e

    # ------------ Blocking helpers (worker thread) ------------

    def _select(self, cache_key: str) -> bytes | None:
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT value, expires_at FROM cache_entries WHERE key = ?",
                (cache_key,),
            ).fetchone()
            if row is None:
                return None

            value, expires_at = row
            if expires_at is not None and time.time() >= expires_at:
                conn.execute("DELETE FROM cache_entries WHERE key = ?", (cache_key,))
                conn.commit()
                return None
            return bytes(value)
        finally:
            conn.close()

    def _upsert(self, cache_key: str, payload: bytes, expires_at: float | None) -> None:
        conn = self._get_connection()
        try:
            conn.execute(
                "INSERT OR REPLACE INTO cache_entries (key, value, expires_at) VALUES (?, ?, ?)",
                (cache_key, payload, expires_at),
            )
            conn.commit()
        finally:
            conn.close()

    def _delete(self, cache_key: str) -> int:
        conn = self._get_connection()
        try:
            cursor = conn.execute("DELETE FROM cache_entries WHERE key = ?", (cache_key,))
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()

    def _delete_namespace(self) -> int:
        conn = self._get_connection()
        try:
            # Escape LIKE wildcards in the namespace itself
            prefix = self.namespace.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            cursor = conn.execute(
                "DELETE FROM cache_entries WHERE key LIKE ? ESCAPE '\\'",
                (f"{prefix}:%",),
            )
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()

    def _count(self) -> int:
        conn = self._get_connection()
        try:
            prefix = self.namespace.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            (count,) = conn.execute(
                "SELECT COUNT(*) FROM cache_entries WHERE key LIKE ? ESCAPE '\\'",
                (f"{prefix}:%",),
            ).fetchone()
            return count
        finally:
            conn.close()

    # ------------ Core Interface ------------

    async def get(self, key: str) -> Any:
        """Retrieve a value by key."""
        data = await self._run("get", key, self._select, self._make_key(key))
        if data is None:
            self._misses += 1
            return MISSING

        self._hits += 1
        return decode_value(data, self.name)

    async def put(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        """Store a value with optional TTL."""
        payload = encode_value(value, self.name)
        seconds = ttl_seconds(ttl, self.default_ttl)
        expires_at = time.time() + seconds if seconds is not None else None

        await self._run("put", key, self._upsert, self._make_key(key), payload, expires_at)
        self._puts += 1

    async def remove(self, key: str) -> None:
        """Delete a single key."""
        self._removals += await self._run("remove", key, self._delete, self._make_key(key))

    async def clear(self) -> None:
        """Delete every entry in this backend's namespace."""
        deleted = await self._run("clear", None, self._delete_namespace)
        self._removals += deleted
        logger.info("Cleared %d entries from SQLite cache namespace '%s'", deleted, self.namespace)

    async def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        total_requests = self._hits + self._misses
        return {
            "backend": self.name,
            "path": self.db_path,
            "namespace": self.namespace,
            "size": await self._run("stats", None, self._count),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round((self._hits / total_requests) * 100, 2) if total_requests else 0.0,
            "puts": self._puts,
            "removals": self._removals,
        }
