"""SQLite cache storage implementation."""

import sqlite3
import time
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

SCHEMA = """
CREATE TABLE IF NOT EXISTS audio_cache (
    id INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    content_hash TEXT NOT NULL UNIQUE,
    file_path TEXT NOT NULL,
    file_size_bytes INTEGER NOT NULL,
    last_accessed_at INTEGER NOT NULL,
    created_at INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_audio_last_accessed
ON audio_cache(last_accessed_at, id);

CREATE TABLE IF NOT EXISTS annotation_cache (
    id INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    text_hash TEXT NOT NULL,
    provider TEXT NOT NULL,
    annotated_text TEXT NOT NULL,
    last_accessed_at INTEGER NOT NULL,
    created_at INTEGER NOT NULL,
    UNIQUE(text_hash, provider)
);
"""


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


class CacheStorage:
    """SQLite-based storage for the audio and annotation caches.

    Holds only bookkeeping rows; rendered audio lives in plain files whose
    paths are stored in ``audio_cache.file_path``. Assumes a single writer
    process.
    """

    def __init__(self, cache_dir: Path, db_name: str = "cache.db"):
        """Initialize cache storage with database in given directory.

        Args:
            cache_dir: Directory containing cache database
            db_name: Database file name inside cache_dir
        """
        self.cache_dir = Path(cache_dir)

        # Create cache directory if it doesn't exist
        self.cache_dir.mkdir(parents=True, exist_ok=True)

        self.db_path = self.cache_dir / db_name

        with self.transaction() as conn:
            conn.executescript(SCHEMA)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection with WAL mode."""
        conn = sqlite3.connect(str(self.db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA busy_timeout=30000")
        conn.execute("PRAGMA synchronous=NORMAL")
        return conn

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection]:
        """Open a connection, commit on success, roll back on error, close."""
        conn = self._get_connection()
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def count(self, table: str) -> int:
        """Return the number of rows in one of the cache tables."""
        if table not in ("audio_cache", "annotation_cache"):
            raise ValueError(f"Unknown cache table: {table}")
        with self.transaction() as conn:
            row = conn.execute(f"SELECT COUNT(*) AS n FROM {table}").fetchone()
        return int(row["n"])

    def close(self) -> None:
        """Close database connection (no-op since we use per-request connections)."""
        pass
