"""Persistent index of rendered audio files keyed by content hash."""

import logging
from pathlib import Path

from .models import AudioCacheEntry
from .storage import CacheStorage, now_ms

logger = logging.getLogger(__name__)


class AudioCache:
    """Maps an audio cache key to the path and size of a rendered file.

    Only rows are managed here. Writing and deleting the files themselves is
    up to the caller.
    """

    def __init__(self, storage: CacheStorage) -> None:
        self.storage = storage

    def get_path(self, cache_key: str) -> Path | None:
        """Look up the audio file rendered for a cache key.

        A hit refreshes ``last_accessed_at``.

        Args:
            cache_key: Audio cache key (see ``hashing.audio_cache_key``)

        Returns:
            Stored file path on hit, None on miss
        """
        with self.storage.transaction() as conn:
            row = conn.execute(
                "SELECT id, file_path FROM audio_cache WHERE content_hash = ?",
                (cache_key,),
            ).fetchone()
            if row is None:
                return None

            conn.execute(
                """
                UPDATE audio_cache
                SET last_accessed_at = MAX(?, last_accessed_at + 1)
                WHERE id = ?
                """,
                (now_ms(), row["id"]),
            )

        return Path(row["file_path"])

    def put(self, cache_key: str, file_path: str | Path, file_size_bytes: int) -> None:
        """Insert or replace the row for a cache key.

        Args:
            cache_key: Audio cache key
            file_path: Path of the rendered audio file
            file_size_bytes: Size of the file in bytes
        """
        if file_size_bytes < 0:
            raise ValueError(f"file_size_bytes cannot be negative, got {file_size_bytes}")

        with self.storage.transaction() as conn:
            now = now_ms()
            existing = conn.execute(
                "SELECT id, last_accessed_at FROM audio_cache WHERE content_hash = ?",
                (cache_key,),
            ).fetchone()

            if existing is None:
                conn.execute(
                    """
                    INSERT INTO audio_cache
                        (content_hash, file_path, file_size_bytes, last_accessed_at, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (cache_key, str(file_path), file_size_bytes, now, now),
                )
            else:
                conn.execute(
                    """
                    UPDATE audio_cache
                    SET file_path = ?, file_size_bytes = ?, last_accessed_at = ?
                    WHERE id = ?
                    """,
                    (
                        str(file_path),
                        file_size_bytes,
                        max(now, existing["last_accessed_at"] + 1),
                        existing["id"],
                    ),
                )

        logger.debug(
            f"Stored audio {cache_key[:12]} -> {file_path} ({file_size_bytes} bytes)"
        )

    def entries(self) -> list[AudioCacheEntry]:
        """Return all rows, least recently used first."""
        with self.storage.transaction() as conn:
            rows = conn.execute(
                """
                SELECT id, content_hash, file_path, file_size_bytes,
                       last_accessed_at, created_at
                FROM audio_cache
                ORDER BY last_accessed_at ASC, id ASC
                """
            ).fetchall()

        return [
            AudioCacheEntry(
                id=row["id"],
                content_hash=row["content_hash"],
                file_path=Path(row["file_path"]),
                file_size_bytes=row["file_size_bytes"],
                last_accessed_at=row["last_accessed_at"],
                created_at=row["created_at"],
            )
            for row in rows
        ]
