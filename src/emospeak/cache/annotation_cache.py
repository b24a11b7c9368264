"""Persistent cache of annotated text keyed by (source text, provider)."""

import logging

from .hashing import compute_hash
from .models import AnnotationCacheEntry
from .storage import CacheStorage, now_ms

logger = logging.getLogger(__name__)


class AnnotationCache:
    """Maps (text, provider) to previously computed annotated text.

    The same source text has an independent entry per provider. Entries are
    never evicted.
    """

    def __init__(self, storage: CacheStorage) -> None:
        self.storage = storage

    def get(self, text: str, provider: str) -> str | None:
        """Look up the annotation for text by provider.

        A hit refreshes ``last_accessed_at``.

        Args:
            text: Original (unannotated) text
            provider: Annotation provider name

        Returns:
            Annotated text on hit, None on miss
        """
        text_hash = compute_hash(text)
        with self.storage.transaction() as conn:
            row = conn.execute(
                """
                SELECT id, annotated_text FROM annotation_cache
                WHERE text_hash = ? AND provider = ?
                """,
                (text_hash, provider),
            ).fetchone()
            if row is None:
                logger.debug(f"Annotation cache miss ({provider}): {text_hash[:12]}")
                return None

            conn.execute(
                """
                UPDATE annotation_cache
                SET last_accessed_at = MAX(?, last_accessed_at + 1)
                WHERE id = ?
                """,
                (now_ms(), row["id"]),
            )

        logger.debug(f"Annotation cache hit ({provider}): {text_hash[:12]}")
        return row["annotated_text"]

    def put(self, text: str, provider: str, annotated_text: str) -> None:
        """Insert or replace the annotation for (text, provider).

        Args:
            text: Original (unannotated) text
            provider: Annotation provider name
            annotated_text: Provider output to store
        """
        text_hash = compute_hash(text)
        with self.storage.transaction() as conn:
            now = now_ms()
            existing = conn.execute(
                """
                SELECT id, last_accessed_at FROM annotation_cache
                WHERE text_hash = ? AND provider = ?
                """,
                (text_hash, provider),
            ).fetchone()

            if existing is None:
                conn.execute(
                    """
                    INSERT INTO annotation_cache
                        (text_hash, provider, annotated_text, last_accessed_at, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (text_hash, provider, annotated_text, now, now),
                )
            else:
                conn.execute(
                    """
                    UPDATE annotation_cache
                    SET annotated_text = ?, last_accessed_at = ?
                    WHERE id = ?
                    """,
                    (
                        annotated_text,
                        max(now, existing["last_accessed_at"] + 1),
                        existing["id"],
                    ),
                )

        logger.debug(f"Stored annotation ({provider}): {text_hash[:12]}")

    def entries(self) -> list[AnnotationCacheEntry]:
        """Return all annotation rows ordered by id."""
        with self.storage.transaction() as conn:
            rows = conn.execute(
                """
                SELECT id, text_hash, provider, annotated_text,
                       last_accessed_at, created_at
                FROM annotation_cache ORDER BY id
                """
            ).fetchall()
        return [AnnotationCacheEntry(**dict(row)) for row in rows]
