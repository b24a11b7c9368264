"""Least-recently-used eviction over the audio cache."""

import logging
from collections.abc import Iterable
from pathlib import Path

from .storage import CacheStorage

logger = logging.getLogger(__name__)


def evict_lru(storage: CacheStorage, max_bytes: int, max_entries: int) -> list[str]:
    """Delete the oldest audio rows until both ceilings are satisfied.

    Rows are walked from least to most recently accessed (ties broken by row
    id). A row is removed while either the byte total or the entry count is
    still above its ceiling, so whichever limit needs more removals wins.
    Files on disk are not touched.

    Args:
        storage: Cache storage holding the audio_cache table
        max_bytes: Ceiling for the sum of file_size_bytes
        max_entries: Ceiling for the number of rows

    Returns:
        File paths of the evicted rows, oldest first, for the caller to delete

    Raises:
        ValueError: If a ceiling is negative
    """
    if max_bytes < 0 or max_entries < 0:
        raise ValueError(
            f"Eviction limits must be non-negative, got max_bytes={max_bytes}, "
            f"max_entries={max_entries}"
        )

    evicted: list[str] = []

    with storage.transaction() as conn:
        rows = conn.execute(
            """
            SELECT id, file_path, file_size_bytes FROM audio_cache
            ORDER BY last_accessed_at ASC, id ASC
            """
        ).fetchall()

        remaining_bytes = sum(row["file_size_bytes"] for row in rows)
        remaining_entries = len(rows)

        for row in rows:
            if remaining_bytes <= max_bytes and remaining_entries <= max_entries:
                break
            conn.execute("DELETE FROM audio_cache WHERE id = ?", (row["id"],))
            remaining_bytes -= row["file_size_bytes"]
            remaining_entries -= 1
            evicted.append(row["file_path"])

    if evicted:
        logger.info(
            f"Evicted {len(evicted)} audio cache entries "
            f"({remaining_entries} entries, {remaining_bytes} bytes remain)"
        )
    return evicted


def remove_evicted_files(paths: Iterable[str | Path]) -> list[Path]:
    """Unlink evicted audio files.

    Files that are already gone are skipped with a warning; the row that
    pointed to them no longer exists, so there is nothing left to repair.

    Returns:
        Paths that were actually removed
    """
    removed: list[Path] = []
    for raw_path in paths:
        path = Path(raw_path)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning(f"Evicted audio file already missing: {path}")
            continue
        removed.append(path)
        logger.debug(f"Removed evicted audio file: {path}")
    return removed
