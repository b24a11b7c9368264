"""Synthesis cache manager.

Ties together CacheStorage (SQLite bookkeeping), the annotation and audio
caches, and the audio files on disk, so the pipeline and the CLI deal with a
single object.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from pathlib import Path

from ..tts.errors import FileReadError, FileWriteError
from . import get_cache_dir
from .annotation_cache import AnnotationCache
from .audio_cache import AudioCache
from .evictor import evict_lru, remove_evicted_files
from .storage import CacheStorage

logger = logging.getLogger(__name__)

REPLAY_CHUNK_SIZE = 32 * 1024


class SynthesisCache:
    """High-level cache for annotations and rendered audio.

    Example:
        cache = SynthesisCache()

        path = await cache.load_audio(key)
        if path is None:
            pcm = b"".join(chunks_from_synthesizer)
            await cache.store_audio(key, pcm)

        # Maintenance, run whenever the caller decides
        cache.prune(max_bytes=500 * 1024 * 1024, max_entries=10_000)
    """

    def __init__(self, cache_dir: Path | None = None):
        """Initialize cache directories and storage.

        Args:
            cache_dir: Directory for cache storage (defaults to ~/.cache/emospeak)
        """
        self.cache_dir = Path(cache_dir) if cache_dir else get_cache_dir()
        self.cache_dir.mkdir(parents=True, exist_ok=True)

        self.audio_dir = self.cache_dir / "audio"
        self.audio_dir.mkdir(exist_ok=True)

        self.storage = CacheStorage(self.cache_dir)
        self.annotations = AnnotationCache(self.storage)
        self.audio = AudioCache(self.storage)

        logger.debug(f"SynthesisCache initialized at {self.cache_dir}")

    def audio_path_for(self, cache_key: str) -> Path:
        """Location of the raw PCM file for a cache key."""
        return self.audio_dir / f"{cache_key}.pcm"

    async def load_audio(self, cache_key: str) -> Path | None:
        """Return the cached file for a key, or None on miss.

        A row whose file has disappeared is reported as a miss so the segment
        gets synthesized again; the fresh write then replaces the row.
        """
        path = self.audio.get_path(cache_key)
        if path is None:
            logger.debug(f"Audio cache miss: {cache_key[:12]}")
            return None

        if not await asyncio.to_thread(path.exists):
            logger.warning(
                f"Cache corruption: metadata exists but audio file missing: {path}"
            )
            return None

        logger.debug(f"Audio cache hit: {cache_key[:12]} -> {path}")
        return path

    async def store_audio(self, cache_key: str, pcm: bytes) -> Path:
        """Write rendered audio to disk and record it in the audio cache.

        Raises:
            FileWriteError: If the file cannot be written
        """
        path = self.audio_path_for(cache_key)

        def _write() -> int:
            path.write_bytes(pcm)
            return path.stat().st_size

        try:
            size = await asyncio.to_thread(_write)
        except OSError as e:
            if path.exists():
                try:
                    path.unlink()
                    logger.debug(f"Cleaned up partial audio file: {path}")
                except OSError as cleanup_error:
                    logger.warning(
                        f"Failed to clean up partial audio file: {cleanup_error}"
                    )
            raise FileWriteError(path, e) from e

        self.audio.put(cache_key, path, size)
        return path

    async def iter_audio(
        self, path: Path, chunk_size: int = REPLAY_CHUNK_SIZE
    ) -> AsyncIterator[bytes]:
        """Yield a cached audio file in fixed-size chunks.

        Raises:
            FileReadError: If the file cannot be read
        """
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise FileReadError(path, e) from e

        for offset in range(0, len(data), chunk_size):
            yield data[offset : offset + chunk_size]

    def prune(self, max_bytes: int, max_entries: int) -> list[Path]:
        """Evict least recently used audio and delete the evicted files.

        Returns:
            Paths of the files removed from disk
        """
        evicted = evict_lru(self.storage, max_bytes, max_entries)
        return remove_evicted_files(evicted)

    def stats(self) -> dict[str, int]:
        """Summary counts for the CLI."""
        entries = self.audio.entries()
        return {
            "audio_entries": len(entries),
            "audio_bytes": sum(entry.file_size_bytes for entry in entries),
            "annotation_entries": self.storage.count("annotation_cache"),
        }
