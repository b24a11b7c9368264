"""Data models for cache storage."""

from dataclasses import dataclass
from pathlib import Path


@dataclass
class AudioCacheEntry:
    """Row of the audio cache.

    Attributes:
        id: Row id (insertion order)
        content_hash: Audio cache key of the synthesis parameters
        file_path: Path to the rendered raw PCM file
        file_size_bytes: Size of that file
        last_accessed_at: Last hit or write, in epoch milliseconds
        created_at: First insert, in epoch milliseconds
    """

    id: int
    content_hash: str
    file_path: Path
    file_size_bytes: int
    last_accessed_at: int
    created_at: int


@dataclass
class AnnotationCacheEntry:
    """Row of the annotation cache.

    Attributes:
        id: Row id (insertion order)
        text_hash: Hash of the source text
        provider: Annotation provider name
        annotated_text: Provider output for the source text
        last_accessed_at: Last hit or write, in epoch milliseconds
        created_at: First insert, in epoch milliseconds
    """

    id: int
    text_hash: str
    provider: str
    annotated_text: str
    last_accessed_at: int
    created_at: int
