"""Content hashing for cache keys."""

import hashlib
import json


def compute_hash(value: str) -> str:
    """Return the SHA-256 digest of a string as 64 lowercase hex characters."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def audio_cache_key(text: str, voice_id: str, model: str, sample_rate: int) -> str:
    """Compute the audio cache key for one synthesis parameter tuple.

    The tuple is serialized to compact JSON with a fixed field order, so the
    key does not depend on how the caller built its arguments. Every field
    that changes the synthesized bytes must be part of the key.

    Args:
        text: Text sent to the synthesizer
        voice_id: Voice identifier
        model: Synthesis model id
        sample_rate: Output sample rate

    Returns:
        64-character hex digest
    """
    payload = json.dumps(
        {
            "text": text,
            "voiceId": voice_id,
            "model": model,
            "sampleRate": sample_rate,
        },
        ensure_ascii=False,
        separators=(",", ":"),
    )
    return compute_hash(payload)
