"""High-level API for emospeak library usage."""

import os
from pathlib import Path

from .audio.wav import pcm_to_wav, write_wav
from .config import load_config, resolve_settings
from .core import run_synthesis


async def synthesize(
    text: str,
    voice_id: str | None = None,
    model: str | None = None,
    sample_rate: int | None = None,
    language: str | None = None,
    annotate: bool | None = None,
    provider: str | None = None,
    cache: bool | None = None,
    cache_dir: str | Path | None = None,
    output: str | Path | None = None,
    api_key: str | None = None,
) -> bytes:
    """Synthesize speech from text.

    Arguments left as None fall back to environment variables, then to
    ~/.config/emospeak/config.toml (if present), then to defaults.

    Args:
        text: Text to speak
        voice_id: ElevenLabs voice id
        model: ElevenLabs model id
        sample_rate: PCM sample rate
        language: Language code
        annotate: Add emotion tags before synthesis
        provider: Annotation provider name
        cache: Use the annotation/audio cache
        cache_dir: Cache directory
        output: Also save the WAV to this path
        api_key: ElevenLabs API key

    Returns:
        WAV bytes of the whole utterance

    Raises:
        ConfigError: If required settings are missing or invalid
        EmospeakError: If annotation, synthesis or caching fails
    """
    overrides = {
        "api_key": api_key,
        "voice_id": voice_id,
        "model": model,
        "sample_rate": sample_rate,
        "language": language,
        "annotate": annotate,
        "provider": provider,
        "cache": cache,
        "cache_dir": str(cache_dir) if cache_dir else None,
    }
    settings = resolve_settings(
        overrides, os.environ, load_config(generate_missing=False)
    )

    result = await run_synthesis(text, settings)

    if output:
        write_wav(output, result.pcm, settings.sample_rate)

    return pcm_to_wav(result.pcm, settings.sample_rate)
