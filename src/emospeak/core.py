"""Core functionality for emospeak - orchestrates annotation, caching and synthesis."""

import asyncio
import logging
from pathlib import Path

from .audio.wav import write_wav
from .cache.manager import SynthesisCache
from .config import Settings
from .providers import AnnotatorRegistry, ProviderRegistry
from .providers.base import Annotator, Synthesizer
from .tts.errors import FileWriteError, TTSAPIError, TTSError
from .tts.models import PipelineResult
from .tts.pipeline import ChunkCallback, StreamingPipeline

logger = logging.getLogger(__name__)

SYNTHESIS_PROVIDER = "elevenlabs"


async def list_available_voices(api_key: str | None = None) -> list[dict]:
    """List all available ElevenLabs voices.

    Raises:
        TTSAuthError: If API key is not configured
        TTSAPIError: If API call fails
    """
    try:
        provider = ProviderRegistry.get(SYNTHESIS_PROVIDER)(api_key=api_key)
        return await provider.list_voices()
    except TTSError:
        raise
    except Exception as e:
        raise TTSAPIError(f"Failed to list voices: {e}", None, e) from e


def build_annotator(settings: Settings) -> Annotator | None:
    """Create the configured annotator, or None when annotation is off.

    Raises:
        UnsupportedProviderError: If the provider name is unknown
        AnnotationError: If the annotator cannot be created
    """
    if not settings.annotate:
        return None
    return AnnotatorRegistry.create(
        settings.annotation_provider,
        api_key=settings.annotation_api_key,
        model=settings.annotation_model,
    )


def build_cache(settings: Settings) -> SynthesisCache | None:
    if not settings.cache_enabled:
        return None
    return SynthesisCache(settings.cache_dir)


async def run_synthesis(
    text: str,
    settings: Settings,
    on_chunk: ChunkCallback | None = None,
    synthesizer: Synthesizer | None = None,
    annotator: Annotator | None = None,
    cancel_event: asyncio.Event | None = None,
) -> PipelineResult:
    """Synthesize text with the configured providers and cache.

    Args:
        text: Text to speak
        settings: Resolved settings
        on_chunk: Receives each PCM chunk as soon as it is available
        synthesizer: Synthesizer to use instead of the configured one
        annotator: Annotator to use instead of the configured one
        cancel_event: Set to stop the run between chunks

    Raises:
        EmospeakError: Any pipeline, provider or cache failure
    """
    if synthesizer is None:
        synthesizer = ProviderRegistry.get(SYNTHESIS_PROVIDER)(api_key=settings.api_key)
    if annotator is None:
        annotator = build_annotator(settings)

    cache = build_cache(settings)
    pipeline = StreamingPipeline(cache=cache, replay_hits=settings.replay_hits)

    result = await pipeline.run(
        text,
        settings.synthesis_params(),
        synthesizer,
        annotator=annotator,
        on_chunk=on_chunk,
        cancel_event=cancel_event,
    )

    if cache and settings.prune_after_run:
        removed = cache.prune(settings.cache_max_bytes, settings.cache_max_entries)
        if removed:
            logger.debug(f"Pruned {len(removed)} cached audio files")

    return result


def write_outputs(
    result: PipelineResult, text: str, output: Path, sample_rate: int
) -> list[Path]:
    """Write the WAV file and, when annotation changed the text, a .txt beside it.

    Returns:
        Paths written

    Raises:
        FileWriteError: If a file cannot be written
    """
    written = [write_wav(output, result.pcm, sample_rate)]

    annotated = "".join(result.used_text_segments)
    if annotated and annotated != text:
        text_path = output.with_suffix(".txt")
        try:
            text_path.write_text(annotated, encoding="utf-8")
        except OSError as e:
            raise FileWriteError(text_path, e) from e
        written.append(text_path)

    return written


async def play_audio(pcm: bytes, sample_rate: int) -> None:
    """Play PCM through the speakers.

    Raises:
        RuntimeError: If audio playback fails
    """
    # pygame is only needed for playback
    from .audio.player import AudioPlayer

    player = AudioPlayer(sample_rate)
    await player.play_pcm_async(pcm)
