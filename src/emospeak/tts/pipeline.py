"""Streaming synthesis pipeline for emospeak.

Turns text into ordered audio chunks: optional streamed annotation, split into
segments on the [SEP] marker, then per segment an audio cache lookup followed
either by a cache replay or by a streamed synthesis that is persisted to the
cache once complete.

Run states: Idle -> Annotating (when an annotator is present) ->
per segment (CacheLookup -> CacheHit | Synthesizing -> Streaming ->
CachePersist) -> Done. Any error ends the run.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import aclosing

from ..cache.hashing import audio_cache_key
from ..cache.manager import SynthesisCache
from ..providers.base import Annotator, Synthesizer
from .errors import (
    AnnotationError,
    EmospeakError,
    FileWriteError,
    PipelineCancelledError,
    TTSAPIError,
    TTSError,
)
from .markers import parse_marker_stream
from .models import PipelineResult, SynthesisParams

logger = logging.getLogger(__name__)

ChunkCallback = Callable[[bytes], None]

OUTPUT_NAME = "<output>"


async def _single(text: str) -> AsyncIterator[str]:
    yield text


class StreamingPipeline:
    """Orchestrates annotation, caching and synthesis for one utterance.

    Segments are processed strictly one after another: every chunk of
    segment i reaches ``on_chunk`` before segment i+1 starts.

    Example:
        pipeline = StreamingPipeline(cache=SynthesisCache())

        result = await pipeline.run(
            "こんにちは。今日はいい天気ですね。",
            params,
            ElevenLabsSynthesizer(),
            annotator=OpenAIAnnotator(),
            on_chunk=sys.stdout.buffer.write,
        )
        # result.audio_chunks, result.used_text_segments, result.cache_hits
    """

    def __init__(
        self,
        cache: SynthesisCache | None = None,
        replay_hits: bool = True,
    ) -> None:
        """Initialize the pipeline.

        Args:
            cache: Annotation/audio cache. None disables caching entirely.
            replay_hits: Emit cached audio through on_chunk on a cache hit.
                When False, a hit produces no output for that segment.
        """
        self.cache = cache
        self.replay_hits = replay_hits

    async def run(
        self,
        text: str,
        params: SynthesisParams,
        synthesizer: Synthesizer,
        annotator: Annotator | None = None,
        on_chunk: ChunkCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> PipelineResult:
        """Synthesize text, streaming audio chunks to on_chunk as they arrive.

        Args:
            text: Text to speak
            params: Voice, model, sample rate, language and API key
            synthesizer: Synthesis provider
            annotator: Optional annotation provider
            on_chunk: Called synchronously with every audio chunk, in order
            cancel_event: Checked before each segment and between chunks

        Returns:
            PipelineResult with every emitted chunk and the text per segment

        Raises:
            AnnotationError: If annotation fails; raised before any synthesis
                when the annotator fails up front
            TTSError: If synthesis of a segment fails
            FileReadError: If a cached audio file cannot be replayed
            FileWriteError: If a rendered segment cannot be cached, or
                on_chunk fails with an OSError (path ``<output>``)
            PipelineCancelledError: If cancel_event is set during the run

            Any raised EmospeakError carries ``partial_chunks``, the chunks
            already delivered to on_chunk before the failure.
        """
        result = PipelineResult()

        if not text.strip():
            logger.debug("Empty text, nothing to synthesize")
            return result

        emit = on_chunk or (lambda chunk: None)

        try:
            async with aclosing(self._segments(text, annotator)) as segments:
                index = 0
                async for segment in segments:
                    if not segment.strip():
                        logger.debug("Skipping blank trailing segment")
                        continue
                    self._check_cancelled(cancel_event, index)
                    await self._process_segment(
                        index, segment, params, synthesizer, emit, result, cancel_event
                    )
                    index += 1
        except EmospeakError as e:
            e.partial_chunks = list(result.audio_chunks)
            raise

        logger.info(
            f"Pipeline complete: {len(result.used_text_segments)} segments, "
            f"{result.cache_hits} from cache, {len(result.pcm)} bytes"
        )
        return result

    async def _segments(
        self, text: str, annotator: Annotator | None
    ) -> AsyncIterator[str]:
        """Yield speech segments for text, annotated when an annotator is given."""
        if annotator is None:
            yield text
            return

        provider = annotator.name
        cached = self.cache.annotations.get(text, provider) if self.cache else None
        if cached is not None:
            logger.debug(f"Using cached annotation from {provider}")
            async for segment in parse_marker_stream(_single(cached)):
                yield segment
            return

        logger.debug(f"Annotating with {provider}")

        async def _recording_tokens() -> AsyncIterator[str]:
            recorded: list[str] = []
            try:
                async for token in annotator.stream(text):
                    recorded.append(token)
                    yield token
            except AnnotationError:
                raise
            except Exception as e:
                raise AnnotationError(f"Annotation stream failed: {e}", e) from e

            annotated = "".join(recorded)
            if not annotated.strip():
                logger.warning(f"{provider} returned no annotation, using plain text")
                yield text
                return

            # Stored before the last segment is synthesized
            if self.cache:
                self.cache.annotations.put(text, provider, annotated)

        async for segment in parse_marker_stream(_recording_tokens()):
            yield segment

    async def _process_segment(
        self,
        index: int,
        segment: str,
        params: SynthesisParams,
        synthesizer: Synthesizer,
        emit: ChunkCallback,
        result: PipelineResult,
        cancel_event: asyncio.Event | None,
    ) -> None:
        result.used_text_segments.append(segment)
        key = audio_cache_key(segment, params.voice_id, params.model, params.sample_rate)

        if self.cache:
            cached_path = await self.cache.load_audio(key)
            if cached_path is not None:
                result.cache_hits += 1
                logger.debug(f"Segment {index + 1}: cache hit")
                if self.replay_hits:
                    async for chunk in self.cache.iter_audio(cached_path):
                        self._check_cancelled(cancel_event, index)
                        self._deliver(chunk, emit, result)
                return

        logger.debug(f"Segment {index + 1}: synthesizing {len(segment)} chars")
        segment_chunks: list[bytes] = []
        stream = self._synthesize(index, params.with_text(segment), synthesizer)
        async with aclosing(stream) as chunks:
            async for chunk in chunks:
                self._check_cancelled(cancel_event, index)
                segment_chunks.append(chunk)
                self._deliver(chunk, emit, result)

        if self.cache:
            await self.cache.store_audio(key, b"".join(segment_chunks))

    @staticmethod
    async def _synthesize(
        index: int, params: SynthesisParams, synthesizer: Synthesizer
    ) -> AsyncIterator[bytes]:
        """Stream one segment from the synthesizer, tagging errors with index."""
        try:
            async for chunk in synthesizer.generate(params):
                yield chunk
        except TTSError as e:
            if e.segment_index is None:
                e.segment_index = index
            raise
        except EmospeakError:
            raise
        except Exception as e:
            raise TTSAPIError(
                f"Synthesis failed: {e}", original_error=e, segment_index=index
            ) from e

    @staticmethod
    def _deliver(chunk: bytes, emit: ChunkCallback, result: PipelineResult) -> None:
        try:
            emit(chunk)
        except OSError as e:
            raise FileWriteError(OUTPUT_NAME, e) from e
        result.audio_chunks.append(chunk)

    @staticmethod
    def _check_cancelled(cancel_event: asyncio.Event | None, index: int) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise PipelineCancelledError(index)
