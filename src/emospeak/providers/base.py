"""Abstract base classes for the remote collaborators.

This module defines the interfaces the pipeline relies on: a synthesizer
that streams raw audio for a piece of text, and an optional annotator that
enriches text with prosody/emotion markup.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from ..tts.models import SynthesisParams


class Synthesizer(ABC):
    """Abstract base class for text-to-speech providers.

    Voice Dictionary Structure:
        Each voice returned by list_voices() should follow this structure:
        {
            "id": str,       # Unique identifier for the voice
            "name": str,     # Human-readable name for the voice
            "provider": str  # Name of the provider (e.g., "elevenlabs")
        }
    """

    name: str = ""

    @abstractmethod
    def generate(self, params: SynthesisParams) -> AsyncIterator[bytes]:
        """Stream synthesized audio for params.text.

        Args:
            params: Voice, model, sample rate, language and text

        Yields:
            Raw PCM chunks in playback order

        Raises:
            TTSAuthError: If the provider rejects the credentials
            TTSAPIError: If the request or the stream fails
        """

    @abstractmethod
    async def list_voices(self) -> list[dict]:
        """Return available voices for this provider."""


class Annotator(ABC):
    """Abstract base class for prosody/emotion annotation providers.

    ``name`` keys the annotation cache, so two providers never share entries.
    """

    name: str = ""

    @abstractmethod
    async def annotate(self, text: str) -> str:
        """Return the whole annotated text in one response.

        Raises:
            AnnotationError: If the provider call fails
        """

    @abstractmethod
    def stream(self, text: str) -> AsyncIterator[str]:
        """Stream the annotated text as tokens, with [SEP] between segments.

        Raises:
            AnnotationError: If the provider call or the stream fails
        """
