"""ElevenLabs text-to-speech provider implementation."""

import os
from collections.abc import AsyncIterator

from elevenlabs.client import AsyncElevenLabs

from ..tts.errors import TTSAPIError, TTSAuthError, TTSError
from ..tts.models import SynthesisParams
from .base import Synthesizer


def _voice_settings(model: str) -> dict:
    """Voice settings tuned per model family."""
    if model.startswith("eleven_v3"):
        # v3 requires stability of 0.0 (creative), 0.5 (natural) or 1.0 (robust)
        return {"stability": 0.5, "similarity_boost": 0.75, "style": 0.4}
    return {
        "stability": 0.65,
        "similarity_boost": 0.75,
        "style": 0.4,
        "use_speaker_boost": True,
    }


def _map_error(e: Exception, action: str) -> TTSError:
    """Translate an SDK or transport exception into a TTSError."""
    status_code = getattr(e, "status_code", None)
    message = str(e)
    if status_code == 401 or "unauthorized" in message.lower() or "401" in message:
        return TTSAuthError(f"Authentication failed: {e}", e)
    if status_code == 429 or "429" in message:
        return TTSAPIError(f"Rate limit exceeded: {e}", 429, e)
    if isinstance(status_code, int) and status_code >= 500:
        return TTSAPIError(f"Server error: {e}", status_code, e)
    return TTSAPIError(f"{action} failed: {e}", status_code, e)


class ElevenLabsSynthesizer(Synthesizer):
    """ElevenLabs TTS provider streaming raw PCM.

    Uses the async SDK client so the audio stream is consumed without
    blocking the event loop.
    """

    name = "elevenlabs"

    def __init__(self, api_key: str | None = None) -> None:
        """Initialize ElevenLabs provider.

        Args:
            api_key: ElevenLabs API key. If not provided, reads from
                    ELEVENLABS_API_KEY environment variable.

        Raises:
            TTSAuthError: If API key is not provided or invalid.
        """
        self._api_key = api_key or os.getenv("ELEVENLABS_API_KEY")
        if not self._api_key:
            raise TTSAuthError(
                "ElevenLabs API key not found. Set ELEVENLABS_API_KEY environment "
                "variable or provide api_key parameter."
            )

        try:
            self._client = AsyncElevenLabs(api_key=self._api_key)
        except Exception as e:
            raise TTSAuthError(f"Failed to initialize ElevenLabs client: {e}", e) from e

        # Clients for keys passed per request in SynthesisParams
        self._clients: dict[str, AsyncElevenLabs] = {self._api_key: self._client}

        # Cache for voices to avoid repeated API calls
        self._voices_cache: list[dict] | None = None

    def _client_for(self, api_key: str) -> AsyncElevenLabs:
        """Client bound to api_key, falling back to the constructor key."""
        key = api_key or self._api_key
        if key not in self._clients:
            try:
                self._clients[key] = AsyncElevenLabs(api_key=key)
            except Exception as e:
                raise TTSAuthError(
                    f"Failed to initialize ElevenLabs client: {e}", e
                ) from e
        return self._clients[key]

    async def generate(self, params: SynthesisParams) -> AsyncIterator[bytes]:
        """Stream raw 16-bit mono PCM for params.text.

        params.api_key selects the account for this request; an empty key
        uses the one given to the constructor.

        Raises:
            TTSAPIError: If API call fails
            TTSAuthError: If authentication fails
            ValueError: If text is empty
        """
        if not params.text or not params.text.strip():
            raise ValueError("Text cannot be empty")

        request = {
            "voice_id": params.voice_id,
            "text": params.text,
            "model_id": params.model,
            "output_format": f"pcm_{params.sample_rate}",
            "voice_settings": _voice_settings(params.model),
        }
        if params.language:
            request["language_code"] = params.language

        client = self._client_for(params.api_key)
        received = 0
        try:
            async for chunk in client.text_to_speech.stream(**request):
                if not chunk:
                    continue
                received += len(chunk)
                yield chunk
        except TTSError:
            raise
        except Exception as e:
            raise _map_error(e, "API call") from e

        if received == 0:
            raise TTSAPIError("No audio data received from API")

    async def list_voices(self) -> list[dict]:
        """Get list of available voices.

        Results are cached after first call to avoid repeated API requests.

        Returns:
            List of voice dictionaries with id, name, and provider fields

        Raises:
            TTSAPIError: If API call fails
            TTSAuthError: If authentication fails
        """
        if self._voices_cache is not None:
            return self._voices_cache

        try:
            response = await self._client.voices.get_all()
        except Exception as e:
            raise _map_error(e, "Listing voices") from e

        self._voices_cache = [
            {"id": voice.voice_id, "name": voice.name, "provider": self.name}
            for voice in response.voices
        ]
        return self._voices_cache
