"""TTS data models with validation."""

from dataclasses import dataclass, field

# Raw PCM rates the ElevenLabs streaming endpoint can return
SUPPORTED_SAMPLE_RATES = (8000, 16000, 22050, 24000, 44100, 48000)


@dataclass(frozen=True)
class SynthesisParams:
    """Parameters for one synthesis request.

    Args:
        api_key: Synthesis provider API key for this request (empty uses the
            key the synthesizer was created with)
        voice_id: Voice to synthesize with
        model: Provider model id
        sample_rate: Output sample rate of the raw PCM stream
        language: Language code passed to the provider
        text: Text (possibly annotated) to synthesize
    """

    api_key: str
    voice_id: str
    model: str
    sample_rate: int
    language: str
    text: str = ""

    def __post_init__(self) -> None:
        """Validate synthesis parameters."""
        if not self.voice_id or not self.voice_id.strip():
            raise ValueError("voice_id cannot be empty")
        if not self.model or not self.model.strip():
            raise ValueError("model cannot be empty")
        if self.sample_rate not in SUPPORTED_SAMPLE_RATES:
            raise ValueError(
                f"sample_rate must be one of {SUPPORTED_SAMPLE_RATES}, "
                f"got {self.sample_rate}"
            )

    def with_text(self, text: str) -> "SynthesisParams":
        """Return a copy of these parameters for another piece of text."""
        return SynthesisParams(
            api_key=self.api_key,
            voice_id=self.voice_id,
            model=self.model,
            sample_rate=self.sample_rate,
            language=self.language,
            text=text,
        )


@dataclass
class PipelineResult:
    """Outcome of a successful pipeline run.

    Attributes:
        audio_chunks: Every byte chunk delivered to the caller, in order
        used_text_segments: Text sent to synthesis (or found in cache) per segment
        cache_hits: Number of segments served from the audio cache
    """

    audio_chunks: list[bytes] = field(default_factory=list)
    used_text_segments: list[str] = field(default_factory=list)
    cache_hits: int = 0

    @property
    def pcm(self) -> bytes:
        """All audio chunks joined into one buffer."""
        return b"".join(self.audio_chunks)
