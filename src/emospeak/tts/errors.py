"""Custom emospeak exceptions.

One hierarchy per subsystem boundary: configuration, file I/O, synthesis,
annotation and pipeline control. Every exception keeps the underlying error
(if any) in ``original_error``.
"""

from pathlib import Path


class EmospeakError(Exception):
    """Base exception for all emospeak errors."""

    def __init__(
        self, message: str, original_error: BaseException | None = None
    ) -> None:
        super().__init__(message)
        self.original_error = original_error
        # Chunks already delivered to the caller before a pipeline failure
        self.partial_chunks: list[bytes] = []


class ConfigError(EmospeakError):
    """Exception raised for missing or invalid settings."""

    pass


class MissingApiKeyError(ConfigError):
    """Synthesis API key not found in environment or overrides."""

    def __init__(self) -> None:
        super().__init__("ElevenLabs API key not found")


class MissingVoiceIdError(ConfigError):
    """No voice id given by flag, environment or config file."""

    def __init__(self) -> None:
        super().__init__("Voice ID not configured")


class MissingTextError(ConfigError):
    """No text given by argument, file or stdin."""

    def __init__(self) -> None:
        super().__init__("No text provided")


class InvalidSettingError(ConfigError):
    """A setting has a value of the wrong type or range."""

    def __init__(self, name: str, value: object, reason: str) -> None:
        super().__init__(f"Invalid value for {name}: {value!r} ({reason})")
        self.name = name
        self.value = value


class StorageIOError(EmospeakError):
    """Exception raised when reading or writing a file fails."""

    def __init__(
        self,
        message: str,
        path: str | Path,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.path = str(path)


class FileReadError(StorageIOError):
    def __init__(
        self, path: str | Path, original_error: BaseException | None = None
    ) -> None:
        super().__init__(f"Failed to read file: {path}", path, original_error)


class FileWriteError(StorageIOError):
    def __init__(
        self, path: str | Path, original_error: BaseException | None = None
    ) -> None:
        super().__init__(f"Failed to write file: {path}", path, original_error)


class TTSError(EmospeakError):
    """Base exception for synthesis errors."""

    def __init__(
        self,
        message: str,
        original_error: BaseException | None = None,
        segment_index: int | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.segment_index = segment_index


class TTSAuthError(TTSError):
    """Exception raised for authentication failures.

    This typically occurs when:
    - API key is missing or invalid
    - Account has insufficient credits
    """

    pass


class TTSAPIError(TTSError):
    """Exception raised for API communication errors.

    This typically occurs when:
    - API server is unavailable (5xx errors)
    - Rate limits are exceeded (429 error)
    - Request format is invalid (4xx errors)
    - The audio stream breaks off mid-segment
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        original_error: BaseException | None = None,
        segment_index: int | None = None,
    ) -> None:
        super().__init__(message, original_error, segment_index)
        self.status_code = status_code


class AnnotationError(EmospeakError):
    """Exception raised when the annotation provider fails."""

    pass


class UnsupportedProviderError(AnnotationError):
    """Exception raised when an unknown annotation provider is selected."""

    def __init__(self, provider: str, supported: list[str] | None = None) -> None:
        supported = supported or []
        super().__init__(f"Unsupported annotation provider '{provider}'")
        self.provider = provider
        self.supported = supported


class PipelineCancelledError(EmospeakError):
    """Exception raised when a pipeline run is cancelled by the caller."""

    def __init__(self, segment_index: int) -> None:
        super().__init__(f"Pipeline cancelled at segment {segment_index + 1}")
        self.segment_index = segment_index


def _cause_message(error: EmospeakError) -> str:
    cause = error.original_error
    return str(cause) if cause is not None else str(error)


def format_error(error: EmospeakError) -> str:
    """Render an emospeak error as a single user-facing line."""
    if isinstance(error, MissingApiKeyError):
        return (
            "API key is required. Set the ELEVENLABS_API_KEY environment variable."
        )
    if isinstance(error, MissingVoiceIdError):
        return (
            "Voice ID is required. Use --voice-id, set EMOSPEAK_VOICE_ID, "
            "or add voice_id to the [tts] section of the config file."
        )
    if isinstance(error, MissingTextError):
        return "Text is required. Pass TEXT, use --file, or pipe text on stdin."
    if isinstance(error, FileReadError):
        return f"Failed to read file: {error.path}"
    if isinstance(error, FileWriteError):
        return f"Failed to write file: {error.path}"
    if isinstance(error, TTSError):
        if error.segment_index is not None:
            return (
                f"TTS failed at segment {error.segment_index + 1}: "
                f"{_cause_message(error)}"
            )
        return f"ElevenLabs TTS API error: {_cause_message(error)}"
    if isinstance(error, UnsupportedProviderError):
        supported = ", ".join(error.supported) if error.supported else "none"
        return (
            f'Unsupported annotation provider "{error.provider}". '
            f"Supported: {supported}."
        )
    if isinstance(error, AnnotationError):
        return f"Emotion annotation failed: {_cause_message(error)}"
    return str(error)
