"""Synthesis domain package for emospeak.

Holds the error taxonomy, synthesis parameters, the [SEP] marker parser and
the streaming pipeline that ties annotation, caching and synthesis together.
"""

from .errors import (
    AnnotationError,
    ConfigError,
    EmospeakError,
    PipelineCancelledError,
    StorageIOError,
    TTSAPIError,
    TTSAuthError,
    TTSError,
    format_error,
)
from .markers import MARKER, parse_marker_stream
from .models import PipelineResult, SynthesisParams

__all__ = [
    "MARKER",
    "AnnotationError",
    "ConfigError",
    "EmospeakError",
    "PipelineCancelledError",
    "PipelineResult",
    "StorageIOError",
    "SynthesisParams",
    "TTSAPIError",
    "TTSAuthError",
    "TTSError",
    "format_error",
    "parse_marker_stream",
]
