"""Provider abstraction for synthesis and annotation services.

This module provides registries for the remote collaborators, allowing
runtime selection of backends by name.
"""

from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from .base import Annotator, Synthesizer

from ..tts.errors import UnsupportedProviderError
from .elevenlabs import ElevenLabsSynthesizer
from .openai_annotator import OpenAIAnnotator

__all__ = ["AnnotatorRegistry", "ProviderRegistry"]


class ProviderRegistry:
    """Registry for managing TTS providers.

    This class maintains a registry of available synthesizers,
    allowing registration and retrieval by name.
    """

    _providers: ClassVar[dict[str, type["Synthesizer"]]] = {}

    @classmethod
    def register(cls, name: str, provider_class: type["Synthesizer"]) -> None:
        """Register a TTS provider.

        Args:
            name: Name to register the provider under
            provider_class: Provider class that implements Synthesizer
        """
        cls._providers[name] = provider_class

    @classmethod
    def get(cls, name: str) -> type["Synthesizer"]:
        """Get a provider class by name.

        Raises:
            KeyError: If provider name not found
        """
        if name not in cls._providers:
            available = ", ".join(cls._providers.keys()) if cls._providers else "none"
            raise KeyError(
                f"Provider '{name}' not found. Available providers: {available}"
            )
        return cls._providers[name]


class AnnotatorRegistry:
    """Registry for annotation providers."""

    _annotators: ClassVar[dict[str, type["Annotator"]]] = {}

    @classmethod
    def register(cls, name: str, annotator_class: type["Annotator"]) -> None:
        cls._annotators[name] = annotator_class

    @classmethod
    def names(cls) -> list[str]:
        return sorted(cls._annotators)

    @classmethod
    def create(cls, name: str, **options: Any) -> "Annotator":
        """Instantiate an annotator by provider name.

        Args:
            name: Provider name (e.g. "openai")
            **options: Passed to the annotator constructor

        Raises:
            UnsupportedProviderError: If no annotator is registered under name
            AnnotationError: If the annotator cannot be constructed
        """
        if name not in cls._annotators:
            raise UnsupportedProviderError(name, cls.names())
        return cls._annotators[name](**options)


# Register providers
ProviderRegistry.register("elevenlabs", ElevenLabsSynthesizer)
AnnotatorRegistry.register("openai", OpenAIAnnotator)
