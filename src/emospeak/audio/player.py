"""Speaker playback of rendered audio using pygame."""

# ruff: noqa: E402
import os

# Suppress pygame's welcome message BEFORE any pygame import
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "1"

import warnings

# Suppress pygame's pkg_resources deprecation warning spam
warnings.filterwarnings("ignore", category=UserWarning, module="pygame.pkgdata")

import asyncio
import io

import pygame

from .wav import pcm_to_wav


class AudioPlayer:
    """Plays raw 16-bit mono PCM through the system speakers."""

    def __init__(self, sample_rate: int) -> None:
        """Initialize the pygame mixer for the given sample rate.

        Raises:
            RuntimeError: If pygame mixer fails to initialize.
        """
        self.sample_rate = sample_rate
        try:
            pygame.mixer.init(frequency=sample_rate, size=-16, channels=1)
        except pygame.error as e:
            raise RuntimeError(f"Failed to initialize pygame audio mixer: {e}") from e

    def play_pcm(self, pcm: bytes) -> None:
        """Play PCM and block until playback finishes.

        Raises:
            ValueError: If no audio data provided.
            RuntimeError: If audio playback fails.
        """
        if not pcm:
            raise ValueError("No audio data provided")

        try:
            pygame.mixer.music.load(io.BytesIO(pcm_to_wav(pcm, self.sample_rate)))
            pygame.mixer.music.play()

            while pygame.mixer.music.get_busy():
                pygame.time.Clock().tick(10)
        except pygame.error as e:
            raise RuntimeError(f"Failed to play audio: {e}") from e

    async def play_pcm_async(self, pcm: bytes) -> None:
        """Play PCM without blocking the event loop.

        Raises:
            ValueError: If no audio data provided.
            RuntimeError: If audio playback fails.
        """
        if not pcm:
            raise ValueError("No audio data provided")

        # pygame blocks while playing, keep it off the event loop
        await asyncio.to_thread(self.play_pcm, pcm)
