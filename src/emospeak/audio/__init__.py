"""Audio output package for emospeak.

WAV container handling for rendered PCM and optional speaker playback
using pygame.
"""

from .wav import build_wav_header, pcm_to_wav, write_wav

__all__ = ["build_wav_header", "pcm_to_wav", "write_wav"]
