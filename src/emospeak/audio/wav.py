"""Canonical 44-byte WAV container for raw 16-bit PCM."""

import struct
from pathlib import Path

from ..tts.errors import FileWriteError

WAV_HEADER_SIZE = 44


def build_wav_header(
    data_length: int, sample_rate: int, channels: int = 1, bits_per_sample: int = 16
) -> bytes:
    """Build the RIFF/WAVE header for data_length bytes of PCM.

    Raises:
        ValueError: If data_length is negative
    """
    if data_length < 0:
        raise ValueError("data_length cannot be negative")

    block_align = channels * bits_per_sample // 8
    byte_rate = sample_rate * block_align
    return (
        b"RIFF"
        + struct.pack("<I", 36 + data_length)
        + b"WAVE"
        + b"fmt "
        + struct.pack(
            "<IHHIIHH", 16, 1, channels, sample_rate, byte_rate, block_align,
            bits_per_sample,
        )
        + b"data"
        + struct.pack("<I", data_length)
    )


def pcm_to_wav(pcm: bytes, sample_rate: int) -> bytes:
    """Wrap raw 16-bit mono PCM in a WAV container."""
    return build_wav_header(len(pcm), sample_rate) + pcm


def write_wav(path: str | Path, pcm: bytes, sample_rate: int) -> Path:
    """Write PCM as a WAV file, creating parent directories.

    Raises:
        FileWriteError: If the file cannot be written
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(pcm_to_wav(pcm, sample_rate))
    except OSError as e:
        raise FileWriteError(path, e) from e
    return path
