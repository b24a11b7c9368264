"""Unit tests for the WAV container helpers."""

import struct
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from emospeak.audio.wav import WAV_HEADER_SIZE, build_wav_header, pcm_to_wav, write_wav
from emospeak.tts.errors import FileWriteError


class TestBuildWavHeader:
    """Test the canonical 44-byte header."""

    def test_header_layout(self) -> None:
        header = build_wav_header(1000, 44100)

        assert len(header) == WAV_HEADER_SIZE
        assert header[0:4] == b"RIFF"
        assert struct.unpack("<I", header[4:8])[0] == 1036
        assert header[8:16] == b"WAVEfmt "
        fmt_size, fmt, channels, rate, byte_rate, align, bits = struct.unpack(
            "<IHHIIHH", header[16:36]
        )
        assert (fmt_size, fmt, channels, rate) == (16, 1, 1, 44100)
        assert byte_rate == 88200
        assert (align, bits) == (2, 16)
        assert header[36:40] == b"data"
        assert struct.unpack("<I", header[40:44])[0] == 1000

    def test_stereo_rates(self) -> None:
        header = build_wav_header(0, 24000, channels=2)
        assert struct.unpack("<I", header[28:32])[0] == 96000

    def test_negative_length_rejected(self) -> None:
        with pytest.raises(ValueError):
            build_wav_header(-1, 44100)


class TestWriteWav:
    def test_pcm_to_wav_appends_data(self) -> None:
        wav = pcm_to_wav(b"\x01\x02", 22050)
        assert wav[WAV_HEADER_SIZE:] == b"\x01\x02"

    def test_write_creates_parents(self, tmp_path: Path) -> None:
        path = write_wav(tmp_path / "out" / "a.wav", b"\x00\x00", 44100)

        assert path.read_bytes() == pcm_to_wav(b"\x00\x00", 44100)

    def test_write_failure_raises_file_write_error(self, tmp_path: Path) -> None:
        with patch.object(Path, "write_bytes", side_effect=OSError("read-only")):
            with pytest.raises(FileWriteError) as exc_info:
                write_wav(tmp_path / "a.wav", b"", 44100)

        assert exc_info.value.path == str(tmp_path / "a.wav")
