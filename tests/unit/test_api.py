"""Unit tests for the library-level synthesize() API."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

import emospeak
from emospeak.api import synthesize
from emospeak.audio.wav import WAV_HEADER_SIZE
from emospeak.tts.errors import MissingApiKeyError
from emospeak.tts.models import PipelineResult


class TestSynthesizeApi:
    """Test settings handling and WAV output."""

    def test_package_exposes_synthesize_lazily(self) -> None:
        assert emospeak.synthesize is synthesize
        assert emospeak.__version__ == "0.1.0"

    @pytest.mark.asyncio
    async def test_returns_wav_bytes(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.setenv("ELEVENLABS_API_KEY", "el-key")

        with patch(
            "emospeak.api.run_synthesis",
            new_callable=AsyncMock,
            return_value=PipelineResult([b"ab", b"cd"], ["hello"]),
        ) as mock_run:
            wav = await synthesize(
                "hello", voice_id="v1", sample_rate=24000, annotate=False,
                output=tmp_path / "out.wav",
            )

        assert wav[:4] == b"RIFF"
        assert wav[WAV_HEADER_SIZE:] == b"abcd"
        assert (tmp_path / "out.wav").read_bytes() == wav
        settings = mock_run.call_args.args[1]
        assert settings.sample_rate == 24000
        assert settings.annotate is False

    @pytest.mark.asyncio
    async def test_does_not_generate_config_file(self, monkeypatch) -> None:
        from emospeak import config as config_module

        monkeypatch.setenv("ELEVENLABS_API_KEY", "el-key")
        with patch(
            "emospeak.api.run_synthesis",
            new_callable=AsyncMock,
            return_value=PipelineResult(),
        ):
            await synthesize("hello", voice_id="v1")

        assert not config_module.CONFIG_PATH.exists()

    @pytest.mark.asyncio
    async def test_missing_api_key(self) -> None:
        with pytest.raises(MissingApiKeyError):
            await synthesize("hello", voice_id="v1")

    @pytest.mark.asyncio
    async def test_explicit_api_key(self) -> None:
        with patch(
            "emospeak.api.run_synthesis",
            new_callable=AsyncMock,
            return_value=PipelineResult(),
        ) as mock_run:
            await synthesize("hello", voice_id="v1", api_key="given")

        assert mock_run.call_args.args[1].api_key == "given"
