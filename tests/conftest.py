"""Pytest configuration and fixtures for emospeak tests."""

from pathlib import Path

import pytest

from emospeak.tts.models import SynthesisParams

PROVIDER_ENV_VARS = (
    "ELEVENLABS_API_KEY",
    "OPENAI_API_KEY",
    "EMOSPEAK_VOICE_ID",
    "EMOSPEAK_MODEL",
    "EMOSPEAK_SAMPLE_RATE",
    "EMOSPEAK_LANGUAGE",
    "EMOSPEAK_CACHE_DIR",
    "EMOSPEAK_CACHE_MAX_BYTES",
    "EMOSPEAK_CACHE_MAX_ENTRIES",
)


@pytest.fixture(autouse=True)
def isolate_user_dirs(monkeypatch, tmp_path) -> Path:
    """Keep every test away from the real config file, cache and API keys."""
    config_path = tmp_path / "config" / "config.toml"
    cache_dir = tmp_path / "cache"

    monkeypatch.setattr("emospeak.config.CONFIG_PATH", config_path)
    monkeypatch.setattr("emospeak.cli.CONFIG_PATH", config_path)
    monkeypatch.setattr("emospeak.cache.manager.get_cache_dir", lambda: cache_dir)

    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    return tmp_path


@pytest.fixture
def params() -> SynthesisParams:
    """Synthesis parameters for a fake voice."""
    return SynthesisParams(
        api_key="test_key",
        voice_id="voice-1",
        model="eleven_v3",
        sample_rate=44100,
        language="ja",
    )
