"""Unit tests for config file loading and settings resolution."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from emospeak import config as config_module
from emospeak.config import (
    DEFAULT_CACHE_MAX_BYTES,
    generate_config,
    load_config,
    parse_config,
    resolve_cache_settings,
    resolve_settings,
)
from emospeak.tts.errors import (
    ConfigError,
    InvalidSettingError,
    MissingApiKeyError,
    MissingVoiceIdError,
)

ENV = {"ELEVENLABS_API_KEY": "el-key"}


def _file_config(**tts):
    return parse_config({"tts": {"voice_id": "file-voice", **tts}})


class TestLoadConfig:
    """Test reading the TOML file."""

    def test_generated_file_parses_to_defaults(self, tmp_path: Path) -> None:
        path = generate_config(tmp_path / "config.toml")

        config = load_config(path)

        assert config.tts.model == "eleven_v3"
        assert config.tts.sample_rate == 44100
        assert config.tts.language == "ja"
        assert config.tts.voice_id is None
        assert config.annotation.provider == "openai"
        assert config.annotation.model == "gpt-4o-mini"
        assert config.cache.max_bytes == DEFAULT_CACHE_MAX_BYTES
        assert config.cache.max_entries == 10_000

    def test_missing_file_is_generated_then_exits(self) -> None:
        with pytest.raises(SystemExit):
            load_config()

        assert config_module.CONFIG_PATH.exists()

    def test_missing_file_without_generation_gives_defaults(self) -> None:
        assert load_config(generate_missing=False) == parse_config({})
        assert not config_module.CONFIG_PATH.exists()

    def test_invalid_toml_raises_config_error(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[tts\nmodel = ")

        with pytest.raises(ConfigError, match="Invalid config file"):
            load_config(path)

    def test_file_values_are_read(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text(
            '[tts]\nvoice_id = "abc"\nsample_rate = 24000\n'
            "[cache]\nenabled = false\nmax_entries = 5\n"
        )

        config = load_config(path)

        assert config.tts.voice_id == "abc"
        assert config.tts.sample_rate == 24000
        assert config.cache.enabled is False
        assert config.cache.max_entries == 5

    def test_wrong_type_is_rejected(self) -> None:
        with pytest.raises(InvalidSettingError, match="cache.enabled"):
            parse_config({"cache": {"enabled": "yes"}})


class TestResolveSettings:
    """Test the CLI > env > file > default priority chain."""

    def test_missing_api_key(self) -> None:
        with pytest.raises(MissingApiKeyError):
            resolve_settings({}, {}, _file_config())

    def test_api_key_is_checked_before_voice(self) -> None:
        with pytest.raises(MissingApiKeyError):
            resolve_settings({}, {}, parse_config({}))

    def test_missing_voice_id(self) -> None:
        with pytest.raises(MissingVoiceIdError):
            resolve_settings({}, ENV, parse_config({}))

    def test_file_values_used_when_nothing_overrides(self) -> None:
        settings = resolve_settings({}, ENV, _file_config())

        assert settings.api_key == "el-key"
        assert settings.voice_id == "file-voice"
        assert settings.model == "eleven_v3"
        assert settings.annotate is True
        assert settings.cache_dir is None

    def test_env_overrides_file(self) -> None:
        env = {**ENV, "EMOSPEAK_VOICE_ID": "env-voice", "EMOSPEAK_SAMPLE_RATE": "22050"}

        settings = resolve_settings({}, env, _file_config())

        assert settings.voice_id == "env-voice"
        assert settings.sample_rate == 22050

    def test_cli_overrides_env(self) -> None:
        env = {**ENV, "EMOSPEAK_VOICE_ID": "env-voice", "EMOSPEAK_MODEL": "env-model"}

        settings = resolve_settings(
            {"voice_id": "cli-voice", "model": "cli-model"}, env, _file_config()
        )

        assert settings.voice_id == "cli-voice"
        assert settings.model == "cli-model"

    def test_none_overrides_fall_through(self) -> None:
        settings = resolve_settings(
            {"voice_id": None, "annotate": None, "cache": None}, ENV, _file_config()
        )

        assert settings.voice_id == "file-voice"
        assert settings.annotate is True
        assert settings.cache_enabled is True

    def test_false_overrides_are_respected(self) -> None:
        settings = resolve_settings(
            {"annotate": False, "cache": False}, ENV, _file_config()
        )

        assert settings.annotate is False
        assert settings.cache_enabled is False

    def test_invalid_sample_rate_from_env(self) -> None:
        env = {**ENV, "EMOSPEAK_SAMPLE_RATE": "fast"}
        with pytest.raises(InvalidSettingError, match="sample_rate"):
            resolve_settings({}, env, _file_config())

    def test_unsupported_sample_rate(self) -> None:
        with pytest.raises(InvalidSettingError, match="must be one of"):
            resolve_settings({"sample_rate": 11025}, ENV, _file_config())

    def test_negative_cache_limit(self) -> None:
        env = {**ENV, "EMOSPEAK_CACHE_MAX_ENTRIES": "-1"}
        with pytest.raises(InvalidSettingError, match="cannot be negative"):
            resolve_settings({}, env, _file_config())

    def test_cache_dir_from_env(self, tmp_path: Path) -> None:
        env = {**ENV, "EMOSPEAK_CACHE_DIR": str(tmp_path)}
        assert resolve_settings({}, env, _file_config()).cache_dir == tmp_path

    def test_openai_key_comes_from_env(self) -> None:
        env = {**ENV, "OPENAI_API_KEY": "oa-key"}
        assert resolve_settings({}, env, _file_config()).annotation_api_key == "oa-key"

    def test_synthesis_params(self) -> None:
        params = resolve_settings({}, ENV, _file_config()).synthesis_params()

        assert params.api_key == "el-key"
        assert params.voice_id == "file-voice"
        assert params.text == ""


class TestResolveCacheSettings:
    """Test cache location and limit resolution without provider keys."""

    def test_file_values_without_api_key(self, tmp_path: Path) -> None:
        file_config = parse_config(
            {"cache": {"dir": str(tmp_path), "max_bytes": 10, "max_entries": 2}}
        )

        settings = resolve_cache_settings({}, {}, file_config)

        assert settings.dir == tmp_path
        assert settings.max_bytes == 10
        assert settings.max_entries == 2

    def test_env_overrides_file(self, tmp_path: Path) -> None:
        env = {
            "EMOSPEAK_CACHE_DIR": str(tmp_path),
            "EMOSPEAK_CACHE_MAX_BYTES": "100",
            "EMOSPEAK_CACHE_MAX_ENTRIES": "3",
        }

        settings = resolve_cache_settings({}, env, parse_config({}))

        assert settings.dir == tmp_path
        assert settings.max_bytes == 100
        assert settings.max_entries == 3

    def test_overrides_beat_env(self, tmp_path: Path) -> None:
        env = {"EMOSPEAK_CACHE_DIR": "/elsewhere", "EMOSPEAK_CACHE_MAX_ENTRIES": "3"}

        settings = resolve_cache_settings(
            {"cache_dir": str(tmp_path), "cache_max_entries": 0},
            env,
            parse_config({}),
        )

        assert settings.dir == tmp_path
        assert settings.max_entries == 0

    def test_defaults(self) -> None:
        settings = resolve_cache_settings({}, {}, parse_config({}))

        assert settings.dir is None
        assert settings.max_bytes == DEFAULT_CACHE_MAX_BYTES

    def test_negative_limit_from_env(self) -> None:
        with pytest.raises(InvalidSettingError, match="cannot be negative"):
            resolve_cache_settings(
                {}, {"EMOSPEAK_CACHE_MAX_BYTES": "-5"}, parse_config({})
            )

    def test_matches_speak_settings(self, tmp_path: Path) -> None:
        env = {**ENV, "EMOSPEAK_CACHE_DIR": str(tmp_path)}

        assert (
            resolve_cache_settings({}, env, _file_config()).dir
            == resolve_settings({}, env, _file_config()).cache_dir
        )
