"""Configuration management for emospeak.

Loads configuration from ~/.config/emospeak/config.toml.
Priority chain: CLI flags > env vars > config file > built-in defaults.
"""

import sys
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .tts.errors import (
    ConfigError,
    InvalidSettingError,
    MissingApiKeyError,
    MissingVoiceIdError,
)
from .tts.models import SUPPORTED_SAMPLE_RATES, SynthesisParams

CONFIG_DIR = Path.home() / ".config" / "emospeak"
CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULT_MODEL = "eleven_v3"
DEFAULT_SAMPLE_RATE = 44100
DEFAULT_LANGUAGE = "ja"
DEFAULT_ANNOTATION_PROVIDER = "openai"
DEFAULT_CACHE_MAX_BYTES = 500 * 1024 * 1024
DEFAULT_CACHE_MAX_ENTRIES = 10_000

DEFAULT_CONFIG = """\
# emospeak configuration

[tts]
# ElevenLabs voice id (list them with `emospeak voices`)
# voice_id = ""

# "eleven_v3" understands the emotion tags added by annotation
model = "eleven_v3"

# Raw PCM sample rate: 8000, 16000, 22050, 24000, 44100 or 48000
sample_rate = 44100

language = "ja"

[annotation]
# Add emotion/prosody tags with an LLM before synthesis
enabled = true
provider = "openai"
model = "gpt-4o-mini"

[cache]
# Reuse annotations and rendered audio for text seen before
enabled = true

# Cache directory (defaults to ~/.cache/emospeak)
# dir = ""

# Audio cache ceilings enforced by least-recently-used eviction
max_bytes = 524288000
max_entries = 10000

# Stream cached audio to the output on a cache hit
replay_hits = true

# Evict after every `emospeak speak` run
prune_after_run = true

# API keys are read from environment variables, not this file:
#   ELEVENLABS_API_KEY  - ElevenLabs synthesis
#   OPENAI_API_KEY      - OpenAI annotation
"""


@dataclass(frozen=True)
class TTSConfig:
    """Synthesis configuration."""

    voice_id: str | None
    model: str
    sample_rate: int
    language: str


@dataclass(frozen=True)
class AnnotationConfig:
    """Emotion annotation configuration."""

    enabled: bool
    provider: str
    model: str | None


@dataclass(frozen=True)
class CacheConfig:
    """Annotation/audio cache configuration."""

    enabled: bool
    dir: str | None
    max_bytes: int
    max_entries: int
    replay_hits: bool
    prune_after_run: bool


@dataclass(frozen=True)
class EmospeakConfig:
    """Top-level emospeak configuration."""

    tts: TTSConfig
    annotation: AnnotationConfig
    cache: CacheConfig


@dataclass(frozen=True)
class CacheSettings:
    """Resolved cache location and eviction limits."""

    dir: Path | None
    max_bytes: int
    max_entries: int


@dataclass(frozen=True)
class Settings:
    """Fully resolved settings for one run."""

    api_key: str
    voice_id: str
    model: str
    sample_rate: int
    language: str
    annotate: bool
    annotation_provider: str
    annotation_model: str | None
    annotation_api_key: str | None
    cache_enabled: bool
    cache_dir: Path | None
    cache_max_bytes: int
    cache_max_entries: int
    replay_hits: bool
    prune_after_run: bool

    def synthesis_params(self) -> SynthesisParams:
        return SynthesisParams(
            api_key=self.api_key,
            voice_id=self.voice_id,
            model=self.model,
            sample_rate=self.sample_rate,
            language=self.language,
        )


def generate_config(path: Path | None = None) -> Path:
    """Generate default config file (~/.config/emospeak/config.toml)."""
    path = path or CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG)
    return path


def _int_setting(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidSettingError(name, value, "expected an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise InvalidSettingError(name, value, "expected an integer") from e


def _bool_setting(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise InvalidSettingError(name, value, "expected true or false")
    return value


def parse_config(data: Mapping[str, Any]) -> EmospeakConfig:
    """Build an EmospeakConfig from parsed TOML, filling in defaults.

    Raises:
        InvalidSettingError: If a value has the wrong type
    """
    tts = data.get("tts", {})
    annotation = data.get("annotation", {})
    cache = data.get("cache", {})

    return EmospeakConfig(
        tts=TTSConfig(
            voice_id=tts.get("voice_id") or None,
            model=tts.get("model", DEFAULT_MODEL),
            sample_rate=_int_setting(
                "tts.sample_rate", tts.get("sample_rate", DEFAULT_SAMPLE_RATE)
            ),
            language=tts.get("language", DEFAULT_LANGUAGE),
        ),
        annotation=AnnotationConfig(
            enabled=_bool_setting(
                "annotation.enabled", annotation.get("enabled", True)
            ),
            provider=annotation.get("provider", DEFAULT_ANNOTATION_PROVIDER),
            model=annotation.get("model") or None,
        ),
        cache=CacheConfig(
            enabled=_bool_setting("cache.enabled", cache.get("enabled", True)),
            dir=cache.get("dir") or None,
            max_bytes=_int_setting(
                "cache.max_bytes", cache.get("max_bytes", DEFAULT_CACHE_MAX_BYTES)
            ),
            max_entries=_int_setting(
                "cache.max_entries",
                cache.get("max_entries", DEFAULT_CACHE_MAX_ENTRIES),
            ),
            replay_hits=_bool_setting(
                "cache.replay_hits", cache.get("replay_hits", True)
            ),
            prune_after_run=_bool_setting(
                "cache.prune_after_run", cache.get("prune_after_run", True)
            ),
        ),
    )


def load_config(
    path: Path | None = None, generate_missing: bool = True
) -> EmospeakConfig:
    """Load configuration from the config file.

    On first run, generates the config file and exits so the user
    can review it before proceeding. With generate_missing=False a missing
    file simply yields the built-in defaults.

    Raises:
        SystemExit: If config is missing (after generating)
        ConfigError: If the file is not valid TOML or has invalid values
    """
    path = path or CONFIG_PATH

    if not path.exists():
        if not generate_missing:
            return parse_config({})
        generated = generate_config(path)
        print(
            f"No config found. Generated {generated}. Review it and run again.",
            file=sys.stderr,
        )
        raise SystemExit(1)

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid config file {path}: {e}", e) from e

    return parse_config(data)


def _pick(
    overrides: Mapping[str, Any],
    env: Mapping[str, str],
    key: str,
    env_name: str | None,
    file_value: Any,
) -> Any:
    if overrides.get(key) is not None:
        return overrides[key]
    if env_name and env.get(env_name):
        return env[env_name]
    return file_value


def resolve_cache_settings(
    overrides: Mapping[str, Any],
    env: Mapping[str, str],
    file_config: EmospeakConfig,
) -> CacheSettings:
    """Resolve cache directory and eviction limits.

    Uses the same priority chain as resolve_settings but needs no API keys,
    so cache maintenance works without provider credentials.
    Recognized keys: cache_dir, cache_max_bytes, cache_max_entries.

    Raises:
        InvalidSettingError: If a limit is malformed or negative
    """
    max_bytes = _int_setting(
        "cache.max_bytes",
        _pick(
            overrides,
            env,
            "cache_max_bytes",
            "EMOSPEAK_CACHE_MAX_BYTES",
            file_config.cache.max_bytes,
        ),
    )
    max_entries = _int_setting(
        "cache.max_entries",
        _pick(
            overrides,
            env,
            "cache_max_entries",
            "EMOSPEAK_CACHE_MAX_ENTRIES",
            file_config.cache.max_entries,
        ),
    )
    if max_bytes < 0:
        raise InvalidSettingError("cache.max_bytes", max_bytes, "cannot be negative")
    if max_entries < 0:
        raise InvalidSettingError(
            "cache.max_entries", max_entries, "cannot be negative"
        )

    cache_dir = _pick(
        overrides, env, "cache_dir", "EMOSPEAK_CACHE_DIR", file_config.cache.dir
    )
    return CacheSettings(
        dir=Path(cache_dir).expanduser() if cache_dir else None,
        max_bytes=max_bytes,
        max_entries=max_entries,
    )


def resolve_settings(
    overrides: Mapping[str, Any],
    env: Mapping[str, str],
    file_config: EmospeakConfig,
) -> Settings:
    """Merge CLI overrides, environment and config file into Settings.

    Override keys left out or set to None fall through to the next source.
    Recognized keys: api_key, voice_id, model, sample_rate, language,
    annotate, provider, provider_model, cache, cache_dir, cache_max_bytes,
    cache_max_entries.

    Raises:
        MissingApiKeyError: If no ElevenLabs API key is available
        MissingVoiceIdError: If no voice id is configured anywhere
        InvalidSettingError: If a numeric setting is malformed or out of range
    """

    def pick(key: str, env_name: str | None, file_value: Any) -> Any:
        return _pick(overrides, env, key, env_name, file_value)

    api_key = overrides.get("api_key") or env.get("ELEVENLABS_API_KEY")
    if not api_key:
        raise MissingApiKeyError()

    voice_id = pick("voice_id", "EMOSPEAK_VOICE_ID", file_config.tts.voice_id)
    if not voice_id:
        raise MissingVoiceIdError()

    sample_rate = _int_setting(
        "sample_rate",
        pick("sample_rate", "EMOSPEAK_SAMPLE_RATE", file_config.tts.sample_rate),
    )
    if sample_rate not in SUPPORTED_SAMPLE_RATES:
        raise InvalidSettingError(
            "sample_rate", sample_rate, f"must be one of {SUPPORTED_SAMPLE_RATES}"
        )

    cache = resolve_cache_settings(overrides, env, file_config)

    return Settings(
        api_key=api_key,
        voice_id=voice_id,
        model=pick("model", "EMOSPEAK_MODEL", file_config.tts.model),
        sample_rate=sample_rate,
        language=pick("language", "EMOSPEAK_LANGUAGE", file_config.tts.language),
        annotate=pick("annotate", None, file_config.annotation.enabled),
        annotation_provider=pick("provider", None, file_config.annotation.provider),
        annotation_model=pick("provider_model", None, file_config.annotation.model),
        annotation_api_key=env.get("OPENAI_API_KEY"),
        cache_enabled=pick("cache", None, file_config.cache.enabled),
        cache_dir=cache.dir,
        cache_max_bytes=cache.max_bytes,
        cache_max_entries=cache.max_entries,
        replay_hits=file_config.cache.replay_hits,
        prune_after_run=file_config.cache.prune_after_run,
    )

