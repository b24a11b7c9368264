"""Typer CLI definition for emospeak."""

import asyncio
import logging
import os
import sys
from pathlib import Path

import typer

from .cache.manager import SynthesisCache
from .config import (
    CONFIG_PATH,
    generate_config,
    load_config,
    resolve_cache_settings,
    resolve_settings,
)
from .core import list_available_voices, play_audio, run_synthesis, write_outputs
from .tts.errors import EmospeakError, FileReadError, MissingTextError, format_error

app = typer.Typer(help="Emotion-annotated, cached text-to-speech with ElevenLabs")


def _configure_logging(debug: bool) -> None:
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )


def _fail(error: EmospeakError, debug: bool) -> typer.Exit:
    if debug:
        typer.echo(f"Debug - {error!r}", err=True)
    typer.echo(f"Error: {format_error(error)}", err=True)
    return typer.Exit(1)


def read_text_input(text: str | None, file: Path | None) -> str:
    """Pick the text from argument, file, or stdin (in priority order).

    Raises:
        FileReadError: If the file cannot be read
        MissingTextError: If no non-blank text was given
    """
    if text is None and file is not None:
        try:
            text = file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise FileReadError(file, e) from e
    elif text is None and not sys.stdin.isatty():
        text = sys.stdin.read()

    if text is None or not text.strip():
        raise MissingTextError()
    return text


def _write_stdout(chunk: bytes) -> None:
    sys.stdout.buffer.write(chunk)
    sys.stdout.buffer.flush()


@app.command()
def speak(
    text: str | None = typer.Argument(None, help="Text to convert to speech"),
    file: Path | None = typer.Option(None, "-f", "--file", help="Read text from file"),
    output: Path | None = typer.Option(
        None, "-o", "--output", help="Save a WAV file (and annotated .txt)"
    ),
    voice_id: str | None = typer.Option(
        None, "-v", "--voice-id", help="ElevenLabs voice id (from config if omitted)"
    ),
    model: str | None = typer.Option(
        None, "-m", "--model", help="ElevenLabs model id (e.g. eleven_v3)"
    ),
    sample_rate: int | None = typer.Option(
        None, "--sample-rate", help="PCM sample rate"
    ),
    language: str | None = typer.Option(None, "--language", help="Language code"),
    provider: str | None = typer.Option(
        None, "-p", "--provider", help="Annotation provider (e.g. openai)"
    ),
    provider_model: str | None = typer.Option(
        None, "--provider-model", help="Model used by the annotation provider"
    ),
    no_annotate: bool = typer.Option(
        False, "--no-annotate", help="Skip emotion annotation"
    ),
    no_cache: bool = typer.Option(
        False, "--no-cache", help="Disable annotation and audio caching"
    ),
    stdout: bool | None = typer.Option(
        None,
        "--stdout/--no-stdout",
        help="Stream raw PCM to stdout (default: when stdout is not a terminal)",
    ),
    play: bool = typer.Option(False, "--play", help="Play the audio when done"),
    debug: bool = typer.Option(
        False, "--debug", help="Show verbose error messages and cache activity"
    ),
) -> None:
    """Convert text to speech, streaming audio as it is synthesized."""
    _configure_logging(debug)

    try:
        config = load_config()
        text = read_text_input(text, file)
        settings = resolve_settings(
            {
                "voice_id": voice_id,
                "model": model,
                "sample_rate": sample_rate,
                "language": language,
                "annotate": False if no_annotate else None,
                "provider": provider,
                "provider_model": provider_model,
                "cache": False if no_cache else None,
            },
            os.environ,
            config,
        )

        stream_out = stdout if stdout is not None else not sys.stdout.isatty()
        result = asyncio.run(
            run_synthesis(
                text, settings, on_chunk=_write_stdout if stream_out else None
            )
        )

        if output:
            for path in write_outputs(result, text, output, settings.sample_rate):
                typer.echo(f"Saved {path}", err=True)

        if play:
            asyncio.run(play_audio(result.pcm, settings.sample_rate))

        typer.echo(
            f"Done: {len(result.used_text_segments)} segments, "
            f"{result.cache_hits} from cache",
            err=True,
        )

    except EmospeakError as e:
        raise _fail(e, debug) from None
    except RuntimeError as e:
        if debug:
            typer.echo(f"Debug - Audio playback error: {e!r}", err=True)
        else:
            typer.echo(f"Error: Failed to play audio: {e}", err=True)
        raise typer.Exit(1) from None
    except ValueError as e:
        if debug:
            typer.echo(f"Debug - Invalid input: {e!r}", err=True)
        else:
            typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


@app.command()
def voices(
    debug: bool = typer.Option(False, "--debug", help="Show verbose errors"),
) -> None:
    """List available ElevenLabs voices."""
    _configure_logging(debug)

    try:
        available = asyncio.run(list_available_voices())
    except EmospeakError as e:
        raise _fail(e, debug) from None

    for voice in available:
        typer.echo(f"{voice['name']}: {voice['id']}")


@app.command()
def prune(
    max_bytes: int | None = typer.Option(
        None, "--max-bytes", help="Byte ceiling (from env or config if omitted)"
    ),
    max_entries: int | None = typer.Option(
        None, "--max-entries", help="Entry ceiling (from env or config if omitted)"
    ),
    cache_dir: Path | None = typer.Option(
        None, "--cache-dir", help="Cache directory (from env or config if omitted)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Show eviction activity"),
) -> None:
    """Evict least recently used audio until the cache fits its limits."""
    _configure_logging(debug)

    try:
        settings = resolve_cache_settings(
            {
                "cache_dir": str(cache_dir) if cache_dir else None,
                "cache_max_bytes": max_bytes,
                "cache_max_entries": max_entries,
            },
            os.environ,
            load_config(generate_missing=False),
        )
    except EmospeakError as e:
        raise _fail(e, debug) from None

    cache = SynthesisCache(settings.dir)
    removed = cache.prune(settings.max_bytes, settings.max_entries)
    stats = cache.stats()

    typer.echo(f"Removed {len(removed)} cached audio files")
    typer.echo(
        f"Audio cache: {stats['audio_entries']} entries, "
        f"{stats['audio_bytes']} bytes"
    )
    typer.echo(f"Annotation cache: {stats['annotation_entries']} entries")


@app.command("init-config")
def init_config(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write the default config file."""
    if CONFIG_PATH.exists() and not force:
        typer.echo(f"Config already exists at {CONFIG_PATH} (use --force to overwrite)")
        raise typer.Exit(1)

    path = generate_config()
    typer.echo(f"Wrote {path}")
