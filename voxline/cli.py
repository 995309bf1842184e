"""
voxline.cli - Typer CLI entry point.

Provides the ``serve`` and ``transcribe`` commands plus lookups for the
supported languages and model sizes.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from voxline import __version__
from voxline.engine import load_engine
from voxline.exceptions import ConfigError, PreconditionError, VoxlineError
from voxline.io import write_transcript_files
from voxline.languages import LanguageTag, display_name, from_code
from voxline.logging import configure_logging
from voxline.models import DEFAULT_MODEL, MODEL_SIZES, is_english_only, resolve_model
from voxline.orchestrator import transcribe
from voxline.session import ResourceManager

app = typer.Typer(
    name="voxline",
    help="Local speech-to-text with Whisper.\n\n"
    "Transcribe audio files from the command line or serve an "
    "OpenAI-compatible /v1/audio/transcriptions endpoint.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"voxline {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Voxline - local speech-to-text with Whisper."""
    pass


def check_language(model: str, lang: str | None) -> LanguageTag | None:
    """Validate the language hint against the model.

    English-only models force English when no language (or auto) is given.

    Raises:
        PreconditionError: If the language is unknown, or a non-English
            language is requested from an English-only model
    """
    tag = None
    if lang is not None:
        try:
            tag = from_code(lang)
        except ValueError as e:
            raise PreconditionError(str(e)) from e

    if is_english_only(model):
        if tag is None or tag is LanguageTag.AUTO:
            tag = LanguageTag.ENGLISH
        if tag is not LanguageTag.ENGLISH:
            raise PreconditionError(f"The selected model ({model}) only supports English.")

    return tag


def print_progress(percent: int) -> None:
    console.print(f"[dim]  Progress: {percent}%[/dim]")


@app.command("serve")
def serve_cmd(
    port: int | None = typer.Option(None, "--port", "-p", help="Port to listen on [default: 8000]"),
    model_path: str | None = typer.Option(
        None, "--model-path", "-m", help="Model directory or size name to load"
    ),
    host: str | None = typer.Option(None, "--host", help="Interface to bind [default: 127.0.0.1]"),
    lang: str | None = typer.Option(
        None, "--lang", "-l", help="Language used when a request does not name one"
    ),
    config_file: Path | None = typer.Option(
        None, "--config", "-c", help="YAML config file (defaults to ./voxline.yaml if present)"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """Start the transcription server."""
    from voxline.config import load_config
    from voxline.server import serve

    configure_logging(verbose, server=True)

    try:
        config = load_config(
            config_file, port=port, host=host, model_path=model_path, language=lang
        )
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[cyan]Loading {config.model_source}...[/cyan]")
    console.print(f"[dim]  Serving on http://{config.host}:{config.port}[/dim]")

    try:
        serve(config)
    except VoxlineError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@app.command("transcribe")
def transcribe_cmd(
    audio: Path = typer.Argument(..., help="Path to the audio file to transcribe"),
    model: str = typer.Option(
        DEFAULT_MODEL, "--model", "-m", help="Whisper model size or directory"
    ),
    lang: str | None = typer.Option(
        None, "--lang", "-l", help="Language spoken in the audio (auto-detect if not set)"
    ),
    translate: bool = typer.Option(False, "--translate", "-t", help="Translate to English"),
    karaoke: bool = typer.Option(
        False, "--karaoke", "-k", help="Generate timestamps for each word"
    ),
    write: bool = typer.Option(
        False, "--write", "-w", help="Write .txt, .vtt and .srt files beside the audio"
    ),
    prompt: str | None = typer.Option(None, "--prompt", "-p", help="Initial prompt text"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """Transcribe a given audio file."""
    configure_logging(verbose)

    try:
        if not audio.exists():
            raise PreconditionError(f"The provided audio file does not exist: {audio}")
        try:
            model_source = resolve_model(model)
        except ValueError as e:
            raise PreconditionError(str(e)) from e
        language = check_language(model, lang)
    except PreconditionError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[cyan]Transcribing {audio.name} with {model}...[/cyan]")

    manager = ResourceManager(model_source, load_engine)
    try:
        with manager:
            transcript = transcribe(
                manager,
                audio,
                translate=translate,
                word_timestamps=karaoke,
                prompt=prompt,
                language=language,
                progress_sink=print_progress,
            )
    except VoxlineError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[dim]  time: {transcript.processing_time.total_seconds():.2f}s[/dim]")

    if write:
        written = write_transcript_files(
            audio,
            {
                "txt": transcript.as_text(),
                "vtt": transcript.as_vtt(),
                "srt": transcript.as_srt(),
            },
        )
        for path in written:
            console.print(f"[green]✓[/green] Wrote {path}")
    else:
        console.print()
        console.print(f"🔊 {transcript.as_text()}", markup=False, highlight=False)


@app.command("languages")
def languages_cmd() -> None:
    """List supported language codes."""
    table = Table(title="Languages")
    table.add_column("Code", style="cyan")
    table.add_column("Language", style="green")
    for tag in LanguageTag:
        table.add_row(tag.value, display_name(tag))
    console.print(table)


@app.command("models")
def models_cmd() -> None:
    """List known model sizes."""
    table = Table(title="Models")
    table.add_column("Model", style="cyan")
    table.add_column("Languages", style="green")
    for name in MODEL_SIZES:
        table.add_row(name, "English only" if is_english_only(name) else "Multilingual")
    console.print(table)


if __name__ == "__main__":
    app()
