"""
speakerscribe.cli - Typer CLI entry point.

Terminal front end: select an M4A file, transcribe it through the proxy,
view the speaker-labeled transcript and export SRT subtitles.
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from speakerscribe import __version__
from speakerscribe.config import CONFIG_FILENAME, DEPLOYMENT_TIERS, ScribeConfig, load_config
from speakerscribe.exceptions import ConfigError
from speakerscribe.export.srt import export_filename, generate_srt
from speakerscribe.io import atomic_write, read_transcript, write_transcript
from speakerscribe.logging import configure_logging
from speakerscribe.models import AudioFile, TranscriptSegment
from speakerscribe.session import Session, SessionStatus
from speakerscribe.utils import format_size, speaker_counts

app = typer.Typer(
    name="speakerscribe",
    help="Speaker-labeled transcription for M4A recordings.\n\n"
    "Uploads audio to a transcription proxy, shows who said what and when, "
    "and exports SRT subtitles.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"speakerscribe {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Speakerscribe - speaker-labeled transcription for M4A recordings."""
    configure_logging(verbose)


def resolve_config(**overrides) -> ScribeConfig:
    try:
        return load_config(**overrides)
    except ConfigError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)


def build_transcript_table(segments: list[TranscriptSegment], title: str | None = None) -> Table:
    """Render segments as a rich table."""
    table = Table(title=title, show_lines=True)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Speaker", style="bold cyan", no_wrap=True)
    table.add_column("Time", style="green", no_wrap=True)
    table.add_column("Transcript")

    for i, segment in enumerate(segments, start=1):
        table.add_row(str(i), segment.speaker, segment.timestamp, segment.transcript)

    return table


def print_speaker_summary(segments: list[TranscriptSegment]) -> None:
    counts = speaker_counts(segments)
    summary = ", ".join(f"{name} ({count})" for name, count in counts.items())
    console.print(f"[dim]Speakers: {summary}[/dim]")


def load_transcript_or_exit(path: Path) -> list[TranscriptSegment]:
    try:
        return read_transcript(path)
    except FileNotFoundError:
        console.print(f"[red]Error: Transcript not found: {path}[/red]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error: {path} is not a valid transcript: {e}[/red]")
        raise typer.Exit(1)


@app.command("transcribe")
def transcribe(
    audio_path: Path = typer.Argument(..., help="M4A audio file to transcribe"),
    server: str | None = typer.Option(
        None, "--server", "-s", help="Transcription proxy URL"
    ),
    transport: str | None = typer.Option(
        None, "--transport", "-t", help="Upload transport: inline or staged"
    ),
    tier: str | None = typer.Option(
        None, "--tier", help="Deployment tier: hobby (25MB) or pro (500MB)"
    ),
    mock: bool = typer.Option(
        False, "--mock", help="Use a simulated transcript (no server or API key needed)"
    ),
    srt: bool = typer.Option(True, "--srt/--no-srt", help="Write <name>.srt next to the output"),
    output_dir: Path | None = typer.Option(
        None, "--output-dir", "-o", help="Directory for exported files (default: beside audio)"
    ),
    json_out: bool = typer.Option(False, "--json", help="Also save the transcript as JSON"),
    report: bool = typer.Option(False, "--report", help="Also write an HTML transcript report"),
    open_report: bool = typer.Option(False, "--open", help="Open the HTML report when done"),
) -> None:
    """Transcribe an M4A file with speaker identification."""
    config = resolve_config(
        server_url=server,
        transport=transport,
        deployment_tier=tier,
        mock_mode=mock or None,
    )

    if not audio_path.is_file():
        console.print(f"[red]Error: File not found: {audio_path}[/red]")
        raise typer.Exit(1)

    from speakerscribe.client import create_client_from_config

    session = Session(max_file_size_mb=config.max_file_size_mb)
    audio = AudioFile.from_path(audio_path.expanduser().resolve())

    if session.select_file(audio) is SessionStatus.ERROR:
        console.print(f"[red]✗ {session.error_message}[/red]")
        raise typer.Exit(1)

    console.print(
        f"[green]✓[/green] {audio.name} [dim]({format_size(audio.size)})[/dim] "
        "selected. Ready to transcribe."
    )

    client = create_client_from_config(config)
    with console.status(session.progress_message or "Preparing audio file...") as status:
        session.transcribe(client, on_progress=status.update)

    if session.status is not SessionStatus.SUCCESS:
        console.print("[red]Operation Failed[/red]")
        console.print(f"[red]{session.error_message}[/red]")
        raise typer.Exit(1)

    segments = session.transcript or []
    console.print(
        f"\n[bold cyan]Transcription Result[/bold cyan] "
        f"[dim]Analysis complete. {len(segments)} segments identified.[/dim]"
    )
    console.print(build_transcript_table(segments))
    print_speaker_summary(segments)

    target_dir = output_dir or audio_path.parent
    written: list[Path] = []

    if srt:
        srt_path = target_dir / (session.srt_filename() or export_filename(audio.name, "srt"))
        atomic_write(srt_path, session.srt_content())
        written.append(srt_path)

    if json_out:
        json_path = target_dir / export_filename(audio.name, "json")
        write_transcript(json_path, segments)
        written.append(json_path)

    if report or open_report:
        from speakerscribe.reports.transcript import generate_transcript_report

        report_path = target_dir / export_filename(audio.name, "html")
        generate_transcript_report(segments, audio.name, report_path, open_browser=open_report)
        written.append(report_path)

    for path in written:
        console.print(f"[green]✓[/green] Wrote {path}")


@app.command("srt")
def export_srt(
    transcript_path: Path = typer.Argument(..., help="Transcript JSON (array of segments)"),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="SRT path (default: beside the transcript)"
    ),
) -> None:
    """Convert a saved transcript to SRT subtitles."""
    segments = load_transcript_or_exit(transcript_path)

    if not segments:
        console.print("[yellow]Transcript is empty; nothing to export.[/yellow]")
        raise typer.Exit(0)

    output = output or transcript_path.with_suffix(".srt")
    atomic_write(output, generate_srt(segments))
    console.print(f"[green]✓[/green] Wrote {len(segments)} cues to {output}")


@app.command("show")
def show_transcript(
    transcript_path: Path = typer.Argument(..., help="Transcript JSON (array of segments)"),
    report: bool = typer.Option(False, "--report", help="Open as an HTML report instead"),
) -> None:
    """Display a saved transcript."""
    segments = load_transcript_or_exit(transcript_path)

    if report:
        from speakerscribe.reports.transcript import generate_transcript_report

        path = generate_transcript_report(
            segments,
            transcript_path.name,
            transcript_path.with_suffix(".html"),
            open_browser=True,
        )
        console.print(f"[green]✓[/green] Report: {path}")
        return

    console.print(build_transcript_table(segments, title=transcript_path.name))
    if segments:
        print_speaker_summary(segments)


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port"),
    mock: bool = typer.Option(False, "--mock", help="Answer with a simulated transcript"),
) -> None:
    """Run the transcription proxy."""
    config = resolve_config(host=host, port=port, mock_mode=mock or None)
    configure_logging(level=logging.INFO)

    try:
        import uvicorn
    except ImportError:
        console.print("[red]uvicorn not installed. Install with: pip install uvicorn[/red]")
        raise typer.Exit(1)

    from speakerscribe.api import create_app

    if not config.api_key and not config.mock_mode:
        console.print(
            "[yellow]Warning: API_KEY is not set; /api/transcribe will answer 500 "
            "until it is (or run with --mock).[/yellow]"
        )

    console.print(f"[cyan]Starting Speakerscribe proxy on {config.host}:{config.port}[/cyan]")
    uvicorn.run(create_app(config), host=config.host, port=config.port)


@app.command("config")
def show_config(
    write: bool = typer.Option(
        False, "--write", "-w", help=f"Write a starter {CONFIG_FILENAME} to the current directory"
    ),
    tier: str = typer.Option("pro", "--tier", help="Tier for the starter config"),
) -> None:
    """Show the resolved configuration."""
    if write:
        from speakerscribe.config import write_config

        if tier not in DEPLOYMENT_TIERS:
            console.print(f"[red]Error: Unknown tier '{tier}'[/red]")
            raise typer.Exit(1)

        path = Path.cwd() / CONFIG_FILENAME
        if path.exists():
            console.print(f"[red]Error: {path} already exists[/red]")
            raise typer.Exit(1)
        write_config({"deployment_tier": tier, **DEPLOYMENT_TIERS[tier]}, path)
        console.print(f"[green]✓[/green] Created {path}")
        return

    config = resolve_config()

    table = Table(title="Speakerscribe Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for key, value in config.model_dump().items():
        if key in ("api_key", "storage_secret"):
            value = "set" if value else "[red]not set[/red]"
        table.add_row(key, str(value))

    console.print(table)


if __name__ == "__main__":
    app()
