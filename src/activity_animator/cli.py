"""CLI interface for activity-animator."""

import logging
import sys
from datetime import datetime
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn

from .activities import Activity, ActivityDataError, filter_by_type, load_activities
from .animation_pipeline import build_export_request, encode_animation
from .config import Settings, load_settings
from .console_printer import ActivityConsolePrinter
from .constants import (
    DEFAULT_DURATION_SECONDS,
    DEFAULT_FILENAME_STEM,
    DEFAULT_FPS,
    DEFAULT_HEIGHT,
    DEFAULT_QUALITY,
    DEFAULT_WIDTH,
    MAX_QUALITY,
    MIN_QUALITY,
)
from .experiment import EXPERIMENT_SETS, ExperimentResult, run_experiment
from .export import ExportArtifact, ExportError, ExportRequest, ProgressEvent
from .output import format_for_output_path, supported_output_formats

# Load environment variables from .env file
load_dotenv()

console = Console()
err_console = Console(stderr=True)
SUPPORTED_OUTPUT_FORMATS_TEXT = ", ".join(supported_output_formats()).upper()
DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S"]

app = typer.Typer(help="Animate recorded activity tracks and export them as GIF or WebP.")


class CLIError(Exception):
    """Base exception for CLI errors with user-friendly messages."""
    pass


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.command()
def export(
    activities_path: str = typer.Argument(None, help="Cached activities JSON file"),
    out: str = typer.Option(
        f"{DEFAULT_FILENAME_STEM}.gif",
        "--output",
        "-o",
        help=f"Output file ({SUPPORTED_OUTPUT_FORMATS_TEXT})",
    ),
    activity_type: str = typer.Option("all", "--type", "-t", help="Only animate this activity type"),
    start: datetime = typer.Option(None, "--start", formats=DATE_FORMATS, help="Window start (UTC)"),
    end: datetime = typer.Option(None, "--end", formats=DATE_FORMATS, help="Window end (UTC)"),
    fps: float = typer.Option(DEFAULT_FPS, "--fps", help="Frames per second"),
    duration: float = typer.Option(DEFAULT_DURATION_SECONDS, "--duration", "-d", help="Animation length in seconds"),
    width: int = typer.Option(DEFAULT_WIDTH, "--width", help="Frame width in pixels"),
    height: int = typer.Option(DEFAULT_HEIGHT, "--height", help="Frame height in pixels"),
    quality: int = typer.Option(
        DEFAULT_QUALITY,
        "--quality",
        "-q",
        help=f"Quality {MIN_QUALITY}-{MAX_QUALITY}, lower is better but slower",
    ),
) -> None:
    """
    Export an animation of the cached activities.

    Examples:
      # Animate every run in 2024 as a 10 second GIF
      activity-animator export activities.json --type Run --start 2024-01-01 --end 2025-01-01
    """
    try:
        settings = load_settings()
        activities = _load(activities_path or settings.activities_path, activity_type)

        try:
            output_format = format_for_output_path(out)
        except ValueError as e:
            raise CLIError(str(e))

        # GIF delays are stored in hundredths of a second
        if output_format == "gif" and fps > 50:
            console.print(
                f"[yellow]Warning:[/yellow] FPS > 50 may not display correctly in browsers "
                f"(GIF delay will be {1000 / fps:.0f}ms, but browsers clamp delays < 20ms to ~100ms)"
            )

        try:
            request = build_export_request(
                activities,
                start=start,
                end=end,
                width=width,
                height=height,
                frame_rate=fps,
                duration_seconds=duration,
                quality=quality,
                output_format=output_format,
            )
        except (ValueError, ActivityDataError) as e:
            raise CLIError(str(e))

        console.print(
            f"\n[bold blue]Generating {output_format.upper()} animation "
            f"({request.frame_count} frames, {width}x{height})...[/bold blue]"
        )
        artifact = _run_with_progress(activities, request, settings)

        console.print(f"[bold blue]Saving to {out}...[/bold blue]")
        try:
            artifact.write(out)
        except OSError as e:
            raise CLIError(f"Failed to save file '{out}': {e}")
        size_mb = artifact.size_bytes / (1024 * 1024)
        console.print(f"[green]✓[/green] {output_format.upper()} saved to {out} ({size_mb:.2f} MB)")

    except CLIError as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        sys.exit(1)

    except Exception as e:
        err_console.print(f"[bold red]Unexpected error:[/bold red] {e}")
        sys.exit(1)


@app.command()
def summary(
    activities_path: str = typer.Argument(None, help="Cached activities JSON file"),
) -> None:
    """Show statistics for the cached activities."""
    try:
        activities = _load(activities_path or load_settings().activities_path, "all")
        printer = ActivityConsolePrinter(console)
        printer.display_stats(activities)
        printer.display_type_breakdown(activities)
    except CLIError as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        sys.exit(1)


@app.command()
def experiment(
    activities_path: str = typer.Argument(None, help="Cached activities JSON file"),
    sets: list[str] = typer.Option(
        None,
        "--set",
        help=f"Experiment set to run ({', '.join(EXPERIMENT_SETS)}); repeatable",
    ),
    activity_count: int = typer.Option(50, "--activities", help="Activities in the exported window"),
    report_path: str = typer.Option(None, "--report", help="Write markdown tables to this file"),
) -> None:
    """Measure export size and time across dimensions, frame rates and durations."""
    try:
        unknown = [name for name in sets or [] if name not in EXPERIMENT_SETS]
        if unknown:
            raise CLIError(
                f"Unknown experiment set(s): {', '.join(unknown)}. "
                f"Available: {', '.join(EXPERIMENT_SETS)}"
            )

        activities = _load(activities_path or load_settings().activities_path, "all")

        def show(name: str, result: ExperimentResult) -> None:
            if result.ok:
                console.print(
                    f"[green]✓[/green] {name} {result.config}: "
                    f"{result.size_mb:.2f} MB in {result.seconds:.1f}s"
                )
            else:
                console.print(f"[red]✗[/red] {name} {result.config}: {result.error}")

        report = run_experiment(
            activities,
            set_names=sets or None,
            target_activity_count=activity_count,
            on_result=show,
        )
        markdown = report.to_markdown()
        console.print()
        console.print(markdown, markup=False)
        if report_path:
            Path(report_path).write_text(markdown)
            console.print(f"[green]✓[/green] Report saved to {report_path}")
    except CLIError as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        sys.exit(1)


def _load(file_path: str, activity_type: str) -> list[Activity]:
    """Load activities from a JSON file and filter by type."""
    console.print(f"[bold blue]Loading activities from {file_path}...[/bold blue]")
    try:
        activities = filter_by_type(load_activities(file_path), activity_type)
    except ActivityDataError as e:
        raise CLIError(str(e))
    if not activities:
        raise CLIError("No activities with tracks to animate")
    return activities


def _run_with_progress(
    activities: list[Activity],
    request: ExportRequest,
    settings: Settings,
) -> ExportArtifact:
    progress = Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    )
    with progress:
        task = progress.add_task("Starting...", total=100)

        def update(event: ProgressEvent) -> None:
            progress.update(task, completed=event.percent, description=event.message)

        try:
            return encode_animation(activities, request, settings=settings, on_progress=update)
        except ExportError as e:
            raise CLIError(f"Failed to generate output: {e}")


if __name__ == "__main__":
    app()
