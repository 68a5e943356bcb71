"""Command line interface for PWF.

Validates plan and history documents, writes starter templates and converts
between PWF history and device file formats.
"""

import json
from enum import StrEnum
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape

from pwf.config.settings import get_settings
from pwf.converters import (
    ConversionError,
    UnsupportedFormatError,
    fit_to_pwf,
    gpx_to_pwf,
    load_history,
    pwf_to_csv,
    pwf_to_gpx,
    pwf_to_tcx,
    tcx_to_pwf,
)
from pwf.core.logger import setup_logger
from pwf.schema.common import EQUIPMENT_TAGS
from pwf.validation import Diagnostic, ValidationResult, validate_history, validate_plan
from pwf.version import __version__

# Initialize Rich console for output
console = Console()
err_console = Console(stderr=True)

# Initialize Typer app
app = typer.Typer(
    name="pwf",
    help="Portable Workout Format validator and converter",
    add_completion=False,
)

SPECIFICATION_VERSION = "1.0"

IMPORTERS = {
    "fit": fit_to_pwf,
    "tcx": tcx_to_pwf,
    "gpx": gpx_to_pwf,
}
EXPORTERS = {
    "tcx": (pwf_to_tcx, "tcx_xml"),
    "gpx": (pwf_to_gpx, "gpx_xml"),
    "csv": (pwf_to_csv, "csv_data"),
}
SUPPORTED_CONVERSIONS = [(source, "pwf") for source in IMPORTERS] + [("pwf", target) for target in EXPORTERS]


class OutputFormat(StrEnum):
    PRETTY = "pretty"
    JSON = "json"
    COMPACT = "compact"


PLAN_TEMPLATE = """\
# PWF Plan v1

plan_version: 1

meta:
  title: "My Training Plan"
  description: "A brief description of this plan"
  author: "Your Name"
  equipment: [dumbbells]
  daysPerWeek: 3
  tags: [strength]

cycle:
  notes: "Coaching notes for the entire cycle"

  days:
    - focus: "Day 1"
      target_session_length_min: 45
      exercises:
        - name: "Exercise Name"
          modality: strength
          target_sets: 3
          target_reps: 10
          target_notes: "Form cues go here"

    - focus: "Day 2"
      exercises:
        - name: "Another Exercise"
          modality: strength
          target_sets: 3
          target_reps: 8
"""

HISTORY_TEMPLATE = """\
# PWF History Export v1

history_version: 1
exported_at: "2025-01-15T10:30:00Z"

export_source:
  app_name: "Your App"
  app_version: "1.0.0"

units:
  weight: kg
  distance: meters

workouts:
  - date: "2025-01-15"
    title: "Push Day"
    started_at: "2025-01-15T09:00:00Z"
    ended_at: "2025-01-15T10:00:00Z"
    duration_sec: 3600
    exercises:
      - name: "Bench Press"
        modality: strength
        sets:
          - set_number: 1
            set_type: warmup
            reps: 10
            weight_kg: 60
          - set_number: 2
            set_type: working
            reps: 5
            weight_kg: 100
            rpe: 8
          - set_number: 3
            set_type: working
            reps: 5
            weight_kg: 100
            rpe: 8.5
            is_pr: true

personal_records:
  - exercise_name: "Bench Press"
    record_type: max_weight
    value: 100
    unit: kg
    achieved_at: "2025-01-15"

body_measurements:
  - date: "2025-01-15"
    weight_kg: 85.5
    body_fat_percent: 15.0
"""


@app.callback()
def main(
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """Portable Workout Format tools."""
    settings = get_settings()
    setup_logger(level="DEBUG" if debug else settings.log_level, log_file=settings.log_file)


def _resolve_format(output_format: OutputFormat | None) -> OutputFormat:
    if output_format is not None:
        return output_format
    return OutputFormat(get_settings().output_format)


def _print_diagnostic(diagnostic: Diagnostic, is_error: bool) -> None:
    location = escape(diagnostic.path or "(root)")
    message = escape(diagnostic.message)
    code = f"[{diagnostic.code}] " if diagnostic.code else ""
    if is_error:
        console.print(f"  [red]✗[/red] [dim]{escape(code)}{location}:[/dim] [red]{message}[/red]")
    else:
        console.print(f"  [yellow]⚠[/yellow] [dim]{escape(code)}{location}:[/dim] [yellow]{message}[/yellow]")


def _read_documents(files: list[Path]) -> tuple[list[tuple[Path, str]], bool]:
    documents = []
    all_read = True
    for path in files:
        try:
            documents.append((path, path.read_text(encoding="utf-8")))
        except OSError as e:
            err_console.print(f"[red]{escape(str(path))}[/red]: {escape(str(e))}")
            all_read = False
    return documents, all_read


def _report(
    results: list[tuple[Path, ValidationResult]],
    document_type: str,
    output_format: OutputFormat,
    strict: bool,
    quiet: bool = False,
) -> None:
    if output_format == OutputFormat.JSON:
        payload = [
            {
                "file": str(path),
                "type": document_type,
                "valid": result.passes(strict),
                "errors": [d.model_dump(mode="json", exclude_none=True) for d in result.errors],
                "warnings": [d.model_dump(mode="json", exclude_none=True) for d in result.warnings],
                "statistics": result.statistics.model_dump(mode="json") if result.statistics else None,
            }
            for path, result in results
        ]
        typer.echo(json.dumps(payload, indent=2))
        return

    for path, result in results:
        passed = result.passes(strict)
        mark = "[green]✓[/green]" if passed else "[red]✗[/red]"
        if output_format == OutputFormat.COMPACT:
            console.print(f"{mark} {escape(str(path))}")
            continue

        console.print(f"[bold]{mark}[/bold] {escape(str(path))}")
        if passed:
            _print_statistics(result)
        for error in result.errors:
            _print_diagnostic(error, is_error=True)
        if not quiet or (strict and not passed):
            for warning in result.warnings:
                _print_diagnostic(warning, is_error=False)
        console.print()


def _print_statistics(result: ValidationResult) -> None:
    stats = result.statistics
    if stats is None:
        return
    if hasattr(stats, "total_days"):
        console.print(f"  [cyan]{stats.total_days}[/cyan] days, [cyan]{stats.total_exercises}[/cyan] exercises")
        return
    console.print(
        f"  [cyan]{stats.total_workouts}[/cyan] workouts, [cyan]{stats.total_sets}[/cyan] sets, "
        f"{stats.total_volume_kg:.0f} kg total volume"
    )
    if stats.date_range_start and stats.date_range_end:
        console.print(f"  Date range: [cyan]{stats.date_range_start}[/cyan] to [cyan]{stats.date_range_end}[/cyan]")


@app.command()
def validate(
    files: list[Path] = typer.Argument(..., help="Plan files to validate"),
    output_format: OutputFormat | None = typer.Option(None, "--format", "-f", help="Output format"),
    strict: bool = typer.Option(False, "--strict", "-s", help="Treat warnings as errors"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show errors (suppress warnings)"),
) -> None:
    """Validate PWF plan files."""
    strict = strict or get_settings().strict
    documents, all_read = _read_documents(files)
    results = [(path, validate_plan(text)) for path, text in documents]
    _report(results, "plan", _resolve_format(output_format), strict, quiet)

    if not all_read or not all(result.passes(strict) for _, result in results):
        raise typer.Exit(1)


@app.command()
def history(
    files: list[Path] = typer.Argument(..., help="History files to validate"),
    output_format: OutputFormat | None = typer.Option(None, "--format", "-f", help="Output format"),
    strict: bool = typer.Option(False, "--strict", "-s", help="Treat warnings as errors"),
) -> None:
    """Validate PWF history export files."""
    strict = strict or get_settings().strict
    documents, all_read = _read_documents(files)
    results = [(path, validate_history(text)) for path, text in documents]
    _report(results, "history", _resolve_format(output_format), strict)

    if not all_read or not all(result.passes(strict) for _, result in results):
        raise typer.Exit(1)


@app.command()
def info() -> None:
    """Show format version info."""
    console.print("[bold]PWF - Portable Workout Format[/bold]")
    console.print()
    console.print(f"Specification version: [cyan]{SPECIFICATION_VERSION}[/cyan]")
    console.print(f"Validator version:     [cyan]{__version__}[/cyan]")
    console.print()
    console.print("[bold]Supported formats:[/bold]")
    console.print("  [green]plan[/green] - Workout plan templates")
    console.print("  [green]history[/green] - Workout history exports")
    console.print()
    console.print("[bold]Modalities:[/bold]")
    console.print("  [yellow]strength[/yellow] - Sets × reps training")
    console.print("  [yellow]countdown[/yellow] - Fixed duration timer")
    console.print("  [yellow]stopwatch[/yellow] - Open-ended timing")
    console.print("  [yellow]interval[/yellow] - Repeating work periods")
    console.print()
    console.print("[bold]Equipment tags:[/bold]")
    console.print(f"  {', '.join(EQUIPMENT_TAGS)}")
    console.print()
    console.print("[bold]Conversions:[/bold]")
    for source, target in SUPPORTED_CONVERSIONS:
        console.print(f"  [green]{source}[/green] → [green]{target}[/green]")


@app.command()
def init(
    output: Path = typer.Argument(Path("plan.yaml"), help="Output file path"),
    history_template: bool = typer.Option(False, "--history", help="Generate a history export template instead"),
) -> None:
    """Write a new plan (or history) template."""
    if output.exists():
        err_console.print(f"[red]error[/red]: File already exists: {escape(str(output))}")
        raise typer.Exit(1)

    try:
        output.write_text(HISTORY_TEMPLATE if history_template else PLAN_TEMPLATE, encoding="utf-8")
    except OSError as e:
        err_console.print(f"[red]error[/red]: {escape(str(e))}")
        raise typer.Exit(1) from e

    command = "history" if history_template else "validate"
    console.print(f"[green]✓[/green] Created {escape(str(output))}")
    console.print()
    console.print("Next steps:")
    console.print(f"  1. Edit {escape(str(output))} to add your data")
    console.print(f"  2. Run [cyan]pwf {command} {escape(str(output))}[/cyan] to validate")


def _print_fit_export_guidance() -> None:
    err_console.print("[red]error[/red]: FIT export is not currently supported")
    err_console.print()
    err_console.print("[bold]Recommended alternative:[/bold]")
    err_console.print("  Export to TCX format instead:")
    err_console.print("  [cyan]pwf convert --from pwf --to tcx workout.yaml output.tcx[/cyan]")
    err_console.print()
    err_console.print("  TCX files are accepted by Garmin Connect, Strava, TrainingPeaks and most fitness platforms.")


def _print_supported_conversions(source: str, target: str) -> None:
    err_console.print(f"[red]error[/red]: Conversion from {escape(source)} to {escape(target)} is not supported")
    err_console.print()
    err_console.print("Currently supported conversions:")
    for supported_source, supported_target in SUPPORTED_CONVERSIONS:
        err_console.print(f"  [green]{supported_source}[/green] → [green]{supported_target}[/green]")


def _run_conversion(source: str, target: str, input_path: Path, summary_only: bool) -> tuple[str, list]:
    """Convert a file and return the artifact text with its warnings.

    Raises:
        UnsupportedFormatError: If there is no converter for the format pair
        ConversionError: If the conversion fails
        OSError: If the input cannot be read
    """
    if (source, target) not in SUPPORTED_CONVERSIONS:
        raise UnsupportedFormatError(f"{source} to {target}")

    if target == "pwf":
        result = IMPORTERS[source](input_path.read_bytes(), summary_only)
        return result.pwf_yaml, result.warnings

    export, artifact_field = EXPORTERS[target]
    result = export(load_history(input_path.read_text(encoding="utf-8")))
    return getattr(result, artifact_field), result.warnings


@app.command()
def convert(
    input_path: Path = typer.Argument(..., metavar="INPUT", help="Input file path"),
    output_path: Path = typer.Argument(..., metavar="OUTPUT", help="Output file path"),
    from_format: str = typer.Option(..., "--from", help="Input format (fit, tcx, gpx, pwf)"),
    to_format: str = typer.Option(..., "--to", help="Output format (pwf, tcx, gpx, csv)"),
    summary_only: bool = typer.Option(False, "--summary-only", help="Skip GPS routes and time series"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show conversion warnings"),
) -> None:
    """Convert between PWF and other formats (FIT, TCX, GPX, CSV)."""
    source = from_format.lower()
    target = to_format.lower()
    summary_only = summary_only or get_settings().summary_only

    if source == target:
        err_console.print(f"[red]error[/red]: Input and output formats are the same: {escape(from_format)}")
        raise typer.Exit(1)
    if not input_path.exists():
        err_console.print(f"[red]error[/red]: Input file not found: {escape(str(input_path))}")
        raise typer.Exit(1)
    if output_path.exists():
        err_console.print(f"[red]error[/red]: Output file already exists: {escape(str(output_path))}")
        raise typer.Exit(1)
    if (source, target) == ("pwf", "fit"):
        _print_fit_export_guidance()
        raise typer.Exit(1)

    console.print(f"[cyan]→[/cyan] Converting {escape(str(input_path))} to {target.upper()}...")
    try:
        artifact, warnings = _run_conversion(source, target, input_path, summary_only)
    except UnsupportedFormatError as e:
        _print_supported_conversions(source, target)
        raise typer.Exit(1) from e
    except ConversionError as e:
        err_console.print(f"[red]error[/red]: Conversion failed: {escape(str(e))}")
        raise typer.Exit(1) from e
    except OSError as e:
        err_console.print(f"[red]error[/red]: Failed to read input file: {escape(str(e))}")
        raise typer.Exit(1) from e

    if verbose and warnings:
        console.print()
        console.print("[yellow]⚠[/yellow] Conversion warnings:")
        for warning in warnings:
            console.print(f"  [yellow]⚠ {escape(str(warning))}[/yellow]")
        console.print()

    try:
        output_path.write_text(artifact, encoding="utf-8")
    except OSError as e:
        err_console.print(f"[red]error[/red]: Failed to write output file: {escape(str(e))}")
        raise typer.Exit(1) from e

    logger.info(f"Converted {input_path} ({source}) to {output_path} ({target}) with {len(warnings)} warning(s)")
    console.print(f"[green]✓[/green] Converted to {escape(str(output_path))}")
    if warnings and not verbose:
        console.print(f"  [yellow]{len(warnings)}[/yellow] warnings (use [cyan]--verbose[/cyan] to see details)")
    if target == "pwf":
        console.print()
        console.print("Next steps:")
        console.print(f"  Validate: [cyan]pwf history {escape(str(output_path))}[/cyan]")


if __name__ == "__main__":
    app()
