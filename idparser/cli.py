"""
CLI Interface
=============
Developer command-line interface for inspecting extraction on OCR text.

Usage:
    python -m idparser extract <text_file> [options]
    python -m idparser kyc <front_file> <back_file> [options]
    python -m idparser batch <directory> [options]
    python -m idparser info
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from . import __version__
from .engine import EngineConfig, ExtractionEngine
from .models import DocumentType
from .patterns import DEFAULT_LIBRARY, UnsupportedDocumentTypeError
from .validator import ValidationEngine

console = Console()

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.version_option(version=__version__, prog_name="id-parser")
def cli():
    """ID Parser: structured fields from identity-document OCR text."""
    pass


@cli.command()
@click.argument("text_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--doc-type", "-t",
    default=None,
    type=click.Choice([t.value for t in DocumentType]),
    help="Skip classification and use this document template",
)
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(LOG_LEVELS),
    help="Logging level",
)
@click.option(
    "--log-file",
    default=None,
    help="Path to log file",
)
@click.option(
    "--json-output",
    is_flag=True,
    default=False,
    help="Output only JSON result to stdout (for programmatic use)",
)
def extract(
    text_file: str,
    doc_type: str,
    log_level: str,
    log_file: str,
    json_output: bool,
):
    """Extract fields from a single OCR text file."""

    if json_output:
        # Suppress console output for JSON mode
        log_level = "ERROR"

    config = EngineConfig(log_level=log_level, log_file=log_file)

    try:
        text = _read_text(text_file)
        engine = ExtractionEngine(config)
        result = engine.extract(text, document_type=doc_type)
        report = ValidationEngine(config.library).validate(result)
    except (OSError, UnsupportedDocumentTypeError) as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)

    if json_output:
        print(json.dumps(
            {
                "result": result.model_dump(mode="json"),
                "validation": report.model_dump(mode="json"),
            },
            indent=2,
            ensure_ascii=False,
        ))
        return

    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]ID Parser v{__version__}[/]\n"
            f"[dim]Extracting: {Path(text_file).name}[/]",
            border_style="cyan",
        )
    )
    console.print()
    _display_result(result)
    _display_validation_table(report)


@cli.command()
@click.argument("front_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("back_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--log-level", default="INFO", type=click.Choice(LOG_LEVELS),
              help="Logging level")
@click.option(
    "--json-output",
    is_flag=True,
    default=False,
    help="Output only JSON record to stdout (for programmatic use)",
)
def kyc(front_file: str, back_file: str, log_level: str, json_output: bool):
    """Merge the front and back scans of one document into a KYC record."""

    if json_output:
        log_level = "ERROR"

    config = EngineConfig(log_level=log_level)

    try:
        front_text = _read_text(front_file)
        back_text = _read_text(back_file)
    except OSError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)

    engine = ExtractionEngine(config)
    record = engine.extract_kyc(front_text, back_text)
    report = ValidationEngine(config.library).validate_kyc(record)

    if json_output:
        print(json.dumps(
            {
                "record": record.model_dump(mode="json"),
                "validation": report.model_dump(mode="json"),
            },
            indent=2,
            ensure_ascii=False,
        ))
        return

    console.print()
    table = Table(title="KYC Record", border_style="cyan")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Document Type", record.document_type.value)
    table.add_row("Front Side", record.front.side.value)
    table.add_row("Back Side", record.back.side.value)
    for name in ("full_name", "date_of_birth", "id_number", "address"):
        value = getattr(record, name)
        table.add_row(name, value if value else "[dim](not found)[/]")
    console.print(table)
    console.print()
    _display_validation_table(report)


@cli.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option("--pattern", default="*.txt", help="Glob for OCR text files")
@click.option("--log-level", default="WARNING", type=click.Choice(LOG_LEVELS),
              help="Logging level")
def batch(directory: str, pattern: str, log_level: str):
    """Extract every OCR text file in a directory."""

    text_files = sorted(Path(directory).glob(pattern))

    if not text_files:
        console.print(f"[yellow]No files matching {pattern} in: {directory}[/]")
        return

    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]Batch Extraction[/]\n"
            f"[dim]Found {len(text_files)} files in: {directory}[/]",
            border_style="cyan",
        )
    )
    console.print()

    engine = ExtractionEngine(EngineConfig(log_level=log_level))
    validator = ValidationEngine(engine.config.library)
    results = []
    errors = []

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeRemainingColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Extracting...", total=len(text_files))

        for text_file in text_files:
            progress.update(task, description=f"Extracting: {text_file.name}")
            try:
                result = engine.extract(_read_text(text_file))
                results.append(
                    (text_file.name, result, validator.validate(result))
                )
            except OSError as e:
                errors.append((text_file.name, str(e)))
            progress.advance(task)

    _display_batch_summary(results, errors)


@cli.command()
def info():
    """Display the supported document templates and their keywords."""

    console.print()
    table = Table(title="Document Templates", border_style="cyan")
    table.add_column("Priority", justify="right")
    table.add_column("Type", style="bold", no_wrap=True)
    table.add_column("Signatures", justify="right")
    table.add_column("Front Keywords")
    table.add_column("Back Keywords")
    table.add_column("Address Side")

    for priority, profile in enumerate(DEFAULT_LIBRARY.profiles, start=1):
        table.add_row(
            str(priority),
            profile.document_type.value,
            str(len(profile.signatures)),
            ", ".join(profile.front_keywords),
            ", ".join(profile.back_keywords),
            ", ".join(sorted(s.value for s in profile.address_sides)) or "-",
        )

    console.print(table)
    console.print()


# ─── Display Helpers ──────────────────────────────────────────────────────────


def _read_text(path) -> str:
    return Path(path).read_text(encoding="utf-8", errors="replace")


def _display_result(result):
    """Display extracted fields in a formatted table."""
    table = Table(title="Extraction Result", border_style="cyan")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Document Type", result.document_type.value)
    table.add_row("Side", result.side.value)

    if result.fields is None:
        table.add_row("Error", f"[red]{result.error}[/]")
    else:
        values = result.fields.model_dump(exclude={"document_type"})
        for name, value in values.items():
            table.add_row(name, value if value else "[dim](not found)[/]")

    console.print(table)
    console.print()


def _display_validation_table(report):
    """Display a validation report as a rich table."""
    table = Table(title="Validation Report", border_style="green")
    table.add_column("Check", style="bold")
    table.add_column("Detail")
    table.add_column("Severity", justify="right")

    if not report.anomalies:
        table.add_row("[green]✓ complete[/]", "-", "0")
    for anomaly in report.anomalies:
        table.add_row(
            anomaly.type.value,
            anomaly.message,
            str(anomaly.severity),
        )

    console.print(table)
    status = "[green]complete[/]" if report.is_complete else "[red]incomplete[/]"
    console.print(
        f"[dim]Anomaly score: {report.anomaly_score}[/] | Status: {status}"
    )
    console.print()


def _display_batch_summary(results, errors):
    """Display batch processing summary."""
    console.print()

    table = Table(title="Batch Extraction Summary", border_style="cyan")
    table.add_column("File", style="bold")
    table.add_column("Type")
    table.add_column("Side")
    table.add_column("Fields", justify="right")
    table.add_column("Anomaly Score", justify="right")
    table.add_column("Status", justify="center")

    by_type: dict[str, int] = {}

    for name, result, report in results:
        field_count = (
            len(result.fields.populated_fields()) if result.fields else 0
        )
        by_type[result.document_type.value] = (
            by_type.get(result.document_type.value, 0) + 1
        )
        status = "[green]✓[/]" if report.is_complete else "[yellow]⚠[/]"
        table.add_row(
            name,
            result.document_type.value,
            result.side.value,
            str(field_count),
            str(report.anomaly_score),
            status,
        )

    for name, error in errors:
        table.add_row(name, "-", "-", "-", "-", "[red]✗ FAILED[/]")

    console.print(table)
    console.print()
    breakdown = ", ".join(
        f"{count} {doc_type}" for doc_type, count in sorted(by_type.items())
    )
    console.print(
        f"[bold]Total:[/] {len(results)} files ({breakdown or 'none'}), "
        f"{len(errors)} failures"
    )
    console.print()


# ─── Entry point (for python -m idparser.cli) ─────────────────────────────────


if __name__ == "__main__":
    cli()
