"""
linkpack CLI - Command Line Interface

Entry point for batch planning, archive building, single-file rendering,
tabular export, import and session files.
"""

import asyncio
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from linkpack import __version__
from linkpack.core.config import AppConfig, load_config
from linkpack.core.constants import (
    EXPORT_FIELD_DESCRIPTIONS,
    EXPORT_FIELD_LABELS,
    EXPORT_FIELDS,
    DedupeMode,
    ExportFormat,
    OutputType,
    PrivacyMode,
)
from linkpack.core.exceptions import InvalidUrlError, LinkPackError
from linkpack.core.models import BatchOptions, Plan
from linkpack.detectors.router import import_payload
from linkpack.orchestrator.planner import build_plan
from linkpack.qr.qrcode_renderer import QRCodeRenderer
from linkpack.renderers.shortcuts import render_file
from linkpack.reporting.exporters.csv import build_delimited_export
from linkpack.reporting.exporters.json import build_structured_export
from linkpack.reporting.rows import plan_export_rows
from linkpack.storage.archive import build_plan_archive
from linkpack.storage.files import read_payload, save_output
from linkpack.storage.session import load_session_json, session_to_json
from linkpack.urls.filenames import single_download_name
from linkpack.urls.normalizer import apply_privacy_mode, normalize_url


# Create CLI app
app = typer.Typer(
    name="linkpack",
    help="linkpack - Turn URL lists into portable link shortcut files",
    add_completion=False,
    no_args_is_help=True,
)

# Create sub-apps for command groups
session_app = typer.Typer(help="Save and inspect batch session files")

# Register sub-apps
app.add_typer(session_app, name="session")

# Rich console for output
console = Console()

# Extensions read as raw batch text; everything else goes through the import router.
_PLAIN_TEXT_SUFFIXES = {"", ".txt", ".text", ".list"}


# ============================================================================
# Helpers
# ============================================================================

@dataclass
class BatchInput:
    """Batch text plus the settings that came with it."""
    text: str
    source: str
    output_type: OutputType
    archive_name: str
    options: BatchOptions


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(code=1)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def _load_batch(input_file: Path, config: AppConfig) -> BatchInput:
    """Read an input file as batch text.

    Plain-text files are used line by line (invalid lines included);
    other files go through the import router, and session files restore
    their lines, output type, archive name and options.
    """
    if input_file.suffix.lower() in _PLAIN_TEXT_SUFFIXES:
        payload = read_payload(input_file)
        return BatchInput(
            text=payload.clean_text,
            source="manual",
            output_type=config.output_type,
            archive_name=config.archive_name,
            options=config.options,
        )

    outcome = import_payload(read_payload(input_file))
    if outcome.session is not None:
        state = outcome.session
        return BatchInput(
            text=state.text,
            source="session",
            output_type=state.output_type,
            archive_name=state.archive_base_name,
            options=state.options,
        )

    console.print(f"[blue]Imported[/blue] {len(outcome.urls)} URL(s) from {outcome.source}")
    return BatchInput(
        text=outcome.batch_text(),
        source="import",
        output_type=config.output_type,
        archive_name=config.archive_name,
        options=config.options,
    )


def _apply_overrides(
    options: BatchOptions,
    dedupe: Optional[bool] = None,
    dedupe_mode: Optional[DedupeMode] = None,
    export_csv: Optional[bool] = None,
    export_json: Optional[bool] = None,
    fields: Optional[str] = None,
    qr_png: Optional[bool] = None,
    qr_svg: Optional[bool] = None,
) -> BatchOptions:
    if dedupe is not None:
        options.dedupe = dedupe
    if dedupe_mode is not None:
        options.dedupe_mode = dedupe_mode
    if export_csv is not None:
        options.export_csv = export_csv
    if export_json is not None:
        options.export_json = export_json
    if fields:
        options.export_fields = [f.strip() for f in fields.split(",") if f.strip()]
    if qr_png:
        options.qr_png = True
    if qr_svg:
        options.qr_svg = True
    return options


def _plan_from_input(
    input_file: Path,
    config_file: Optional[Path],
    privacy: Optional[PrivacyMode],
    output_type: Optional[OutputType] = None,
    name: Optional[str] = None,
    **overrides,
) -> Plan:
    config = load_config(config_file)
    batch = _load_batch(input_file, config)
    options = _apply_overrides(batch.options, **overrides)

    return build_plan(
        batch.text,
        options,
        privacy_mode=privacy or config.privacy_mode,
        output_type=output_type or batch.output_type,
        archive_base_name=name or batch.archive_name,
        source=batch.source,
    )


def _print_plan(plan: Plan) -> None:
    table = Table(title=f"Batch Plan ({plan.output_type.value})")
    table.add_column("#", style="dim")
    table.add_column("Raw", style="white")
    table.add_column("Effective URL", style="cyan")
    table.add_column("Dedupe key", style="blue")

    for i, item in enumerate(plan.deduped, start=1):
        table.add_row(str(i), item.raw, item.effective_url, item.dedupe_key)

    console.print(table)

    if plan.invalid:
        invalid_table = Table(title="Invalid lines")
        invalid_table.add_column("Raw", style="yellow")
        invalid_table.add_column("Reason", style="red")
        for bad in plan.invalid:
            invalid_table.add_row(bad.raw, bad.reason)
        console.print(invalid_table)

    console.print(Panel.fit(
        f"[bold]Lines:[/bold] {len(plan.lines)}\n"
        f"[bold]Valid:[/bold] {len(plan.valid)}\n"
        f"[bold]Unique:[/bold] [green]{len(plan.deduped)}[/green]\n"
        f"[bold]Invalid:[/bold] [red]{len(plan.invalid)}[/red]\n"
        f"[bold]Duplicates removed:[/bold] {plan.removed_count}",
        title="Summary",
    ))


# ============================================================================
# Main Commands
# ============================================================================

@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Verbose (debug) logging",
    ),
) -> None:
    """linkpack - Turn URL lists into portable link shortcut files."""
    _setup_logging(verbose)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold cyan]linkpack[/bold cyan] version [green]{__version__}[/green]")


@app.command()
def plan(
    input_file: Path = typer.Argument(..., help="Batch text or importable file", exists=True),
    privacy: Optional[PrivacyMode] = typer.Option(
        None, "--privacy", "-p", help="Privacy mode", case_sensitive=False,
    ),
    dedupe_mode: Optional[DedupeMode] = typer.Option(
        None, "--dedupe-mode", "-d", help="Dedupe strictness", case_sensitive=False,
    ),
    no_dedupe: bool = typer.Option(False, "--no-dedupe", help="Keep duplicates"),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file", exists=True,
    ),
) -> None:
    """
    Build and display a batch plan.

    Shows the unique items, the invalid lines with their reasons and the
    number of duplicates removed.
    """
    try:
        result = _plan_from_input(
            input_file,
            config,
            privacy,
            dedupe=False if no_dedupe else None,
            dedupe_mode=dedupe_mode,
        )
        if result.is_empty:
            console.print("[yellow]No lines found in input[/yellow]")
            return
        _print_plan(result)
        if not result.has_valid:
            console.print("[yellow]No valid URLs in input[/yellow]")
    except LinkPackError as e:
        _fail(str(e))


@app.command()
def build(
    input_file: Path = typer.Argument(..., help="Batch text or importable file", exists=True),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Archive path (default: <name>.zip in the current directory)",
    ),
    output_type: Optional[OutputType] = typer.Option(
        None, "--type", "-t", help="Shortcut file type", case_sensitive=False,
    ),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Archive base name"),
    csv: Optional[bool] = typer.Option(None, "--csv/--no-csv", help="Include export.csv"),
    json: Optional[bool] = typer.Option(None, "--json/--no-json", help="Include export.json"),
    fields: Optional[str] = typer.Option(
        None, "--fields", "-f", help="Export fields, comma separated (see: linkpack fields)",
    ),
    qr_png: bool = typer.Option(False, "--qr-png", help="Include PNG QR codes"),
    qr_svg: bool = typer.Option(False, "--qr-svg", help="Include SVG QR codes"),
    privacy: Optional[PrivacyMode] = typer.Option(
        None, "--privacy", "-p", help="Privacy mode", case_sensitive=False,
    ),
    dedupe_mode: Optional[DedupeMode] = typer.Option(
        None, "--dedupe-mode", "-d", help="Dedupe strictness", case_sensitive=False,
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file", exists=True,
    ),
) -> None:
    """
    Build a zip archive of shortcut files.

    The archive holds one shortcut per unique URL, a manifest, and
    optionally CSV/JSON exports and QR images.
    """
    try:
        result = _plan_from_input(
            input_file,
            config,
            privacy,
            output_type=output_type,
            name=name,
            dedupe_mode=dedupe_mode,
            export_csv=csv,
            export_json=json,
            fields=fields,
            qr_png=qr_png,
            qr_svg=qr_svg,
        )

        if result.invalid:
            console.print(f"[yellow]Skipping {len(result.invalid)} invalid line(s)[/yellow]")

        archive = asyncio.run(build_plan_archive(result, qr_renderer=QRCodeRenderer()))

        target = output or Path.cwd() / archive.filename
        save_output(target, archive.data)

        console.print(Panel.fit(
            f"[bold]Archive:[/bold] [cyan]{target}[/cyan]\n"
            f"[bold]Link files:[/bold] [green]{archive.file_count}[/green]\n"
            f"[bold]Entries:[/bold] {len(archive.entries)}\n"
            f"[bold]Duplicates removed:[/bold] {result.removed_count}",
            title="Archive Built",
        ))
    except LinkPackError as e:
        _fail(str(e))


@app.command()
def render(
    url: str = typer.Argument(..., help="URL to render"),
    output_type: OutputType = typer.Option(
        OutputType.HTML, "--type", "-t", help="Shortcut file type", case_sensitive=False,
    ),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="File name (extension optional)"),
    privacy: PrivacyMode = typer.Option(
        PrivacyMode.FULL, "--privacy", "-p", help="Privacy mode", case_sensitive=False,
    ),
    output_dir: Path = typer.Option(
        Path("."), "--output-dir", "-o", help="Directory to write the file to",
    ),
) -> None:
    """Render a single shortcut file."""
    try:
        result = normalize_url(url)
        if not result.ok:
            raise InvalidUrlError(url, result.reason)

        effective = apply_privacy_mode(result.url, privacy)
        rendered = render_file(effective, output_type)
        filename = single_download_name(effective, output_type, name)

        target = save_output(output_dir / filename, rendered.contents)
        console.print(f"[green]✓[/green] Wrote {target} ([dim]{rendered.media_type}[/dim])")
    except InvalidUrlError as e:
        _fail(f"{e.raw}: {e.reason}")
    except LinkPackError as e:
        _fail(str(e))


@app.command()
def export(
    input_file: Path = typer.Argument(..., help="Batch text or importable file", exists=True),
    export_format: ExportFormat = typer.Option(
        ExportFormat.CSV, "--format", "-F", help="Export format", case_sensitive=False,
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Output file (default: stdout)",
    ),
    fields: Optional[str] = typer.Option(
        None, "--fields", "-f", help="Export fields, comma separated (see: linkpack fields)",
    ),
    output_type: Optional[OutputType] = typer.Option(
        None, "--type", "-t", help="Shortcut file type", case_sensitive=False,
    ),
    privacy: Optional[PrivacyMode] = typer.Option(
        None, "--privacy", "-p", help="Privacy mode", case_sensitive=False,
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file", exists=True,
    ),
) -> None:
    """Write the CSV or JSON export of a batch plan."""
    try:
        result = _plan_from_input(input_file, config, privacy, output_type=output_type, fields=fields)
        rows = plan_export_rows(result)

        if export_format is ExportFormat.CSV:
            content = build_delimited_export(rows, result.options.export_fields)
        else:
            content = build_structured_export(rows, result.options.export_fields)

        if output is None:
            typer.echo(content, nl=False)
        else:
            save_output(output, content)
            console.print(f"[green]✓[/green] Exported {len(rows)} row(s) to {output}")
    except LinkPackError as e:
        _fail(str(e))


@app.command("fields")
def list_fields() -> None:
    """List the fields accepted by --fields."""
    table = Table(title="Export Fields")
    table.add_column("Field", style="cyan")
    table.add_column("CSV header", style="dim")
    table.add_column("Description", style="white")

    for key in EXPORT_FIELDS:
        table.add_row(key, EXPORT_FIELD_LABELS[key], EXPORT_FIELD_DESCRIPTIONS[key])

    console.print(table)


@app.command("import")
def import_file(
    file: Path = typer.Argument(..., help="File to import", exists=True),
    into: Optional[Path] = typer.Option(
        None, "--into", "-i", help="Batch text file to write the imported URLs into",
    ),
    append: bool = typer.Option(False, "--append", "-a", help="Append instead of replacing"),
) -> None:
    """
    Detect the format of a file and extract its URLs.

    Supports .json, .csv, .tsv, .txt, .url, .webloc, .html and batch
    session files.
    """
    try:
        outcome = import_payload(read_payload(file))

        if into is None:
            for url in outcome.urls:
                typer.echo(url)
            console.print(
                f"[blue]{outcome.source}:[/blue] {len(outcome.urls)} URL(s)",
                highlight=False,
            )
            return

        existing = into.read_text(encoding="utf-8") if into.exists() else ""
        text = outcome.batch_text(existing, replace=not append)
        save_output(into, text + "\n")

        verb = "Appended" if append else "Imported"
        console.print(f"[green]✓[/green] {verb} {outcome.source} into {into}")
    except LinkPackError as e:
        _fail(str(e))


# ============================================================================
# Session Commands
# ============================================================================

@session_app.command("save")
def session_save(
    input_file: Path = typer.Argument(..., help="Batch text or importable file", exists=True),
    output: Path = typer.Option(..., "--output", "-o", help="Session file to write"),
    output_type: Optional[OutputType] = typer.Option(
        None, "--type", "-t", help="Shortcut file type", case_sensitive=False,
    ),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Archive base name"),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file", exists=True,
    ),
) -> None:
    """Save a batch as a session file."""
    try:
        result = _plan_from_input(input_file, config, None, output_type=output_type, name=name)
        save_output(output, session_to_json(result))
        console.print(f"[green]✓[/green] Saved {len(result.lines)} line(s) to {output}")
    except LinkPackError as e:
        _fail(str(e))


@session_app.command("show")
def session_show(
    file: Path = typer.Argument(..., help="Session file", exists=True),
) -> None:
    """Show the contents of a session file."""
    try:
        state = load_session_json(read_payload(file).clean_text)

        options = state.options
        console.print(Panel.fit(
            f"[bold]Created:[/bold] {state.created_at or 'N/A'}\n"
            f"[bold]Output type:[/bold] {state.output_type.value}\n"
            f"[bold]Archive name:[/bold] {state.archive_base_name}\n"
            f"[bold]Dedupe:[/bold] {options.dedupe} ({options.dedupe_mode.value})\n"
            f"[bold]Exports:[/bold] csv={options.export_csv} json={options.export_json}\n"
            f"[bold]QR:[/bold] png={options.qr_png} svg={options.qr_svg}\n"
            f"[bold]Lines:[/bold] {len(state.lines)}",
            title=f"Session: {file.name}",
        ))

        for line in state.lines:
            console.print(f"  {line}", highlight=False)
    except LinkPackError as e:
        _fail(str(e))


# ============================================================================
# Entry Point
# ============================================================================

def main() -> None:
    """Main entry point for CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
