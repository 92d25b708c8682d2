"""
Enrich CLI commands for hashtag-based metadata enrichment.

This module provides CLI commands that load the first pages of a Twelve
Labs index, merge them into a display collection and run one enrichment
batch over the videos that still lack metadata. ``preview`` lists those
videos without calling the generate endpoint.

Supports generating detailed JSON reports of enrichment runs and logging
to file for auditing purposes.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from videotags.config.settings import settings
from videotags.container import container
from videotags.exceptions import (
    EXIT_CODE_API_ERROR,
    EXIT_CODE_CONFIGURATION_ERROR,
    EXIT_CODE_INTERRUPTED,
    EXIT_CODE_PARTIAL_SUCCESS,
    ConfigurationError,
    TwelveLabsAPIError,
)
from videotags.models.display import UNTITLED_VIDEO
from videotags.models.enrichment_report import EnrichmentReport
from videotags.models.video import VideoRecord
from videotags.services.interfaces import VideoListingInterface

app = typer.Typer(help="Enrich video metadata from generated hashtags")
console = Console()


def _generate_timestamp() -> str:
    """
    Generate timestamp string for file names.

    Returns
    -------
    str
        Timestamp in YYYYMMDD-HHMMSS format
    """
    return datetime.now().strftime("%Y%m%d-%H%M%S")


def _get_default_report_path(timestamp: str) -> Path:
    """Get the default report path, ``{export_dir}/enrichment-{timestamp}.json``."""
    return settings.export_dir / f"enrichment-{timestamp}.json"


def _setup_enrichment_logging(
    timestamp: Optional[str] = None, verbose: bool = False
) -> Path:
    """
    Set up file logging for an enrichment run.

    Creates a log file at ``{logs_dir}/enrichment-{timestamp}.log``,
    creating the directory if needed.

    Parameters
    ----------
    timestamp : str, optional
        Timestamp to use for log file name. If None, generates new timestamp.
    verbose : bool, optional
        If True, log at DEBUG level and echo log records to the console.
        Otherwise the level comes from ``LOG_LEVEL``.

    Returns
    -------
    Path
        Path to the created log file
    """
    if timestamp is None:
        timestamp = _generate_timestamp()

    log_dir = settings.logs_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"enrichment-{timestamp}.log"

    log_level = logging.DEBUG if verbose else getattr(logging, settings.log_level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler = logging.FileHandler(log_file, mode="w")
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)

    package_logger = logging.getLogger("videotags")
    package_logger.addHandler(file_handler)
    package_logger.setLevel(log_level)

    if verbose:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(formatter)
        package_logger.addHandler(console_handler)

    return log_file


def _save_report(report: EnrichmentReport, output_path: Path) -> None:
    """Save an enrichment report as JSON, creating parent directories."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(report.model_dump_json(indent=2))


def _resolve_index_id(index_id: Optional[str], ads: bool = False) -> str:
    """
    Pick the index to work on and check credentials.

    An explicit ``index_id`` wins; otherwise ``ads`` selects between the
    ads library and content library indexes.

    Raises
    ------
    ConfigurationError
        If no index is given or configured, or no API key is set.
    """
    setting_name = "ads_index_id" if ads else "content_index_id"
    resolved = index_id or getattr(settings, setting_name)
    if not resolved:
        raise ConfigurationError(
            f"No index ID given. Pass --index-id or set {setting_name.upper()}.",
            setting_name=setting_name,
        )
    if not settings.has_api_credentials:
        raise ConfigurationError(
            "TWELVELABS_API_KEY is not set.", setting_name="twelvelabs_api_key"
        )
    return resolved


async def _load_pages(
    listing: VideoListingInterface, index_id: str, pages: Optional[int]
) -> list[VideoRecord]:
    """Load up to ``pages`` pages of an index (every page if None)."""
    records: list[VideoRecord] = []
    page_number = 1
    while True:
        page = await listing.list_videos(
            index_id, page=page_number, page_limit=settings.page_limit
        )
        records.extend(page.data)
        if not page.has_next or (pages is not None and page_number >= pages):
            break
        page_number += 1
    return records


def _render_configuration_error(error: ConfigurationError) -> None:
    console.print(
        Panel(
            f"[red]{error.message}[/red]",
            title="Configuration Required",
            border_style="red",
        )
    )


def _render_report(report: EnrichmentReport) -> None:
    """Render the run summary panel and any error details."""
    summary = report.summary
    summary_lines = [
        f"Index: [cyan]{report.index_id}[/cyan]",
        f"Candidates: [cyan]{summary.candidates}[/cyan]",
        f"Already Complete: [dim]{summary.already_complete}[/dim]",
        f"Still Indexing: [dim]{summary.not_ready}[/dim]",
        f"Left by Limit: [dim]{summary.over_limit}[/dim]",
        f"Videos Enriched: [green]{summary.videos_enriched}[/green]",
        f"Videos Failed: [red]{summary.videos_failed}[/red]",
        f"Chunks: [cyan]{summary.chunks}[/cyan]",
    ]
    status_color = "green" if summary.videos_failed == 0 else "yellow"
    console.print(
        Panel(
            "\n".join(summary_lines),
            title="Enrichment Complete",
            border_style=status_color,
        )
    )

    if summary.videos_failed > 0:
        error_table = Table(title="Errors", show_header=True)
        error_table.add_column("Video ID", style="cyan")
        error_table.add_column("Error", style="red")
        for detail in report.details:
            if detail.status == "failed":
                error_table.add_row(detail.video_id, detail.error or "")
        console.print(error_table)


def _render_api_error(error: TwelveLabsAPIError) -> None:
    console.print(
        Panel(
            f"[red]{error.message}[/red]",
            title="Twelve Labs API Error",
            border_style="red",
        )
    )


@app.command("run")
def enrich_videos(
    index_id: Optional[str] = typer.Option(
        None,
        "--index-id",
        "-i",
        help="Twelve Labs index to enrich (default: CONTENT_INDEX_ID)",
    ),
    ads: bool = typer.Option(
        False,
        "--ads",
        help="Enrich the ads library index (ADS_INDEX_ID) instead of the content library",
    ),
    pages: int = typer.Option(
        1,
        "--pages",
        "-p",
        min=1,
        help="Number of listing pages to load (default: 1)",
    ),
    all_pages: bool = typer.Option(
        False,
        "--all-pages",
        help="Load every page of the index (overrides --pages)",
    ),
    limit: int = typer.Option(
        0,
        "--limit",
        "-l",
        min=0,
        help="Maximum videos to enrich in this run (0 = no limit)",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Regenerate metadata even for videos that already have it",
    ),
    concurrency: Optional[int] = typer.Option(
        None,
        "--concurrency",
        "-k",
        min=1,
        help="Maximum concurrent generate calls (default: ENRICHMENT_CONCURRENCY)",
    ),
    report: Optional[Path] = typer.Option(
        None,
        "--report",
        "-o",
        help="Save JSON report to file (use '.' for ./exports/enrichment-{timestamp}.json)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable detailed debug logging",
    ),
) -> None:
    """
    Enrich videos that have no metadata yet.

    Loads the first pages of the index, then asks Twelve Labs for hashtags
    for every ready video without metadata, classifies them and stores the
    result as the video's user metadata. With --force, videos that already
    have metadata are regenerated too.

    Exit codes:
    - 0: Success
    - 1: Configuration error (missing index ID or API key)
    - 2: API error while listing the index
    - 3: Partial success (some videos failed)
    - 130: Interrupted by user

    Examples:
        videotags enrich run
        videotags enrich run --index-id 6811f0c1... --pages 3
        videotags enrich run --ads --all-pages --force --limit 20
        videotags enrich run --concurrency 5 --report ./report.json
    """
    timestamp = _generate_timestamp()
    log_file = _setup_enrichment_logging(timestamp, verbose=verbose)
    console.print(f"[dim]Logging to: {log_file}[/dim]")
    if verbose:
        console.print("[dim]Verbose logging enabled (DEBUG level)[/dim]")
    console.print()

    report_output_path: Optional[Path] = None
    if report is not None:
        if str(report) in ("", "."):
            report_output_path = _get_default_report_path(timestamp)
        else:
            report_output_path = report

    try:
        resolved_index_id = _resolve_index_id(index_id, ads=ads)
        client = container.twelvelabs_client
    except ConfigurationError as e:
        _render_configuration_error(e)
        raise typer.Exit(EXIT_CODE_CONFIGURATION_ERROR)

    page_count = None if all_pages else pages
    page_label = "all pages" if all_pages else f"{pages} page(s)"

    async def run_enrichment() -> Optional[EnrichmentReport]:
        try:
            collection = container.create_display_collection()
            scheduler = container.create_scheduler(
                resolved_index_id, collection, concurrency=concurrency
            )
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
                transient=True,
            ) as progress:
                task = progress.add_task(
                    f"Loading {page_label} of index {resolved_index_id}...",
                    total=None,
                )
                records = await _load_pages(client, resolved_index_id, page_count)
                progress.update(
                    task, description=f"Enriching {len(records)} videos..."
                )
                return await scheduler.process_page(
                    records, force=force, limit=limit or None
                )
        finally:
            await client.close()

    try:
        result = asyncio.run(run_enrichment())
    except KeyboardInterrupt:
        console.print("\n[yellow]Enrichment interrupted by user[/yellow]")
        raise typer.Exit(EXIT_CODE_INTERRUPTED)
    except ConfigurationError as e:
        _render_configuration_error(e)
        raise typer.Exit(EXIT_CODE_CONFIGURATION_ERROR)
    except TwelveLabsAPIError as e:
        _render_api_error(e)
        raise typer.Exit(EXIT_CODE_API_ERROR)

    if result is None:
        console.print("[yellow]Enrichment already running or cooling down[/yellow]")
        return

    _render_report(result)

    if report_output_path is not None:
        _save_report(result, report_output_path)
        console.print(f"\n[green]Report saved to:[/green] {report_output_path}")

    if result.summary.videos_failed > 0:
        raise typer.Exit(EXIT_CODE_PARTIAL_SUCCESS)


@app.command("preview")
def preview_videos(
    index_id: Optional[str] = typer.Option(
        None,
        "--index-id",
        "-i",
        help="Twelve Labs index to inspect (default: CONTENT_INDEX_ID)",
    ),
    ads: bool = typer.Option(
        False,
        "--ads",
        help="Inspect the ads library index (ADS_INDEX_ID) instead of the content library",
    ),
    pages: int = typer.Option(
        1,
        "--pages",
        "-p",
        min=1,
        help="Number of listing pages to load (default: 1)",
    ),
    all_pages: bool = typer.Option(
        False,
        "--all-pages",
        help="Load every page of the index (overrides --pages)",
    ),
    limit: int = typer.Option(
        0,
        "--limit",
        "-l",
        min=0,
        help="Maximum videos a run would enrich (0 = no limit)",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Include videos that already have metadata",
    ),
) -> None:
    """
    Show which videos a run would enrich, without changing anything.

    Ingestion statuses are checked the same way a run checks them.

    Examples:
        videotags enrich preview
        videotags enrich preview --pages 2
        videotags enrich preview --ads --all-pages --force
    """
    try:
        resolved_index_id = _resolve_index_id(index_id, ads=ads)
        scheduler = container.create_scheduler(resolved_index_id)
        client = container.twelvelabs_client
    except ConfigurationError as e:
        _render_configuration_error(e)
        raise typer.Exit(EXIT_CODE_CONFIGURATION_ERROR)

    page_count = None if all_pages else pages

    async def load() -> list[VideoRecord]:
        try:
            records = await _load_pages(client, resolved_index_id, page_count)
            return await scheduler.apply_statuses(records)
        finally:
            await client.close()

    try:
        records = asyncio.run(load())
    except KeyboardInterrupt:
        console.print("\n[yellow]Preview interrupted by user[/yellow]")
        raise typer.Exit(EXIT_CODE_INTERRUPTED)
    except TwelveLabsAPIError as e:
        _render_api_error(e)
        raise typer.Exit(EXIT_CODE_API_ERROR)

    selected = set(scheduler.preview(records, force=force, limit=limit or None))

    table = Table(title=f"Videos in {resolved_index_id}", show_header=True)
    table.add_column("Video ID", style="cyan")
    table.add_column("Title")
    table.add_column("Action")
    for record in records:
        if record.id in selected:
            action = "[green]enrich[/green]"
        elif scheduler.require_ready_status and record.is_indexing:
            action = "[dim]indexing[/dim]"
        else:
            action = "[dim]skip[/dim]"
        table.add_row(record.id, record.title or UNTITLED_VIDEO, action)
    console.print(table)

    console.print(
        Panel(
            f"[yellow]DRY RUN[/yellow] - No changes were made\n\n"
            f"Videos loaded: [cyan]{len(records)}[/cyan]\n"
            f"Videos that would be enriched: [cyan]{len(selected)}[/cyan]",
            title="Preview Summary",
            border_style="yellow",
        )
    )
