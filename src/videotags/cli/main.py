"""
Main CLI entry point for videotags.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from videotags import __version__
from videotags.cli.commands.enrich import app as enrich_app
from videotags.exceptions import EXIT_CODE_CONFIGURATION_ERROR, ConfigurationError
from videotags.models.metadata import CATEGORY_FIELDS, metadata_to_tags
from videotags.services.hashtag_classifier import extract_hashtags

console = Console()

app = typer.Typer(
    name="videotags",
    help="Hashtag-based metadata enrichment for Twelve Labs video indexes",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Add subcommands
app.add_typer(enrich_app, name="enrich", help="Metadata enrichment commands")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(
        Panel(
            f"[bold blue]videotags[/bold blue] v{__version__}",
            title="Version",
            border_style="blue",
        )
    )


@app.command()
def classify(
    text: str = typer.Argument(
        ..., help="Generated hashtag text, e.g. '#male #tech #exciting'"
    ),
) -> None:
    """
    Classify hashtag text into metadata categories.

    Uses the configured keyword dictionary. Nothing is sent to the API.

    Examples:
        videotags classify "#female #beauty #calm #seoul #fentybeauty"
    """
    from videotags.container import container

    try:
        classifier = container.hashtag_classifier
    except ConfigurationError as e:
        console.print(
            Panel(
                f"[red]{e.message}[/red]",
                title="Configuration Required",
                border_style="red",
            )
        )
        raise typer.Exit(EXIT_CODE_CONFIGURATION_ERROR)

    metadata = classifier.classify(text)

    table = Table(title="Classified Metadata", show_header=True)
    table.add_column("Category", style="cyan")
    table.add_column("Value", style="green")
    for field in CATEGORY_FIELDS:
        value = getattr(metadata, field)
        table.add_row(field, value or "[dim]-[/dim]")
    console.print(table)

    hashtags = extract_hashtags(text)
    chips = metadata_to_tags(metadata.to_user_metadata())
    console.print(
        f"[dim]{len(hashtags)} hashtags, {len(chips)} categories filled[/dim]"
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit"
    ),
) -> None:
    """
    videotags - Hashtag-based metadata enrichment for video indexes.

    Asks Twelve Labs to describe each untagged video as hashtags, sorts
    the hashtags into metadata categories and stores them on the video.
    """
    if version:
        console.print(f"videotags v{__version__}")
        raise typer.Exit(code=0)

    if ctx.invoked_subcommand is None:
        console.print("[yellow]Use 'videotags --help' for available commands[/yellow]")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
