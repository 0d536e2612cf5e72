"""
Main CLI application for Refinery.

Provides the command-line interface for:
- Extracting the main text of an HTML file
- Inspecting the annotated document tree
- Managing configuration
"""

import sys
from pathlib import Path
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from refinery import __version__
from refinery.cli.tree_view import render_tree
from refinery.config import Settings, get_default_config_path, load_config
from refinery.core.exceptions import ConfigurationError, RefineryError
from refinery.extraction import ContentExtractor, ExtractionResult
from refinery.utils.logging import get_logger, get_logger_with_context, setup_logging
from refinery.utils.metrics import Metrics

app = typer.Typer(
    name="refinery",
    help="Refinery - Extract the main text content of HTML documents",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)
logger = get_logger(__name__)


class State:
    """Options from the callback shared with the commands."""

    config_file: Optional[Path] = None


state = State()


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]Refinery[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
        exists=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable verbose logging",
    ),
) -> None:
    """
    Refinery - Extract the main text of HTML documents.

    Use 'refinery --help' for command list.
    """
    state.config_file = config_file or get_default_config_path()
    settings = _load_settings()
    setup_logging(settings.logging, level="DEBUG" if verbose else None)


def _load_settings() -> Settings:
    try:
        return load_config(state.config_file)
    except ConfigurationError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def extract(
    source: str = typer.Argument(
        ...,
        help="HTML file to extract from, or '-' for stdin",
    ),
    tree: bool = typer.Option(
        False,
        "--tree",
        "-t",
        help="Show the annotated document tree",
    ),
    show_excluded: bool = typer.Option(
        True,
        "--show-excluded/--hide-excluded",
        help="Draw excluded subtrees in the tree view",
    ),
    max_depth: Optional[int] = typer.Option(
        None,
        "--max-depth",
        "-d",
        help="Maximum depth drawn in the tree view",
        min=1,
    ),
    info: bool = typer.Option(
        False,
        "--info",
        "-i",
        help="Show document statistics",
    ),
    encoding: str = typer.Option(
        "utf-8",
        "--encoding",
        "-e",
        help="Encoding of the input file",
    ),
) -> None:
    """
    Extract the main text content of an HTML document.

    Examples:
        refinery extract article.html
        curl -s https://example.com | refinery extract - --info
    """
    log = get_logger_with_context(__name__, source=source)
    html = _read_source(source, encoding)
    settings = _load_settings()
    extractor = ContentExtractor(settings.extractor)

    try:
        result = extractor.extract_html(html)
    except RefineryError as e:
        log.warning(f"Extraction failed: {e}")
        err_console.print(f"[red]Extraction failed:[/red] {e}")
        raise typer.Exit(1)

    log.info(f"Extracted {result.word_count} of {result.info.words} words")
    logger.debug(Metrics.get().summary())

    if tree:
        err_console.print(render_tree(result, show_excluded=show_excluded, max_depth=max_depth))
    if info:
        _show_info(result)

    # Plain print so the text can be piped without rich markup
    typer.echo(result.text)


def _read_source(source: str, encoding: str) -> str:
    if source == "-":
        return sys.stdin.read()

    path = Path(source)
    if not path.is_file():
        err_console.print(f"[red]File not found:[/red] {source}")
        raise typer.Exit(1)
    return path.read_text(encoding=encoding, errors="replace")


def _show_info(result: ExtractionResult) -> None:
    """Print document statistics."""
    doc = result.info
    table = Table(title="Document", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Title", doc.title or "[dim]none[/dim]")
    table.add_row("Heading found", "yes" if doc.has_title else "no")
    table.add_row("Words", f"{doc.words:,}")
    table.add_row("Words extracted", f"{result.word_count:,}")
    table.add_row("Tags", f"{doc.tag_count:,}")
    table.add_row("Height", str(doc.height))
    table.add_row("Links", f"{len(doc.links):,}")
    table.add_row("Anchor words", f"{doc.anchor_words:,}")
    table.add_row("Media", f"{doc.media:,}")
    table.add_row(
        "Candidate",
        f"<{result.candidate.name}> #{result.candidate_id}"
        + (" (whole document)" if result.is_whole_document else ""),
    )
    table.add_row("Excluded nodes", str(result.excluded))
    for stage, duration_ms in result.timings.items():
        table.add_row(f"Time: {stage}", f"{duration_ms:.2f}ms")

    err_console.print(table)


@app.command()
def config(
    show: bool = typer.Option(
        False,
        "--show",
        "-s",
        help="Show current configuration",
    ),
    init: bool = typer.Option(
        False,
        "--init",
        help="Create default configuration file",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output path for config file",
    ),
) -> None:
    """
    Configuration management.

    View or initialize configuration files.

    Examples:
        refinery config --show
        refinery config --init --output ./refinery.yaml
    """
    if init:
        _init_config(output)
    elif show:
        _show_config()
    else:
        console.print(
            "Use --show to view config or --init to create default config")


def _show_config() -> None:
    """Show current configuration."""
    settings = _load_settings()
    config_dict = settings.model_dump(mode="json")

    console.print(Panel(
        "[bold]Current Configuration[/bold]",
        border_style="blue",
    ))
    if state.config_file:
        console.print(f"[dim]Loaded from {state.config_file}[/dim]")

    for section, values in config_dict.items():
        console.print(f"\n[bold cyan]{section}:[/bold cyan]")
        if isinstance(values, dict):
            for key, value in values.items():
                console.print(f"  {key}: [dim]{value}[/dim]")
        else:
            console.print(f"  {values}")


def _init_config(output: Optional[Path]) -> None:
    """Create default configuration file."""
    config_dict = Settings().model_dump(mode="json")

    output_path = output or Path("refinery.yaml")

    if output_path.exists():
        if not typer.confirm(f"File {output_path} exists. Overwrite?"):
            raise typer.Exit(0)

    with open(output_path, "w", encoding="utf-8") as f:
        yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)

    console.print(f"[green]✓[/green] Configuration saved to: {output_path}")


if __name__ == "__main__":
    app()
