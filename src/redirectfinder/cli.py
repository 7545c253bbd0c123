"""
redirectfinder CLI - Command Line Interface

Entry point for running the resolution pipeline, exporting the proposed
redirects and delivering them to the site API.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from redirectfinder import __version__
from redirectfinder.core.config import Settings, load_settings
from redirectfinder.core.exceptions import RedirectFinderError
from redirectfinder.core.models import ResolutionSummary

# Create CLI app
app = typer.Typer(
    name="redirectfinder",
    help="redirectfinder - Propose redirects for broken product and catalog URLs",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for output
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _load(config: Optional[Path]) -> Settings:
    try:
        return load_settings(config)
    except RedirectFinderError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(code=1)


# ============================================================================
# Main Commands
# ============================================================================

@app.command()
def run(
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Custom configuration file",
        exists=True,
    ),
    skip_status_check: bool = typer.Option(
        False,
        "--skip-status-check",
        help="Resolve without probing the failing URLs first",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Verbose output",
    ),
) -> None:
    """
    Probe failing URLs and compute redirect proposals.

    The database is rebuilt from scratch on every run.
    """
    from redirectfinder.orchestrator.pipeline import ResolutionPipeline
    from redirectfinder.orchestrator.scheduler import BatchScheduler
    from redirectfinder.prober.prober import StatusProber
    from redirectfinder.prober.transport import HttpxTransport
    from redirectfinder.sources.loader import load_references, read_error_urls
    from redirectfinder.storage.database import Database

    _setup_logging(verbose)
    settings = _load(config)

    console.print(Panel.fit(
        f"[bold cyan]redirectfinder run[/bold cyan]\n\n"
        f"Errors: [yellow]{settings.data.errors_file}[/yellow]\n"
        f"Database: [green]{settings.data.db_path}[/green]\n"
        f"Status check: [magenta]{'off' if skip_status_check else 'on'}[/magenta]",
        title="Run Configuration",
    ))

    async def run_pipeline(db: Database, urls: list[str]) -> ResolutionSummary:
        async with HttpxTransport(user_agent=settings.http.user_agent) as transport:
            prober = StatusProber(
                transport,
                timeout=settings.http.timeout,
                max_redirects=settings.http.max_redirects,
            )
            pipeline = ResolutionPipeline(
                db,
                prober,
                scheduler=BatchScheduler(
                    settings.pipeline.concurrency,
                    pause=settings.pipeline.batch_pause,
                ),
                base_url=settings.pipeline.base_url,
            )

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                task = progress.add_task("[cyan]Checking URL statuses...", total=None)
                if skip_status_check:
                    db.upsert_urls(urls)
                else:
                    await pipeline.status_sweep(urls)

                progress.update(task, description="[cyan]Loading reference codes...")
                load_references(db, settings.data.products_file, settings.data.catalog_file)

                progress.update(task, description="[cyan]Resolving redirects...")
                summary = await pipeline.resolution_sweep()
                progress.update(task, description="[green]Resolution complete!")
                return summary

    try:
        urls = read_error_urls(settings.data.errors_file)
        with Database(settings.data.db_path) as db:
            db.reset()
            summary = asyncio.run(run_pipeline(db, urls))
            total_redirects = db.count_redirects()
    except RedirectFinderError as e:
        console.print(f"[red]Error during run:[/red] {e}")
        if verbose:
            console.print_exception()
        raise typer.Exit(code=1)

    table = Table(title="Resolution Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right", style="green")
    for name, value in summary.to_dict().items():
        table.add_row(name.replace("_", " ").capitalize(), str(value))
    console.print(table)

    console.print(f"[green]✓[/green] Redirects stored: {total_redirects}")


@app.command()
def export(
    min_percent: Optional[float] = typer.Option(
        None,
        "--min-percent",
        "-m",
        help="Minimum similarity to export (0-100)",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file path",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Custom configuration file",
        exists=True,
    ),
) -> None:
    """
    Export stored redirects above a similarity threshold to JSON.
    """
    from redirectfinder.reporting.exporter import RedirectExporter, percent_distribution
    from redirectfinder.storage.database import Database

    settings = _load(config)

    if not settings.data.db_path.exists():
        console.print("[red]Error:[/red] Database not found. Run 'redirectfinder run' first.")
        raise typer.Exit(code=1)

    if min_percent is None:
        min_percent = typer.prompt("Minimum similarity percent (0-100)", type=float)
    if not 0 <= min_percent <= 100:
        console.print("[red]Error:[/red] Minimum percent must be between 0 and 100")
        raise typer.Exit(code=1)

    output_path = output or settings.data.result_file

    try:
        with Database(settings.data.db_path) as db:
            db.init_db()
            records = db.query_redirects_by_min_percent(min_percent)
        written = RedirectExporter().export(records, output_path)
    except RedirectFinderError as e:
        console.print(f"[red]Error exporting redirects:[/red] {e}")
        raise typer.Exit(code=1)

    console.print(f"[green]✓[/green] Exported {written} redirects to {output_path}")

    distribution = percent_distribution(records)
    if distribution:
        table = Table(title="Similarity Distribution")
        table.add_column("Range", style="cyan")
        table.add_column("Redirects", justify="right", style="green")
        for bucket, count in distribution.items():
            table.add_row(bucket, str(count))
        console.print(table)


@app.command()
def send(
    input_file: Optional[Path] = typer.Option(
        None,
        "--input",
        "-i",
        help="Exported result file",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Custom configuration file",
        exists=True,
    ),
) -> None:
    """
    Send exported redirects to the site API (API_URL, API_KEY).
    """
    from redirectfinder.delivery.sender import ResultsSender
    from redirectfinder.reporting.exporter import RedirectExporter

    settings = _load(config)
    input_path = input_file or settings.data.result_file

    sender = ResultsSender(
        settings.delivery.api_url,
        settings.delivery.api_key,
        timeout=settings.delivery.timeout,
    )

    try:
        records = RedirectExporter().load(input_path)
        console.print(f"[cyan]Sending {len(records)} redirects...[/cyan]")
        report = asyncio.run(sender.send(records))
    except RedirectFinderError as e:
        console.print(f"[red]Error sending results:[/red] {e}")
        raise typer.Exit(code=1)

    console.print("[green]✓[/green] Results delivered")
    console.print(f"[blue]Created:[/blue] {report.created}")
    console.print(f"[blue]Updated:[/blue] {report.updated}")
    console.print(f"[blue]Total:[/blue] {report.total}")


@app.command()
def clean(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Custom configuration file",
        exists=True,
    ),
) -> None:
    """Delete the database and the exported result file."""
    settings = _load(config)

    db_path = settings.data.db_path
    targets = [
        db_path,
        db_path.with_name(db_path.name + "-wal"),
        db_path.with_name(db_path.name + "-shm"),
        settings.data.result_file,
    ]
    existing = [path for path in targets if path.exists()]

    if not existing:
        console.print("[yellow]Nothing to clean[/yellow]")
        return

    if not force:
        confirm = typer.confirm(f"Delete {len(existing)} file(s): {', '.join(map(str, existing))}?")
        if not confirm:
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(code=0)

    for path in existing:
        try:
            path.unlink()
        except OSError as e:
            console.print(f"[red]Error:[/red] Failed to delete {path}: {e}")
            raise typer.Exit(code=1)
        console.print(f"[green]✓[/green] Deleted {path}")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold cyan]redirectfinder[/bold cyan] version [yellow]{__version__}[/yellow]")


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


if __name__ == "__main__":
    main()
