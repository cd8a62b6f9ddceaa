"""CLI interface for dirlens."""

import asyncio
import logging
from typing import Optional

import typer
from rich.logging import RichHandler

from dirlens import __version__
from dirlens.config import load_settings
from dirlens.display import (
    console,
    show_apps,
    show_duplicate_page,
    show_listing,
    show_scan,
    show_scanning_progress,
    show_search,
)
from dirlens.errors import DirlensError
from dirlens.index import FileIndex

app = typer.Typer(
    name="dirlens",
    help="Cached directory listings and disk usage statistics",
    add_completion=False,
)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"dirlens version {__version__}")
        raise typer.Exit()


def _get_index() -> FileIndex:
    return FileIndex(load_settings())


def _fail(error: DirlensError) -> None:
    console.print(f"[red]Error: {error}[/red]")
    raise typer.Exit(1)


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """dirlens - cached directory listings and disk usage statistics."""
    _setup_logging(verbose)


@app.command(name="ls")
def list_cmd(
    path: str = typer.Argument(".", help="Directory to list"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
) -> None:
    """List a directory."""
    index = _get_index()
    try:
        entries = asyncio.run(index.list_directory(path))
    except DirlensError as e:
        _fail(e)

    if as_json:
        console.print_json(data=[entry.model_dump() for entry in entries])
    else:
        show_listing(path, entries)


@app.command()
def scan(
    path: str = typer.Argument(".", help="Directory to analyze"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of tables"),
) -> None:
    """Analyze disk usage of a directory tree."""
    index = _get_index()
    try:
        with show_scanning_progress() as progress:
            progress.add_task(f"Scanning {path}...", total=None)
            result = asyncio.run(index.scan_subtree(path))
    except DirlensError as e:
        _fail(e)

    if as_json:
        console.print_json(result.model_dump_json())
    else:
        show_scan(result)


@app.command()
def dupes(
    path: str = typer.Argument(".", help="Directory to analyze"),
    page: int = typer.Option(0, "--page", "-p", min=0, help="Zero-based page number"),
    page_size: int = typer.Option(50, "--page-size", "-n", min=1, help="Groups per page"),
) -> None:
    """Show duplicate files (same name and size), page by page."""
    index = _get_index()
    try:
        with show_scanning_progress() as progress:
            progress.add_task(f"Scanning {path}...", total=None)
            result = asyncio.run(index.scan_subtree(path))
    except DirlensError as e:
        _fail(e)

    show_duplicate_page(index.get_duplicate_page(page, page_size, result.scan_id))


@app.command()
def find(
    path: str = typer.Argument(..., help="Directory to search"),
    query: str = typer.Argument(..., help="Text the name must contain"),
    limit: int = typer.Option(50, "--limit", "-l", min=1, help="Maximum matches"),
) -> None:
    """Find files and folders by name."""
    index = _get_index()
    try:
        entries = asyncio.run(index.search(path, query, limit))
    except DirlensError as e:
        _fail(e)

    show_search(query, entries)


@app.command()
def apps(
    force: bool = typer.Option(False, "--force", "-f", help="Rescan instead of using the cache"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
) -> None:
    """List installed applications (cached across runs)."""
    asyncio.run(_list_apps(_get_index(), force, as_json))


async def _list_apps(index: FileIndex, force: bool, as_json: bool) -> None:
    installed = await index.get_installed_apps(force=force)
    if as_json:
        console.print_json(data=[a.model_dump() for a in installed])
    else:
        show_apps(installed)

    # A stale list was shown; finish the refresh so the next run is fresh
    if index.apps.refreshing:
        if not as_json:
            console.print("[dim]Refreshing application cache...[/dim]")
        await asyncio.gather(index.apps.start_refresh(), return_exceptions=True)


if __name__ == "__main__":
    app()
