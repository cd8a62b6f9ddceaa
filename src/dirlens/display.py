"""Rich terminal display for dirlens."""

import time

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from dirlens.models import (
    Bucket,
    DirectoryEntry,
    DuplicatePage,
    FileRef,
    InstalledApp,
    ScanResult,
    format_size,
)

console = Console()

BUCKET_COLORS = {
    Bucket.IMAGES: "magenta",
    Bucket.VIDEOS: "red",
    Bucket.AUDIO: "cyan",
    Bucket.DOCS: "blue",
    Bucket.APPS: "green",
    Bucket.OTHERS: "white",
}


def format_time(timestamp: float) -> str:
    """Format an epoch timestamp as local date and time."""
    if not timestamp:
        return "-"
    return time.strftime("%Y-%m-%d %H:%M", time.localtime(timestamp))


def show_listing(path: str, entries: list[DirectoryEntry]) -> None:
    """Display a directory listing, directories first."""
    table = Table(title=path, show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Size", justify="right")
    table.add_column("Modified")

    ordered = sorted(entries, key=lambda e: (not e.is_directory, e.name.lower()))
    for entry in ordered:
        name = f"[bold blue]{entry.name}/[/bold blue]" if entry.is_directory else entry.name
        if entry.read_error:
            table.add_row(f"{name} [red](unreadable)[/red]", "-", "-")
            continue
        size = "" if entry.is_directory else format_size(entry.size)
        table.add_row(name, size, format_time(entry.modified_at))

    console.print(table)
    if not entries:
        console.print("[dim]Empty directory[/dim]")


def _file_table(title: str, files: list[FileRef], show_time: bool = False) -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Size", justify="right")
    if show_time:
        table.add_column("Modified")
    table.add_column("Path")
    for ref in files:
        if show_time:
            table.add_row(ref.size_human, format_time(ref.modified_at), ref.path)
        else:
            table.add_row(ref.size_human, ref.path)
    return table


def show_scan(result: ScanResult) -> None:
    """Display a subtree scan summary."""
    table = Table(title="Categories", show_header=True, header_style="bold")
    table.add_column("Category")
    table.add_column("Files", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Share", justify="right")

    for bucket, totals in result.categories.items():
        color = BUCKET_COLORS.get(bucket, "white")
        share = totals.size / result.total_size * 100 if result.total_size else 0
        table.add_row(
            f"[{color}]{bucket.value}[/{color}]",
            str(totals.count),
            format_size(totals.size),
            f"{share:.0f}%",
        )
    console.print(table)
    console.print()

    if result.large_files:
        console.print(_file_table("Large Files", result.large_files))
        console.print()
    if result.recent_files:
        console.print(_file_table("Recently Modified", result.recent_files, show_time=True))
        console.print()

    summary = (
        f"[bold]Total:[/bold] {result.total_size_human} in {result.file_count} files, "
        f"{result.dir_count} folders\n"
        f"[bold]Redundant:[/bold] {result.redundant_count} files, "
        f"{format_size(result.redundant_size)}\n"
        f"[bold]Duplicates:[/bold] {result.duplicate_group_count} groups, "
        f"{result.duplicate_count} files, {format_size(result.duplicate_size)} reclaimable"
    )
    if result.skipped_dirs:
        summary += f"\n[yellow]Skipped {result.skipped_dirs} unreadable folders[/yellow]"
    console.print(Panel(summary, title=result.root, border_style="blue"))
    console.print(f"[dim]Scan id: {result.scan_id}[/dim]")


def show_duplicate_page(page: DuplicatePage) -> None:
    """Display one page of duplicate groups."""
    if not page.groups:
        console.print(f"[yellow]No duplicate groups on page {page.page} (total {page.total}).[/yellow]")
        return

    first = page.page * page.page_size
    for offset, group in enumerate(page.groups):
        console.print(f"[bold]Group {first + offset + 1}[/bold] ({len(group)} copies)")
        for path in group:
            console.print(f"  • {path}")
    last = first + len(page.groups)
    console.print(f"\n[dim]Groups {first + 1}-{last} of {page.total}[/dim]")


def show_search(query: str, entries: list[DirectoryEntry]) -> None:
    """Display search matches."""
    if not entries:
        console.print(f"[yellow]Nothing matches '{query}'.[/yellow]")
        return
    table = Table(title=f"Matches for '{query}'", show_header=True, header_style="bold")
    table.add_column("Size", justify="right")
    table.add_column("Path")
    for entry in entries:
        table.add_row("" if entry.is_directory else format_size(entry.size), entry.path)
    console.print(table)


def show_apps(apps: list[InstalledApp]) -> None:
    """Display installed applications."""
    table = Table(title="Installed Applications", show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Version")
    table.add_column("Size", justify="right")
    table.add_column("Location")

    for app in apps:
        table.add_row(
            app.name,
            app.version,
            format_size(app.size) if app.size else "-",
            app.install_location or "",
        )

    console.print(table)
    console.print(f"[dim]{len(apps)} applications[/dim]")


def show_scanning_progress() -> Progress:
    """Create a spinner for long-running scans."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
