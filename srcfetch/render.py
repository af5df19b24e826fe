"""
Rendering functions for srcfetch output.

This module handles all pretty-printing and table formatting.
Core functions return data, this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import List, Dict, Any
from pathlib import Path

console = Console()


def _short_path(path: str) -> str:
    if not path:
        return ""
    p = Path(path)
    return f".../{p.parent.name}/{p.name}"


def render_fetch_table(results: List[Dict[str, Any]]) -> None:
    """
    Render package fetch results as a pretty table.

    Args:
        results: List of FetchResult dictionaries
    """
    if not results:
        console.print("[yellow]No packages requested.[/yellow]")
        return

    table = Table(
        title="Package Sources",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )

    table.add_column("Package", style="cyan")
    table.add_column("Version", style="blue")
    table.add_column("Status", style="yellow")
    table.add_column("Path", style="dim")

    for result in results:
        if not result.get('success'):
            status = "[red]❌ Failed[/red]"
        elif result.get('error'):
            status = "[yellow]⚠️ Fetched with warning[/yellow]"
        else:
            status = "[green]✅ Fetched[/green]"

        table.add_row(
            result.get('package', 'Unknown'),
            result.get('version') or '-',
            status,
            _short_path(result.get('path', '')),
        )

    console.print(table)

    # Print problems if any
    problems = [r for r in results if r.get('error')]
    if problems:
        console.print("\n[red]Messages:[/red]")
        for result in problems:
            mark = "[yellow]⚠[/yellow]" if result.get('success') else "[red]✗[/red]"
            console.print(f"  {mark} {result.get('package', 'Unknown')}: {result['error']}")

    print_fetch_summary(results)


def print_fetch_summary(results: List[Dict[str, Any]]) -> None:
    """Print summary statistics for a fetch batch."""
    succeeded = sum(1 for r in results if r.get('success'))
    failed = len(results) - succeeded

    console.print("\n[bold]Summary:[/bold]")
    console.print(f"  Total packages: {len(results)}")
    if succeeded:
        console.print(f"  [green]Succeeded: {succeeded}[/green]")
    if failed:
        console.print(f"  [red]Failed: {failed}[/red]")


def render_sources_table(sources: List[Dict[str, Any]]) -> None:
    """
    Render the packages currently in the store.

    Args:
        sources: List of SourceEntry dictionaries
    """
    if not sources:
        console.print("[yellow]No package sources fetched yet.[/yellow]")
        return

    table = Table(
        title="Fetched Sources",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )

    table.add_column("Package", style="cyan")
    table.add_column("Version", style="blue")
    table.add_column("Monorepo Path", style="dim")
    table.add_column("Fetched", style="dim")

    for source in sources:
        table.add_row(
            source.get('name', ''),
            source.get('version', ''),
            source.get('repoDirectory') or '',
            (source.get('fetchedAt') or '')[:10],
        )

    console.print(table)
