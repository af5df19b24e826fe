"""
Handles the 'fetch' command for fetching package sources.

This command follows our design principles:
- Default output is JSONL streaming, one FetchResult per package
- --table flag for human-readable table output
- Progress and per-package status on stderr
"""

import signal
import sys
import threading
from contextlib import contextmanager
from typing import Optional

import click

from ..render import render_fetch_table
from ..cli_utils import standard_command, add_common_options, resolve_table
from ..exit_codes import CommandError, PartialSuccessError, GENERAL_ERROR
from ..services.fetch_service import FetchService, FetchOptions
from ..settings import FileModificationPolicy


def confirm_file_modifications() -> Optional[bool]:
    """Ask whether project files may be edited; None when not interactive."""
    if not sys.stdin.isatty():
        return None
    click.echo("\nsrcfetch can update the following files for better integration:", err=True)
    click.echo("  • .gitignore - add the store directory to the ignore list", err=True)
    click.echo("  • tsconfig.json - exclude the store directory from compilation", err=True)
    click.echo("  • AGENTS.md - add a source code reference section\n", err=True)
    return click.confirm("Allow srcfetch to modify these files?", default=False, err=True)


@contextmanager
def cancel_on_interrupt(event: threading.Event, progress):
    """
    First Ctrl+C stops the batch after the current package; a second one
    interrupts immediately.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def handler(signum, frame):
        if event.is_set():
            raise KeyboardInterrupt
        event.set()
        progress.warning("Stopping after the current package (Ctrl+C again to abort)")

    previous = signal.signal(signal.SIGINT, handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


@click.command("fetch")
@click.argument("packages", nargs=-1, required=True)
@click.option("--modify/--no-modify", "modify", default=None,
              help="Allow or deny edits to .gitignore, tsconfig.json and AGENTS.md (saved for next time)")
@click.option("--latest", is_flag=True, help="Ignore installed versions, fetch latest unless a version is given")
@add_common_options('cwd', 'table', 'format', 'verbose', 'quiet')
@standard_command
def fetch_handler(packages, modify, latest, cwd, table, progress, quiet, config=None, **kwargs):
    """
    Fetch the source code of npm packages into the project.

    PACKAGES are npm package specifiers. Without a version, the version
    installed in the project is used, or the latest release.

    \b
    Examples:
        srcfetch fetch zod                      # Installed or latest version
        srcfetch fetch react@18.2.0             # Specific version
        srcfetch fetch @babel/core@7.24.0       # Scoped package
        srcfetch fetch zod --no-modify          # Never touch project files
    """
    service = FetchService(project_dir=cwd, config=config)
    cancel_event = threading.Event()
    options = FetchOptions(
        file_policy=FileModificationPolicy.from_flag(modify),
        prompt=confirm_file_modifications,
        detect_installed=not latest,
        cancel_event=cancel_event,
    )

    with cancel_on_interrupt(cancel_event, progress):
        summary = yield from service.fetch_packages(list(packages), options)

    results = [r.to_dict() for r in summary.results]
    if resolve_table(table):
        render_fetch_table(results)
    elif not quiet:
        yield from results

    if summary.failed and summary.successful:
        raise PartialSuccessError(
            f"{summary.failed} of {summary.total} packages failed",
            succeeded=summary.successful,
            failed=summary.failed,
        )
    if summary.failed:
        raise CommandError(f"All {summary.total} packages failed", GENERAL_ERROR)
