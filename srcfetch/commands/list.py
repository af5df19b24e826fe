"""
Handles the 'list' command: show package sources in the store.
"""

import click

from ..cli_utils import standard_command, add_common_options, resolve_table
from ..domain.operation import ProgressMessage
from ..render import render_sources_table
from ..services.fetch_service import FetchService


@click.command("list")
@add_common_options('cwd', 'table', 'format', 'verbose', 'quiet')
@standard_command
def list_handler(cwd, table, config=None, **kwargs):
    """
    List package sources fetched into the project.

    \b
    Examples:
        srcfetch list                # Table in a terminal, JSONL when piped
        srcfetch list -f json        # Single JSON array
    """
    service = FetchService(project_dir=cwd, config=config)
    sources = service.list_sources()
    yield ProgressMessage(f"{len(sources)} package(s) in {service.store.root}")

    if resolve_table(table):
        render_sources_table([s.to_dict() for s in sources])
        return

    for source in sources:
        yield source.to_dict()
