"""
Handles the 'remove' command: delete package sources from the store.
"""

import click

from ..cli_utils import standard_command, add_common_options
from ..exit_codes import NothingFoundError
from ..services.fetch_service import FetchService, FetchOptions
from ..settings import FileModificationPolicy
from .fetch import confirm_file_modifications


@click.command("remove")
@click.argument("names", nargs=-1, required=True)
@click.option("--modify/--no-modify", "modify", default=None,
              help="Allow or deny updating AGENTS.md (saved for next time)")
@add_common_options('cwd', 'format', 'verbose', 'quiet')
@standard_command
def remove_handler(names, modify, cwd, config=None, **kwargs):
    """
    Remove fetched package sources.

    \b
    Examples:
        srcfetch remove zod
        srcfetch remove @babel/core react
    """
    service = FetchService(project_dir=cwd, config=config)
    options = FetchOptions(
        file_policy=FileModificationPolicy.from_flag(modify),
        prompt=confirm_file_modifications,
    )

    removed = yield from service.remove_packages(list(names), options)

    if not removed:
        raise NothingFoundError("None of the given packages are in the store")

    for name in removed:
        yield {"package": name, "removed": True}
