#!/usr/bin/env python3

import click

from srcfetch.commands.fetch import fetch_handler
from srcfetch.commands.list import list_handler
from srcfetch.commands.remove import remove_handler


@click.group()
@click.version_option(package_name="srcfetch")
def cli():
    """srcfetch - Fetch the source code of npm packages into your project.

    Sources land in ./srcfetch/ next to an index (sources.json) so that
    coding agents can read the real implementation of your dependencies.
    """
    pass


cli.add_command(fetch_handler, name='fetch')
cli.add_command(list_handler, name='list')
cli.add_command(remove_handler, name='remove')


def main():
    cli()

if __name__ == "__main__":
    main()
