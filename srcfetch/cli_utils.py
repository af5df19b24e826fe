"""
Shared plumbing for srcfetch commands.

A command handler is a generator. It yields ProgressMessage items, which
go to the progress reporter on stderr, and dict records, which are
formatted onto stdout. Errors raised by the handler become an exit code
plus a JSON error record.
"""

import sys
from functools import wraps
from typing import Any, Dict, Iterable, Iterator, List, Optional

import click

from .config import load_config, configure_logging
from .domain.operation import ProgressMessage
from .exit_codes import SUCCESS, INTERRUPTED, CommandError, get_exit_code_for_exception
from .format_utils import format_output, get_format_from_env, FORMATS
from .progress import ProgressReporter, get_progress


def resolve_table(table: Optional[bool]) -> bool:
    """Table output when asked for, otherwise only on a terminal."""
    return sys.stdout.isatty() if table is None else table


def error_record(exc: Exception) -> Dict[str, Any]:
    record = {"error": str(exc), "type": type(exc).__name__, "exit_code": get_exit_code_for_exception(exc)}
    # PartialSuccessError
    if hasattr(exc, 'succeeded'):
        record['succeeded'] = exc.succeeded
        record['failed'] = exc.failed
    return record


def _data_records(stream: Optional[Iterable], progress: ProgressReporter) -> Iterator[Dict[str, Any]]:
    """Send progress messages to the reporter and pass data records on."""
    for item in stream or ():
        if isinstance(item, ProgressMessage):
            progress.report(item)
        else:
            yield item


def _emit(records: List[Dict[str, Any]], output_format: str):
    for line in format_output(iter(records), output_format):
        click.echo(line)


def standard_command(func):
    """
    Run a generator command handler with srcfetch's standard behavior.

    Injects `config` and `progress` into the handler's kwargs and honors
    the common --verbose, --quiet and --format options. JSONL records are
    written as they arrive; json and yaml are written once the handler
    finishes, including when it fails part way.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        quiet = kwargs.get('quiet', False)
        output_format = kwargs.get('format') or get_format_from_env('jsonl')

        config = load_config()
        configure_logging(config, verbose=kwargs.get('verbose', False))
        progress = get_progress(enabled=True if kwargs.get('verbose') else None)
        kwargs['config'] = config
        kwargs['progress'] = progress

        pending = []
        exit_code = SUCCESS
        try:
            for record in _data_records(func(*args, **kwargs), progress):
                if quiet:
                    continue
                if output_format == 'jsonl':
                    _emit([record], output_format)
                else:
                    pending.append(record)
        except click.ClickException:
            raise
        except KeyboardInterrupt:
            progress.error("Interrupted by user")
            exit_code = INTERRUPTED
        except Exception as e:
            exit_code = get_exit_code_for_exception(e)
            progress.error(str(e) if isinstance(e, CommandError) else f"Command failed: {e}")
            if not quiet:
                if pending:
                    _emit(pending, output_format)
                    pending = []
                _emit([error_record(e)], 'jsonl')

        if pending:
            _emit(pending, output_format)
        sys.exit(exit_code)

    return wrapper


common_options = {
    'verbose': click.option('-v', '--verbose', is_flag=True,
                            help='Show progress even when stderr is not a terminal'),
    'quiet': click.option('-q', '--quiet', is_flag=True,
                          help='Suppress data output, show only progress'),
    'format': click.option('-f', '--format', type=click.Choice(list(FORMATS)),
                           help='Output format (default: jsonl, or from SRCFETCH_FORMAT env)'),
    'cwd': click.option('--cwd', type=click.Path(file_okay=False),
                        help='Project directory (default: current directory)'),
    'table': click.option('--table/--no-table', default=None,
                          help='Render a table instead of JSON (default: when stdout is a terminal)'),
}


def add_common_options(*option_names):
    """
    Attach shared options by name.

    Example:
        @add_common_options('cwd', 'verbose', 'quiet')
        def list_handler(cwd, verbose, quiet, ...):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            func = common_options[name](func)
        return func
    return decorator
