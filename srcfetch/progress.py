"""
Progress reporting for srcfetch.

Fetch progress goes to stderr so stdout stays clean for JSON data. Each
line carries its MessageLevel, which decides the prefix and color.
"""

import os
import sys
from typing import Optional

from .domain.operation import MessageLevel, ProgressMessage

RESET = '\033[0m'

# (prefix, ANSI color) per level; DETAIL lines are indented under their package
_STYLES = {
    MessageLevel.STEP: ("", None),
    MessageLevel.DETAIL: ("  ", '\033[2m'),
    MessageLevel.SUCCESS: ("  ✓ ", '\033[32m'),
    MessageLevel.WARNING: ("  ⚠ ", '\033[33m'),
    MessageLevel.ERROR: ("  ✗ ", '\033[31m'),
}


class ProgressReporter:
    """Writes fetch progress to stderr while keeping stdout clean for data."""

    def __init__(self, enabled: Optional[bool] = None, use_colors: Optional[bool] = None):
        """
        Initialize progress reporter.

        Args:
            enabled: Explicitly enable/disable progress. None = stderr is a terminal
            use_colors: Use ANSI colors. None = terminal without NO_COLOR
        """
        tty = sys.stderr.isatty()
        self.enabled = tty if enabled is None else enabled
        if use_colors is None:
            use_colors = tty and os.environ.get('NO_COLOR') is None
        self.use_colors = use_colors

    def _write(self, text: str, color: Optional[str]):
        if self.use_colors and color:
            text = f"{color}{text}{RESET}"
        print(text, file=sys.stderr, flush=True)

    def report(self, message: ProgressMessage):
        """Show a progress message, styled by its level."""
        if not self.enabled:
            return
        prefix, color = _STYLES[message.level]
        self._write(f"{prefix}{message.text}", color)

    def __call__(self, text: str, level: MessageLevel = MessageLevel.STEP):
        self.report(ProgressMessage(text, level))

    def warning(self, text: str):
        self.report(ProgressMessage.warning(text))

    def error(self, text: str):
        """Errors are shown even when progress is disabled."""
        self._write(f"ERROR: {text}", _STYLES[MessageLevel.ERROR][1])


def get_progress(enabled: Optional[bool] = None) -> ProgressReporter:
    """
    Build the reporter for a command run.

    SRCFETCH_PROGRESS=0 or 1 overrides terminal detection; an explicit
    enabled=True (from --verbose) wins over both.
    """
    if enabled is None:
        setting = os.environ.get('SRCFETCH_PROGRESS')
        if setting in ('0', '1'):
            enabled = setting == '1'
    return ProgressReporter(enabled)
