"""Formatters package for rps.

The per-column formatters turn raw process snapshot fields into display
values:

- resolve_tty: TTY column (device number to terminal name)
- compose_state: STAT column (state code plus modifier flags)
- format_start / format_elapsed: START and TIME columns
- format_user / format_command: USER and COMMAND columns

Report formatters combine them into full output:

- PsFormatter: fixed-width ps-style report
- JsonFormatter: JSON document with the same columns
"""

from rps.formatters.base import ReportFormatter
from rps.formatters.fields import format_command, format_user
from rps.formatters.json_formatter import JsonFormatter
from rps.formatters.ps_formatter import HEADER, PsFormatter, build_row, render_process
from rps.formatters.stat import compose_state
from rps.formatters.times import format_elapsed, format_start
from rps.formatters.tty import resolve_tty

__all__ = [
    "HEADER",
    "JsonFormatter",
    "PsFormatter",
    "ReportFormatter",
    "build_row",
    "compose_state",
    "format_command",
    "format_elapsed",
    "format_start",
    "format_user",
    "render_process",
    "resolve_tty",
]
