"""ps-style report formatter for rps.

Builds one fixed-width row per process under a single header line:

    HOST            USER       PID %CPU %MEM    VSZ    RSS TTY      STAT START   TIME COMMAND
    web01           root          1 0.0  0.1 168000  12000 ?        Ss   09:12    0:05 /sbin/init

Column widths are part of the output contract; scripts that grep or cut
the report rely on them.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime

from rps.formatters.base import ReportFormatter
from rps.formatters.fields import format_command, format_user
from rps.formatters.stat import state_of
from rps.formatters.times import format_elapsed, format_start
from rps.formatters.tty import resolve_tty
from rps.models.base import ProcessSnapshot, ProcessTable

HEADER = "HOST            USER       PID %CPU %MEM    VSZ    RSS TTY      STAT START   TIME COMMAND"

ROW_FORMAT = (
    "{host:<15} {user:<8} {pid:>6} {cpu:>3}  {mem:>3} {vsz:>6} {rss:>6} "
    "{tty:<8} {stat:<4} {start:<7} {time:>5} {command}"
)


@dataclass(frozen=True, slots=True)
class RenderedRow:
    """Display values for one process, before padding."""

    host: str
    user: str
    pid: int
    cpu: str
    mem: str
    vsz: int
    rss: int
    tty: str
    stat: str
    start: str
    time: str
    command: str

    def as_dict(self) -> dict[str, str | int]:
        return {
            "host": self.host,
            "user": self.user,
            "pid": self.pid,
            "cpu": self.cpu,
            "mem": self.mem,
            "vsz": self.vsz,
            "rss": self.rss,
            "tty": self.tty,
            "stat": self.stat,
            "start": self.start,
            "time": self.time,
            "command": self.command,
        }


def render_process(host: str, proc: ProcessSnapshot, now: datetime | None = None) -> RenderedRow:
    """Derive every display column for one process.

    Args:
        host: Value for the HOST column
        proc: The process snapshot
        now: Evaluation time for the START column

    Returns:
        RenderedRow with all columns as display values
    """
    return RenderedRow(
        host=host,
        user=format_user(proc.user_name),
        pid=proc.pid,
        cpu=proc.cpu_percent,
        mem=proc.mem_percent,
        vsz=proc.virtual_size_bytes,
        rss=proc.resident_set_bytes,
        tty=resolve_tty(proc.tty_device_number),
        stat=state_of(proc),
        start=format_start(proc.start_time_unix, now),
        time=format_elapsed(proc.cpu_time_unix),
        command=format_command(proc.command_args, proc.process_name),
    )


def build_row(host: str, proc: ProcessSnapshot, now: datetime | None = None) -> str:
    """Render one process as a fixed-width report line (no newline)."""
    return ROW_FORMAT.format(**render_process(host, proc, now).as_dict())


class PsFormatter(ReportFormatter):
    """Fixed-width text report compatible with ``ps aux`` column layout."""

    name: str = "ps"
    display_name: str = "ps Report"
    cli_flag: str = ""

    def iter_lines(
        self,
        tables: Sequence[ProcessTable],
        now: datetime | None = None,
    ) -> Iterator[str]:
        """Yield the header followed by one line per process.

        Hosts are emitted in the order given; processes in agent order.
        """
        if now is None:
            now = datetime.now().astimezone()
        yield HEADER
        for table in tables:
            for proc in table.processes:
                yield build_row(table.hostname, proc, now)

    def format(self, tables: Sequence[ProcessTable], now: datetime | None = None) -> str:
        return "\n".join(self.iter_lines(tables, now))
