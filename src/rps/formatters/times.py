"""START and TIME columns.

START shows a clock time for processes started today and a month/day
date for anything older. TIME shows accumulated CPU time as M:SS.
"""

from datetime import datetime, timedelta


def _local_now() -> datetime:
    """Return the current local time as a timezone-aware datetime."""
    return datetime.now().astimezone()


def start_of_day(now: datetime) -> datetime:
    """Truncate ``now`` to the hour, then step back by its hour of day."""
    hour = now.replace(minute=0, second=0, microsecond=0)
    return hour - timedelta(hours=now.hour)


def format_start(start_time_unix: int, now: datetime | None = None) -> str:
    """Format a process start time for the START column.

    Args:
        start_time_unix: Start time in seconds since the epoch
        now: Evaluation time (defaults to the current local time). It is
            converted to local time; naive values are taken as local.

    Returns:
        ``HH:MM`` for processes started since local midnight, ``MM/DD``
        otherwise
    """
    now = _local_now() if now is None else now.astimezone()

    midnight = start_of_day(now)
    started = datetime.fromtimestamp(start_time_unix).astimezone()
    if start_time_unix < int(midnight.timestamp()):
        return started.strftime("%m/%d")
    return started.strftime("%H:%M")


def format_elapsed(cpu_time_unix: int) -> str:
    """Format CPU time for the TIME column as ``M:SS``.

    Only the minute and second of the value are rendered, so an hour of
    CPU time or more wraps around (3661 seconds renders as ``1:01``).
    """
    minutes, seconds = divmod(cpu_time_unix % 3600, 60)
    return f"{minutes}:{seconds:02d}"
