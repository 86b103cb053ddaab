"""Report runner for rps.

This module provides the implementation behind the CLI:
- Logging setup from the ``logging`` config section
- Concurrent fetching of every host's process table
- Output formatting and printing, in host-request order

A failure on any host ends the report at that host: the hosts ahead of
it (in request order) are printed, then the failing host is reported.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from datetime import datetime
import logging
from pathlib import Path
import sys
from typing import TextIO

import httpx
from rich.console import Console
from rich.logging import RichHandler

from rps import sentry
from rps.collectors.agent import AgentCollector, AgentConnectionError, AgentError
from rps.config import Config
from rps.formatters import JsonFormatter, PsFormatter, ReportFormatter
from rps.models.base import ProcessTable

console = Console(stderr=True)

logger = logging.getLogger(__name__)

# Delay between retry attempts, multiplied by the attempt number
RETRY_BASE_DELAY = 0.5


def configure_logging(config: Config, debug: bool = False) -> None:
    """Attach a log handler to the ``rps`` logger.

    Logs go to ``logging.file`` when set, otherwise to stderr through rich.
    Nothing is configured unless logging is enabled or ``debug`` is set.

    Args:
        config: Application configuration
        debug: Force DEBUG level logging to stderr
    """
    if not (config.logging.enabled or debug):
        return

    root = logging.getLogger("rps")
    level = logging.DEBUG if debug else getattr(logging, config.logging.level)
    root.setLevel(level)

    handler: logging.Handler
    if config.logging.file and not debug:
        path = Path(config.logging.file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path)
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    else:
        handler = RichHandler(console=console, show_path=False)

    root.handlers[:] = [handler]


def get_formatter(format_name: str, config: Config) -> ReportFormatter:
    """Get a report formatter by name.

    Args:
        format_name: The format name (ps, json)
        config: Application configuration

    Returns:
        Initialized formatter

    Raises:
        ValueError: If format is not recognized
    """
    formatter: ReportFormatter
    if format_name == "ps":
        formatter = PsFormatter()
    elif format_name == "json":
        formatter = JsonFormatter(pretty_print=config.output.pretty_print)
    else:
        raise ValueError(f"Unknown format: {format_name}. Available: ps, json")

    formatter.initialize(config.output.model_dump())
    return formatter


async def collect_all_hosts(
    hosts: Sequence[str],
    config: Config,
    transport: httpx.AsyncBaseTransport | None = None,
) -> tuple[list[ProcessTable], AgentError | None]:
    """Fetch the process table of every host concurrently.

    At most ``agent.concurrency`` requests are in flight at once. Results
    are read back in the order of ``hosts`` regardless of completion order,
    stopping at the first host that failed.

    Args:
        hosts: Hosts to query, each ``name`` or ``name:port``
        config: Application configuration
        transport: Optional httpx transport (used by tests)

    Returns:
        The tables of the hosts before the first failure (all of them when
        none failed), and that failure or None
    """
    semaphore = asyncio.Semaphore(config.agent.concurrency)
    sentry.add_breadcrumb("Fetching hosts", category="fetch", hosts=list(hosts))

    async with httpx.AsyncClient(transport=transport, follow_redirects=True) as client:

        async def fetch(host: str) -> ProcessTable | AgentError:
            collector = AgentCollector(host, client, config.agent)
            async with semaphore:
                result = await collector.collect_with_retry(
                    max_retries=config.agent.retries,
                    base_delay=RETRY_BASE_DELAY,
                )
            if result.success and result.data is not None:
                return result.data
            if isinstance(result.exception, AgentError):
                return result.exception
            return AgentConnectionError(host, result.error or "unknown error")

        results = await asyncio.gather(*(fetch(host) for host in hosts))

    tables: list[ProcessTable] = []
    for outcome in results:
        if isinstance(outcome, AgentError):
            return tables, outcome
        tables.append(outcome)
    return tables, None


async def run_report(
    hosts: Sequence[str],
    config: Config,
    out: TextIO | None = None,
    now: datetime | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """Fetch all hosts and write the report.

    When a host fails, the report still covers every host ahead of it in
    request order; the failure is then reported on stderr.

    Args:
        hosts: Hosts to query
        config: Application configuration
        out: Where to write the report (defaults to stdout)
        now: Evaluation time for the START column
        transport: Optional httpx transport (used by tests)

    Returns:
        Exit code (0 for success, 1 for error)
    """
    if out is None:
        out = sys.stdout

    try:
        formatter = get_formatter(config.output.format, config)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    tables, error = await collect_all_hosts(hosts, config, transport=transport)

    out.write(formatter.format(tables, now))
    out.write("\n")
    out.flush()

    if error is not None:
        logger.error("Fetching %s failed: %s", error.host, error.detail)
        sentry.capture_fetch_error(error.host, error)
        console.print(
            f"invalid host = {error.host}, error = {error.detail}",
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
        return 1
    return 0


def run_cli_mode(
    hosts: Sequence[str],
    config: Config,
    debug: bool = False,
) -> int:
    """Run rps: set up logging and error reporting, then print the report.

    Args:
        hosts: Hosts to query
        config: Application configuration
        debug: Enable debug logging to stderr

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    configure_logging(config, debug=debug)
    sentry.init_sentry(config.error_reporting)
    logger.debug("Querying %d host(s): %s", len(hosts), ", ".join(hosts))

    try:
        return asyncio.run(run_report(hosts, config))
    except KeyboardInterrupt:
        return 130
