"""Command-line interface for rps.

This module provides:
- Typer-based CLI application
- Config file loading with CLI overrides
- Host list parsing (--hosts, comma-separated)

Usage:
    rps -H web01:8080,web02:8080        # ps report for two hosts
    rps -H web01:8080 --json            # Same columns as JSON
    rps --config ~/.config/rps/prod.yaml  # Hosts from a config file

The report header matches ``ps aux``:

    HOST            USER       PID %CPU %MEM    VSZ    RSS TTY      STAT START   TIME COMMAND
"""

from pathlib import Path
from typing import Annotated, Any

from rich.console import Console
from rich.markup import escape
import typer

from rps import __version__
from rps.config import ConfigError, load_config, parse_hosts

app = typer.Typer(
    name="rps",
    help="Remote ps - show process tables of remote hosts",
    no_args_is_help=False,
    add_completion=False,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Display version and exit."""
    if value:
        console.print(f"rps version {__version__}", highlight=False)
        raise typer.Exit()


def build_cli_overrides(
    hosts: list[str] | None = None,
    json_format: bool = False,
    pretty: bool | None = None,
    timeout: float | None = None,
    retries: int | None = None,
) -> dict[str, Any]:
    """Build config override dict from CLI flags.

    Args:
        hosts: Parsed host list from --hosts
        json_format: Output JSON instead of the ps report
        pretty: Pretty-print JSON output
        timeout: Per-request timeout override
        retries: Attempts per host override

    Returns:
        Dictionary of config overrides (empty if no flags given)
    """
    overrides: dict[str, Any] = {}

    if hosts:
        overrides["hosts"] = hosts

    agent_overrides: dict[str, Any] = {}
    if timeout is not None:
        agent_overrides["timeout"] = timeout
    if retries is not None:
        agent_overrides["retries"] = retries
    if agent_overrides:
        overrides["agent"] = agent_overrides

    output_overrides: dict[str, Any] = {}
    if json_format:
        output_overrides["format"] = "json"
    if pretty is not None:
        output_overrides["pretty_print"] = pretty
    if output_overrides:
        overrides["output"] = output_overrides

    return overrides


HostsOption = Annotated[
    str | None,
    typer.Option(
        "--hosts",
        "-H",
        help="Connect remote hosts (comma-separated, host[:port])",
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to custom config file",
        envvar="RPS_CONFIG_PATH",
    ),
]

JsonOption = Annotated[
    bool,
    typer.Option(
        "--json",
        "-j",
        help="Output rendered columns as JSON",
    ),
]

PrettyOption = Annotated[
    bool | None,
    typer.Option(
        "--pretty/--no-pretty",
        help="Pretty-print JSON output (default: True)",
    ),
]

TimeoutOption = Annotated[
    float | None,
    typer.Option(
        "--timeout",
        "-t",
        help="Per-host request timeout in seconds",
        min=0.1,
        max=300,
    ),
]

RetriesOption = Annotated[
    int | None,
    typer.Option(
        "--retries",
        help="Attempts per host before giving up",
        min=1,
        max=10,
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Log fetch activity to stderr",
    ),
]

VersionOption = Annotated[
    bool | None,
    typer.Option(
        "--version",
        "-v",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
]


@app.command()
def main(
    ctx: typer.Context,
    hosts: HostsOption = None,
    config: ConfigOption = None,
    json_format: JsonOption = False,
    pretty: PrettyOption = None,
    timeout: TimeoutOption = None,
    retries: RetriesOption = None,
    debug: DebugOption = False,
    version: VersionOption = None,
) -> None:
    """rps - Remote ps.

    Fetches the process list from the agent on each host and prints it
    in ps aux layout, with a leading HOST column.

    Examples:

        rps -H web01:8080,web02:8080

        rps -H web01:8080 --json --no-pretty
    """
    overrides = build_cli_overrides(
        hosts=parse_hosts(hosts),
        json_format=json_format,
        pretty=pretty,
        timeout=timeout,
        retries=retries,
    )

    try:
        config_path = str(config) if config else None
        cfg = load_config(config_path=config_path, cli_overrides=overrides)
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(1) from e

    if not cfg.hosts:
        console.print("host required", highlight=False)
        typer.echo(ctx.get_help(), err=True)
        raise typer.Exit(1)

    from rps.cli_runner import run_cli_mode

    exit_code = run_cli_mode(cfg.hosts, cfg, debug=debug)
    if exit_code != 0:
        raise typer.Exit(exit_code)


def cli_main() -> None:
    """Entry point for the CLI application."""
    app()
