"""Default configuration values for rps.

This module defines the default configuration used when no config file exists
or when config values are not specified.

Environment Variables:
    RPS_CONFIG_PATH: Override default config file path
    Any config value can reference environment variables using ${VAR} syntax

Config File Locations (in order of precedence):
    1. Path specified via --config CLI flag
    2. Path specified via RPS_CONFIG_PATH environment variable
    3. ~/.config/rps/config.yaml (XDG default)
    4. ~/.rps/config.yaml (legacy location)
"""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    # Hosts queried when --hosts is not given, e.g. ["web01:8080", "web02:8080"]
    "hosts": [],
    # Remote agent settings
    "agent": {
        "scheme": "http",  # "http" or "https"
        "path": "/v1/proc",  # Endpoint serving the process list
        "timeout": 10.0,  # Per-request timeout in seconds
        "retries": 1,  # Attempts per host before giving up
        "concurrency": 8,  # Hosts fetched in parallel
    },
    # Report output
    "output": {
        "format": "ps",  # "ps" or "json"
        "pretty_print": True,  # Indent JSON output
    },
    # Logging configuration (for debugging)
    "logging": {
        "enabled": False,
        "level": "INFO",  # DEBUG, INFO, WARNING, ERROR
        "file": None,  # Log to this file instead of stderr
    },
    # Error reporting via Sentry, off unless a DSN is configured
    "error_reporting": {
        "enabled": False,
        "dsn": "${RPS_SENTRY_DSN:-}",
        "environment": "production",
    },
}
