"""Sentry SDK integration for rps.

Error reporting is opt-in: nothing is sent unless ``error_reporting`` is
enabled in the config and a DSN is set (directly or via RPS_SENTRY_DSN).

Usage:
    from rps.sentry import init_sentry, add_breadcrumb, capture_fetch_error

    if init_sentry(config.error_reporting):
        add_breadcrumb("Fetching hosts", category="fetch", hosts=["web01"])
        capture_fetch_error("web01", error)
"""

from __future__ import annotations

import logging
import platform
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from rps import __version__
from rps.config.loader import ErrorReportingConfig

logger = logging.getLogger(__name__)

_initialized = False


def init_sentry(config: ErrorReportingConfig) -> bool:
    """Initialize Sentry if error reporting is enabled.

    Args:
        config: The ``error_reporting`` config section

    Returns:
        True if Sentry was initialized
    """
    global _initialized

    if not config.enabled:
        return False
    if not config.dsn:
        logger.warning("Error reporting enabled but no DSN configured; skipping Sentry")
        return False

    sentry_sdk.init(
        dsn=config.dsn,
        environment=config.environment,
        release=f"rps@{__version__}",
        send_default_pii=False,
        integrations=[
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
    )
    sentry_sdk.set_tag("python.version", platform.python_version())
    sentry_sdk.set_tag("os.name", platform.system())
    _initialized = True
    logger.debug("Sentry initialized (environment=%s)", config.environment)
    return True


def is_enabled() -> bool:
    """Return True once init_sentry() has succeeded."""
    return _initialized


def add_breadcrumb(message: str, category: str = "rps", level: str = "info", **data: Any) -> None:
    """Record a breadcrumb; a no-op while Sentry is not initialized."""
    if not _initialized:
        return
    sentry_sdk.add_breadcrumb(message=message, category=category, level=level, data=data)


def capture_fetch_error(host: str, error: BaseException) -> str | None:
    """Report a failed host fetch.

    Args:
        host: The host that failed
        error: The exception raised while fetching

    Returns:
        The Sentry event id, or None when Sentry is not initialized
    """
    if not _initialized:
        return None
    with sentry_sdk.new_scope() as scope:
        scope.set_tag("rps.host", host)
        scope.set_tag("error.type", type(error).__name__)
        return sentry_sdk.capture_exception(error)
