"""Abstract base class for rps report formatters.

A formatter turns the process tables fetched from one or more hosts
into the text written to stdout. Built-in formatters:

- PsFormatter: fixed-width ``ps aux``-style report (default)
- JsonFormatter: the same rendered columns as a JSON document
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from rps.models.base import ProcessTable


class ReportFormatter(ABC):
    """Base class for report formatters.

    Class Attributes:
        name: Identifier used in config (``output.format``)
        display_name: Human-readable name
        cli_flag: CLI flag that selects this formatter (empty for the default)

    Instance Attributes:
        config: Formatter-specific configuration dict
    """

    name: str = "unnamed_formatter"
    display_name: str = "Unnamed Formatter"
    cli_flag: str = ""

    def __init__(self) -> None:
        self.config: dict[str, Any] = {}

    def initialize(self, config: dict[str, Any] | None = None) -> None:
        """Apply formatter-specific configuration.

        Args:
            config: Options from the ``output`` config section
        """
        self.config = config or {}

    @abstractmethod
    def format(self, tables: Sequence[ProcessTable], now: datetime | None = None) -> str:
        """Render process tables as a string.

        Args:
            tables: One table per host, in host-request order
            now: Evaluation time for the START column (defaults to now)

        Returns:
            The full report, without a trailing newline
        """
        ...
