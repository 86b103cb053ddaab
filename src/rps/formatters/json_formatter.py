"""JSON report formatter for rps.

Emits the same rendered columns as the ps report, grouped per host, for
consumers that would rather parse JSON than fixed-width text.

Output shape:

    {
      "timestamp": "2024-01-15T10:30:00+00:00",
      "hosts": [
        {"host": "web01:8080", "fetched_at": "...", "processes": [{"user": "root", ...}]}
      ]
    }
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
import json
from typing import Any

from rps.formatters.base import ReportFormatter
from rps.formatters.ps_formatter import render_process
from rps.models.base import ProcessTable


def _utcnow() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


class JsonFormatter(ReportFormatter):
    """JSON formatter for rps output.

    Instance Attributes:
        pretty_print: Whether to format with indentation (default: True)
    """

    name: str = "json"
    display_name: str = "JSON Report"
    cli_flag: str = "--json"

    def __init__(self, pretty_print: bool = True) -> None:
        """Initialize the JSON formatter.

        Args:
            pretty_print: If True, output indented JSON (default: True).
                         If False, output compact single-line JSON.
        """
        super().__init__()
        self.pretty_print = pretty_print

    def initialize(self, config: dict[str, Any] | None = None) -> None:
        """Initialize the formatter with configuration.

        Args:
            config: Supports ``pretty_print`` (bool)
        """
        super().initialize(config)
        if config:
            self.pretty_print = config.get("pretty_print", self.pretty_print)

    def build_document(
        self,
        tables: Sequence[ProcessTable],
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Build the JSON-serializable report document."""
        if now is None:
            now = datetime.now().astimezone()

        hosts: list[dict[str, Any]] = []
        for table in tables:
            rows = [render_process(table.hostname, proc, now).as_dict() for proc in table.processes]
            for row in rows:
                del row["host"]
            hosts.append(
                {
                    "host": table.host,
                    "fetched_at": table.fetched_at.isoformat(),
                    "processes": rows,
                }
            )

        return {"timestamp": _utcnow().isoformat(), "hosts": hosts}

    def format(self, tables: Sequence[ProcessTable], now: datetime | None = None) -> str:
        output = self.build_document(tables, now)
        if self.pretty_print:
            return json.dumps(output, indent=2, ensure_ascii=False)
        return json.dumps(output, ensure_ascii=False, separators=(",", ":"))
