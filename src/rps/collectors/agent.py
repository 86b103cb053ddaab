"""Remote agent collector for rps.

Fetches the process list a host's agent serves on ``/v1/proc`` and turns
it into a ProcessTable. Every failure is raised as an AgentError naming
the host, so the caller can report exactly which host broke the run.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from rps.collectors.base import CollectionError, DataCollector
from rps.config.loader import AgentConfig
from rps.models.base import AgentProcessList, ProcessTable

logger = logging.getLogger(__name__)


class AgentError(CollectionError):
    """A host's agent could not be queried.

    Attributes:
        host: Host as requested (may include a :port suffix)
        detail: What went wrong
    """

    def __init__(self, host: str, detail: str) -> None:
        self.host = host
        self.detail = detail
        super().__init__(detail)


class AgentConnectionError(AgentError):
    """The agent could not be reached (DNS, refused, timeout)."""


class AgentHTTPError(AgentError):
    """The agent answered with a non-success status."""

    def __init__(self, host: str, status_code: int, reason: str = "") -> None:
        self.status_code = status_code
        detail = f"HTTP {status_code}" + (f" {reason}" if reason else "")
        super().__init__(host, detail)
        # 4xx won't change on retry
        self.retryable = status_code >= 500


class AgentResponseError(AgentError):
    """The agent's response is not a valid process list."""

    retryable = False


class AgentAddressError(AgentError):
    """The host does not form a usable agent URL (bad port, bad scheme)."""

    retryable = False


def build_agent_url(host: str, scheme: str = "http", path: str = "/v1/proc") -> str:
    """Build the process list URL for a host.

    Args:
        host: ``name`` or ``name:port``
        scheme: ``http`` or ``https``
        path: Endpoint path

    Returns:
        Absolute URL such as ``http://web01:8080/v1/proc``
    """
    return f"{scheme}://{host}{path}"


def parse_process_list(host: str, payload: bytes | str) -> ProcessTable:
    """Decode an agent response body into a ProcessTable.

    Raises:
        AgentResponseError: If the body is not JSON or does not match the
            process list schema
    """
    try:
        document = AgentProcessList.model_validate_json(payload)
        snapshots = document.to_snapshots()
    except ValidationError as e:
        first = e.errors()[0]
        if first.get("type") == "json_invalid":
            raise AgentResponseError(host, f"invalid JSON: {first.get('msg')}") from e
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise AgentResponseError(
            host, f"unexpected process list at '{location}': {first.get('msg')}"
        ) from e
    return ProcessTable(host=host, processes=snapshots)


class AgentCollector(DataCollector[ProcessTable]):
    """Collector for one host's process table.

    Args:
        host: Host to query (``name`` or ``name:port``)
        client: Shared HTTP client
        config: Agent connection settings
    """

    name = "agent"

    def __init__(
        self,
        host: str,
        client: httpx.AsyncClient,
        config: AgentConfig | None = None,
    ) -> None:
        super().__init__()
        self.host = host
        self.config = config or AgentConfig()
        self.url = build_agent_url(host, self.config.scheme, self.config.path)
        self.timeout = self.config.timeout + 1.0
        self._client = client
        self.name = f"agent:{host}"

    async def collect(self) -> ProcessTable:
        """Fetch and decode the host's process list.

        Raises:
            AgentConnectionError: Transport failure
            AgentHTTPError: Non-2xx response
            AgentResponseError: Malformed body
            AgentAddressError: Host or scheme does not form a valid URL
        """
        logger.debug("GET %s", self.url)
        try:
            response = await self._client.get(self.url, timeout=self.config.timeout)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise AgentAddressError(self.host, str(e)) from e
        except httpx.TimeoutException as e:
            raise AgentConnectionError(self.host, f"timed out: {e}") from e
        except httpx.HTTPError as e:
            raise AgentConnectionError(self.host, str(e) or type(e).__name__) from e

        if not response.is_success:
            raise AgentHTTPError(self.host, response.status_code, response.reason_phrase)

        table = parse_process_list(self.host, response.content)
        logger.info("Fetched %d processes from %s", len(table.processes), self.host)
        return table

