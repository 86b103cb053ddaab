"""Collectors for rps.

- DataCollector: async collection with timing and retry
- AgentCollector: fetches one host's process table from its agent
"""

from rps.collectors.agent import (
    AgentAddressError,
    AgentCollector,
    AgentConnectionError,
    AgentError,
    AgentHTTPError,
    AgentResponseError,
    build_agent_url,
    parse_process_list,
)
from rps.collectors.base import CollectionError, CollectionResult, DataCollector

__all__ = [
    "AgentAddressError",
    "AgentCollector",
    "AgentConnectionError",
    "AgentError",
    "AgentHTTPError",
    "AgentResponseError",
    "CollectionError",
    "CollectionResult",
    "DataCollector",
    "build_agent_url",
    "parse_process_list",
]
