"""Pydantic data models for rps.

- ProcessSnapshot: One process record, the input to every formatter
- ProcessTable: Snapshots fetched from a single host
- AgentProcessList: The agent's /v1/proc response document
"""

from rps.models.base import (
    AgentCmdline,
    AgentProcess,
    AgentProcessList,
    AgentStat,
    AgentStatus,
    ProcessSnapshot,
    ProcessTable,
)

__all__ = [
    "ProcessSnapshot",
    "ProcessTable",
    # Agent wire format
    "AgentCmdline",
    "AgentProcess",
    "AgentProcessList",
    "AgentStat",
    "AgentStatus",
]
