"""Shared fixtures for rps tests."""

from __future__ import annotations

from collections.abc import Callable
import json
from typing import Any

import httpx
import pytest

from rps.models.base import ProcessSnapshot


def encode_device(major: int, minor: int) -> int:
    """Pack major/minor the way the kernel's new_encode_dev() does."""
    return (minor & 0xFF) | (major << 8) | ((minor & ~0xFF) << 12)


def make_snapshot(**overrides: Any) -> ProcessSnapshot:
    """Build a ProcessSnapshot with no STAT flags set unless overridden."""
    fields: dict[str, Any] = {
        "pid": 1234,
        "user_name": "root",
        "cpu_percent": "0.0",
        "mem_percent": "0.0",
        "virtual_size_bytes": 0,
        "resident_set_bytes": 0,
        "tty_device_number": 0,
        "process_state": "S",
        "niceness": 0,
        "memory_locked": False,
        "session_id": 100,
        "thread_group_id": 1234,
        "num_threads": 1,
        "process_group_id": 200,
        "terminal_foreground_group_id": -1,
        "start_time_unix": 0,
        "cpu_time_unix": 0,
        "command_args": (),
        "process_name": "initd",
    }
    fields.update(overrides)
    return ProcessSnapshot(**fields)


def agent_record(
    pid: int = 1,
    name: str = "systemd",
    args: list[str] | None = None,
    **overrides: Any,
) -> dict[str, Any]:
    """Build one process record as the agent serves it."""
    record: dict[str, Any] = {
        "UserName": "root",
        "Cpu": "0.0",
        "Memory": "0.1",
        "Start": 1_700_000_000,
        "Time": 65,
        "Stat": {
            "Pid": pid,
            "TtyNr": 0,
            "State": "S",
            "Nice": 0,
            "Session": pid,
            "NumThreads": 1,
            "Pgrp": pid,
            "Tpgid": -1,
        },
        "Status": {"VmSize": 168000, "VmRSS": 12000, "VmLck": 0, "Tgid": pid, "Name": name},
        "Cmdline": {"Args": ["/sbin/init"] if args is None else args},
    }
    record.update(overrides)
    return record


def agent_payload(*records: dict[str, Any]) -> bytes:
    """Encode records as a /v1/proc response body."""
    return json.dumps({"Procs": list(records)}).encode()


@pytest.fixture
def snapshot_factory() -> Callable[..., ProcessSnapshot]:
    """Factory for ProcessSnapshot instances."""
    return make_snapshot


@pytest.fixture
def agent_responses() -> dict[str, httpx.Response]:
    """Per-host canned responses; tests fill this in."""
    return {}


@pytest.fixture
def mock_transport(agent_responses: dict[str, httpx.Response]) -> httpx.MockTransport:
    """httpx transport answering from agent_responses by host[:port].

    Hosts without a canned response refuse the connection.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        host = request.url.host
        if request.url.port is not None:
            host = f"{host}:{request.url.port}"
        if host not in agent_responses:
            raise httpx.ConnectError("Connection refused", request=request)
        return agent_responses[host]

    return httpx.MockTransport(handler)
