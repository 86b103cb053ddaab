"""Tests for rps data models."""

from datetime import UTC, datetime
import json

from pydantic import ValidationError
import pytest

from rps.models import (
    AgentCmdline,
    AgentProcess,
    AgentProcessList,
    ProcessSnapshot,
    ProcessTable,
)

from conftest import agent_payload, agent_record, make_snapshot


def _utcnow() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


class TestProcessSnapshot:
    """Tests for ProcessSnapshot."""

    def test_defaults(self) -> None:
        """Test that only pid is required."""
        snap = ProcessSnapshot(pid=1)
        assert snap.process_state == "?"
        assert snap.terminal_foreground_group_id == -1
        assert snap.command_args == ()
        assert snap.memory_locked is False

    def test_frozen(self) -> None:
        """Test snapshots cannot be mutated."""
        snap = make_snapshot()
        with pytest.raises(ValidationError):
            snap.pid = 2  # type: ignore[misc]

    def test_negative_pid_rejected(self) -> None:
        """Test pid must be non-negative."""
        with pytest.raises(ValidationError):
            ProcessSnapshot(pid=-1)

    def test_state_is_single_character(self) -> None:
        """Test process_state must be exactly one character."""
        with pytest.raises(ValidationError):
            make_snapshot(process_state="Ss")
        with pytest.raises(ValidationError):
            make_snapshot(process_state="")

    def test_unknown_field_rejected(self) -> None:
        """Test extra fields are forbidden."""
        with pytest.raises(ValidationError):
            ProcessSnapshot(pid=1, colour="red")  # type: ignore[call-arg]

    def test_args_list_coerced_to_tuple(self) -> None:
        """Test a list argv is stored as a tuple."""
        assert make_snapshot(command_args=["a", "b"]).command_args == ("a", "b")


class TestProcessTable:
    """Tests for ProcessTable."""

    def test_default_fetched_at(self) -> None:
        """Test that fetched_at defaults to now."""
        before = _utcnow()
        table = ProcessTable(host="web01")
        after = _utcnow()
        assert before <= table.fetched_at <= after

    def test_hostname_strips_port(self) -> None:
        """Test the port suffix is removed for display."""
        assert ProcessTable(host="web01:8080").hostname == "web01"

    def test_hostname_without_port(self) -> None:
        """Test a bare host is returned unchanged."""
        assert ProcessTable(host="web01").hostname == "web01"

    def test_empty_table_is_truthy(self) -> None:
        """Test a host with no processes is still a valid result."""
        assert ProcessTable(host="web01")

    def test_empty_host_rejected(self) -> None:
        """Test host must be non-empty."""
        with pytest.raises(ValidationError):
            ProcessTable(host="")


class TestAgentProcess:
    """Tests for decoding one agent record."""

    def test_to_snapshot_maps_fields(self) -> None:
        """Test every wire field lands in the right snapshot field."""
        record = agent_record(
            pid=42,
            name="nginx",
            args=["nginx", "-g", "daemon off;"],
            UserName="www-data",
            Cpu="2.5",
            Memory="1.0",
            Start=1_700_000_100,
            Time=7,
        )
        record["Stat"].update({"TtyNr": 34816, "State": "R", "Nice": -5, "NumThreads": 4})
        record["Stat"].update({"Session": 40, "Pgrp": 41, "Tpgid": 41})
        snap = AgentProcess.model_validate(record).to_snapshot()

        assert snap.pid == 42
        assert snap.user_name == "www-data"
        assert snap.cpu_percent == "2.5"
        assert snap.mem_percent == "1.0"
        assert snap.virtual_size_bytes == 168000
        assert snap.resident_set_bytes == 12000
        assert snap.tty_device_number == 34816
        assert snap.process_state == "R"
        assert snap.niceness == -5
        assert snap.session_id == 40
        assert snap.thread_group_id == 42
        assert snap.num_threads == 4
        assert snap.process_group_id == 41
        assert snap.terminal_foreground_group_id == 41
        assert snap.start_time_unix == 1_700_000_100
        assert snap.cpu_time_unix == 7
        assert snap.command_args == ("nginx", "-g", "daemon off;")
        assert snap.process_name == "nginx"

    def test_locked_memory(self) -> None:
        """Test any non-zero VmLck marks memory as locked."""
        record = agent_record()
        record["Status"]["VmLck"] = 4
        assert AgentProcess.model_validate(record).to_snapshot().memory_locked is True

    def test_unlocked_memory(self) -> None:
        """Test VmLck of zero is unlocked."""
        assert AgentProcess.model_validate(agent_record()).to_snapshot().memory_locked is False

    def test_empty_state_becomes_question_mark(self) -> None:
        """Test a blank state renders as unknown."""
        record = agent_record()
        record["Stat"]["State"] = ""
        assert AgentProcess.model_validate(record).to_snapshot().process_state == "?"

    def test_unknown_keys_ignored(self) -> None:
        """Test newer agents may add fields."""
        record = agent_record(Extra={"x": 1})
        record["Stat"]["Flags"] = 64
        assert AgentProcess.model_validate(record).to_snapshot().pid == 1

    def test_missing_stat_rejected(self) -> None:
        """Test Stat is required."""
        record = agent_record()
        del record["Stat"]
        with pytest.raises(ValidationError):
            AgentProcess.model_validate(record)


class TestAgentCmdline:
    """Tests for the argv wrapper."""

    def test_null_args(self) -> None:
        """Test null Args decodes as an empty list."""
        assert AgentCmdline.model_validate({"Args": None}).Args == []

    def test_missing_args(self) -> None:
        """Test absent Args decodes as an empty list."""
        assert AgentCmdline.model_validate({}).Args == []


class TestAgentProcessList:
    """Tests for the /v1/proc document."""

    def test_order_preserved(self) -> None:
        """Test snapshots keep the agent's order."""
        doc = AgentProcessList.model_validate_json(
            agent_payload(agent_record(pid=3), agent_record(pid=1), agent_record(pid=2))
        )
        assert [s.pid for s in doc.to_snapshots()] == [3, 1, 2]

    def test_null_procs(self) -> None:
        """Test a null process list is empty."""
        assert AgentProcessList.model_validate_json('{"Procs": null}').to_snapshots() == ()

    def test_empty_object(self) -> None:
        """Test a document without Procs is empty."""
        assert AgentProcessList.model_validate_json("{}").to_snapshots() == ()

    def test_kernel_thread_null_args(self) -> None:
        """Test null Args inside a full document."""
        record = agent_record(pid=2, name="kthreadd")
        record["Cmdline"]["Args"] = None
        doc = AgentProcessList.model_validate_json(json.dumps({"Procs": [record]}))
        assert doc.to_snapshots()[0].command_args == ()
