"""Pydantic data models for rps.

This module defines the data models shared by the agent client and the
report formatters:
- ProcessSnapshot: One process as reported by a remote agent (flat, immutable)
- ProcessTable: All snapshots fetched from a single host
- AgentProcess and friends: The agent's JSON document, as served on /v1/proc
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utcnow() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


class ProcessSnapshot(BaseModel):
    """Point-in-time description of one OS process.

    Numeric fields are taken as-is from the remote process table; the
    formatters derive every display column from these values.

    Attributes:
        pid: Process ID
        user_name: Username of the process owner
        cpu_percent: CPU usage, pre-formatted by the agent
        mem_percent: Memory usage, pre-formatted by the agent
        virtual_size_bytes: Virtual memory size
        resident_set_bytes: Resident set size
        tty_device_number: Packed major/minor device id (0 = no terminal)
        process_state: Single-character state code (R, S, D, Z, T, ...)
        niceness: Nice value
        memory_locked: Whether the process has pages locked into memory
        session_id: Session ID
        thread_group_id: Thread group ID
        num_threads: Number of threads
        process_group_id: Process group ID
        terminal_foreground_group_id: Foreground process group of the terminal
        start_time_unix: Start time, seconds since epoch
        cpu_time_unix: Accumulated CPU time in seconds
        command_args: Argument vector (empty for kernel threads)
        process_name: Short kernel-reported name
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    pid: int = Field(..., ge=0, description="Process ID")
    user_name: str = Field(default="", description="Username of process owner")
    cpu_percent: str = Field(default="0.0", description="CPU usage percentage")
    mem_percent: str = Field(default="0.0", description="Memory usage percentage")
    virtual_size_bytes: int = Field(default=0, ge=0)
    resident_set_bytes: int = Field(default=0, ge=0)
    tty_device_number: int = Field(default=0, description="Packed terminal device number")
    process_state: str = Field(default="?", min_length=1, max_length=1)
    niceness: int = 0
    memory_locked: bool = False
    session_id: int = 0
    thread_group_id: int = 0
    num_threads: int = Field(default=1, ge=0)
    process_group_id: int = 0
    terminal_foreground_group_id: int = -1
    start_time_unix: int = 0
    cpu_time_unix: int = 0
    command_args: tuple[str, ...] = ()
    process_name: str = ""


class ProcessTable(BaseModel):
    """All process snapshots fetched from one host.

    Attributes:
        host: Host as requested (may include a :port suffix)
        processes: Snapshots in the order the agent returned them
        fetched_at: When the table was received (UTC)
    """

    model_config = ConfigDict(frozen=True)

    host: str = Field(..., min_length=1)
    processes: tuple[ProcessSnapshot, ...] = ()
    fetched_at: datetime = Field(default_factory=_utcnow)

    @property
    def hostname(self) -> str:
        """Host with any :port suffix removed, as shown in the HOST column."""
        return self.host.split(":")[0]


# Agent wire format. Field names follow the agent's JSON keys.


class _AgentModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


def _null_as_empty(v: Any) -> Any:
    """The agent encodes empty lists as null."""
    return [] if v is None else v


class AgentStat(_AgentModel):
    """Fields from /proc/<pid>/stat."""

    Pid: int
    TtyNr: int = 0
    State: str = "?"
    Nice: int = 0
    Session: int = 0
    NumThreads: int = 1
    Pgrp: int = 0
    Tpgid: int = -1


class AgentStatus(_AgentModel):
    """Fields from /proc/<pid>/status."""

    VmSize: int = 0
    VmRSS: int = 0
    VmLck: int = 0
    Tgid: int = 0
    Name: str = ""


class AgentCmdline(_AgentModel):
    """Fields from /proc/<pid>/cmdline."""

    Args: list[str] = Field(default_factory=list)

    @field_validator("Args", mode="before")
    @classmethod
    def _args_null(cls, v: Any) -> Any:
        return _null_as_empty(v)


class AgentProcess(_AgentModel):
    """One process record as served by the agent."""

    UserName: str = ""
    Cpu: str = "0.0"
    Memory: str = "0.0"
    Start: int = 0
    Time: int = 0
    Stat: AgentStat
    Status: AgentStatus = Field(default_factory=AgentStatus)
    Cmdline: AgentCmdline = Field(default_factory=AgentCmdline)

    def to_snapshot(self) -> ProcessSnapshot:
        """Flatten the agent record into a ProcessSnapshot."""
        return ProcessSnapshot(
            pid=self.Stat.Pid,
            user_name=self.UserName,
            cpu_percent=self.Cpu,
            mem_percent=self.Memory,
            virtual_size_bytes=self.Status.VmSize,
            resident_set_bytes=self.Status.VmRSS,
            tty_device_number=self.Stat.TtyNr,
            process_state=self.Stat.State or "?",
            niceness=self.Stat.Nice,
            memory_locked=self.Status.VmLck != 0,
            session_id=self.Stat.Session,
            thread_group_id=self.Status.Tgid,
            num_threads=self.Stat.NumThreads,
            process_group_id=self.Stat.Pgrp,
            terminal_foreground_group_id=self.Stat.Tpgid,
            start_time_unix=self.Start,
            cpu_time_unix=self.Time,
            command_args=tuple(self.Cmdline.Args),
            process_name=self.Status.Name,
        )


class AgentProcessList(_AgentModel):
    """Top-level /v1/proc response document."""

    Procs: list[AgentProcess] = Field(default_factory=list)

    @field_validator("Procs", mode="before")
    @classmethod
    def _procs_null(cls, v: Any) -> Any:
        return _null_as_empty(v)

    def to_snapshots(self) -> tuple[ProcessSnapshot, ...]:
        """Convert every record to a ProcessSnapshot, preserving order."""
        return tuple(proc.to_snapshot() for proc in self.Procs)
