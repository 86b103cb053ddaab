"""STAT column: process state code plus BSD-style modifier flags."""

from rps.models.base import ProcessSnapshot

HIGH_PRIORITY = "<"
LOW_PRIORITY = "N"
LOCKED = "L"
SESSION_LEADER = "s"
MULTITHREADED = "l"
FOREGROUND = "+"


def compose_state(
    process_state: str,
    niceness: int,
    memory_locked: bool,
    session_id: int,
    thread_group_id: int,
    num_threads: int,
    process_group_id: int,
    terminal_foreground_group_id: int,
) -> str:
    """Build the STAT string, e.g. ``Ssl`` or ``R+``.

    Flags are appended after the state code in a fixed order:
    ``<`` (negative nice), ``N`` (positive nice), ``L`` (locked pages),
    ``s`` (session leader), ``l`` (multi-threaded), ``+`` (foreground
    process group).

    Args:
        process_state: Single-character state code
        niceness: Nice value
        memory_locked: Whether any memory is locked
        session_id: Session ID
        thread_group_id: Thread group ID
        num_threads: Number of threads
        process_group_id: Process group ID
        terminal_foreground_group_id: Foreground process group of the terminal

    Returns:
        The state code followed by its flags
    """
    flags = [process_state]
    if niceness < 0:
        flags.append(HIGH_PRIORITY)
    if niceness > 0:
        flags.append(LOW_PRIORITY)
    if memory_locked:
        flags.append(LOCKED)
    if session_id == thread_group_id:
        flags.append(SESSION_LEADER)
    if num_threads > 1:
        flags.append(MULTITHREADED)
    if process_group_id == terminal_foreground_group_id:
        flags.append(FOREGROUND)
    return "".join(flags)


def state_of(proc: ProcessSnapshot) -> str:
    """compose_state() applied to a snapshot."""
    return compose_state(
        proc.process_state,
        proc.niceness,
        proc.memory_locked,
        proc.session_id,
        proc.thread_group_id,
        proc.num_threads,
        proc.process_group_id,
        proc.terminal_foreground_group_id,
    )
