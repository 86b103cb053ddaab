"""USER and COMMAND columns."""

from collections.abc import Sequence

USER_WIDTH = 8


def format_user(user_name: str) -> str:
    """Fit a username into the 8-character USER column.

    Names longer than the column keep their first 7 characters and get
    a trailing ``+``, as procps does.
    """
    if len(user_name) > USER_WIDTH:
        return f"{user_name[:USER_WIDTH - 1]}+"
    return user_name


def format_command(command_args: Sequence[str], process_name: str) -> str:
    """Rebuild the COMMAND column from the argument vector.

    Kernel threads and zombies have no argv; they are shown by their
    short name in brackets, e.g. ``[kworker/0:1]``.
    """
    command = " ".join(command_args)
    if not command:
        return f"[{process_name}]"
    return command
