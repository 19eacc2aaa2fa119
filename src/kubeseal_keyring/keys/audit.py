"""Append-only operation logs kept next to the local backups."""

from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

ROTATION_LOG = "rotation-log.txt"
RECOVERY_LOG = "recovery-log.txt"


def append_log(path: Path, lines: Iterable[str]) -> Path:
    """Append lines to a text log, creating it when missing.

    Args:
        path: The log file.
        lines: Lines to append, without trailing newlines.

    Returns:
        The log path.

    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a") as log:
        for line in lines:
            log.write(f"{line}\n")
    return path


def format_when(when: datetime) -> str:
    """Format a timestamp the way log entries display it."""
    return when.strftime("%a %b %d %H:%M:%S %Y")
