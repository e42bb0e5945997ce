"""Output sinks — render the two logs and write them to disk.

The simulator returns structured records; this module is the only
place they become text files.  The file names are fixed:
``execution.txt`` for the timeline and ``system_status.txt`` for the
snapshots.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from py_forkexec.records import ExecutionRecord, SimulationResult, StatusEntry

EXECUTION_FILE = "execution.txt"
STATUS_FILE = "system_status.txt"


def format_execution(records: Iterable[ExecutionRecord]) -> str:
    """Render the execution log, one record per line."""
    return "".join(f"{record}\n" for record in records)


def format_status(entries: Iterable[StatusEntry]) -> str:
    """Render the system-status log, blocks in the order they were taken."""
    blocks: list[str] = []
    for entry in entries:
        text = str(entry)
        blocks.append(text if text.endswith("\n") else text + "\n")
    return "".join(blocks)


def write_output(text: str, path: Path) -> Path:
    """Write text to a file, creating parent directories as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def write_results(result: SimulationResult, directory: Path) -> tuple[Path, Path]:
    """Write both logs of a simulation into a directory.

    Returns:
        The paths of the execution and system-status files.

    """
    directory = Path(directory)
    execution = write_output(format_execution(result.execution), directory / EXECUTION_FILE)
    status = write_output(format_status(result.status), directory / STATUS_FILE)
    return execution, status
