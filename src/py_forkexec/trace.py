"""Trace parser — turn one raw trace line into a structured event.

A trace is the script the simulated machine follows.  Each line names
an activity and, usually, one operand::

    CPU, 50              burst of 50 ticks
    SYSCALL, 14          system call on device 14
    END_IO, 14           I/O completion on device 14
    FORK, 10             fork; cloning the PCB takes 10 ticks
    IF_CHILD, 0          branch markers that carve the fork
    IF_PARENT, 0
    ENDIF, 0
    EXEC program1, 50    replace the image; 50 ticks to find its size

The program name for EXEC usually shares the first field with the tag.
The compact ``EXEC,program1`` form (name as the only operand) is also
accepted, in which case the duration defaults to 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from py_forkexec.errors import TraceParseError

if TYPE_CHECKING:
    from collections.abc import Iterable


class Activity(StrEnum):
    """The closed set of trace activities."""

    CPU = "CPU"
    SYSCALL = "SYSCALL"
    END_IO = "END_IO"
    FORK = "FORK"
    EXEC = "EXEC"
    IF_CHILD = "IF_CHILD"
    IF_PARENT = "IF_PARENT"
    ENDIF = "ENDIF"


# Markers only delimit fork branches; on their own they cost nothing.
MARKERS = frozenset({Activity.IF_CHILD, Activity.IF_PARENT, Activity.ENDIF})


@dataclass(frozen=True)
class TraceEvent:
    """One parsed trace line.

    Attributes:
        activity: What the line asks the machine to do.
        operand: Duration or device number (0 when absent).
        program: Program name, only ever set for EXEC.

    """

    activity: Activity
    operand: int = 0
    program: str | None = None

    def __str__(self) -> str:
        """Render the event the way status snapshots name it."""
        if self.program is not None:
            return f"{self.activity} {self.program}, {self.operand}"
        return f"{self.activity}, {self.operand}"


def _parse_operand(text: str, line: str) -> int:
    try:
        value = int(text)
    except ValueError as e:
        msg = f"Malformed numeric field {text!r} in trace line {line!r}"
        raise TraceParseError(msg) from e
    if value < 0:
        msg = f"Negative operand {value} in trace line {line!r}"
        raise TraceParseError(msg)
    return value


def parse_trace(line: str) -> TraceEvent:
    """Parse a single trace line.

    Args:
        line: The raw line, with or without surrounding whitespace.

    Returns:
        The structured event.

    Raises:
        TraceParseError: If the line is empty, the tag is unknown, the
            operand is malformed, or EXEC has no program name.

    """
    text = line.strip()
    if not text:
        msg = "Empty trace line"
        raise TraceParseError(msg)

    fields = [f.strip() for f in text.split(",")]
    if len(fields) > 2:  # noqa: PLR2004
        msg = f"Too many fields in trace line {line!r}"
        raise TraceParseError(msg)

    head = fields[0].split(maxsplit=1)
    if not head:
        msg = f"Missing activity in trace line {line!r}"
        raise TraceParseError(msg)
    try:
        activity = Activity(head[0])
    except ValueError as e:
        msg = f"Unknown activity {head[0]!r} in trace line {line!r}"
        raise TraceParseError(msg) from e

    program = head[1] if len(head) > 1 else None
    operand = 0
    raw = fields[1] if len(fields) > 1 else ""

    if raw and activity is Activity.EXEC and program is None and not _is_number(raw):
        program = raw
    elif raw:
        operand = _parse_operand(raw, line)

    if activity is Activity.EXEC and not program:
        msg = f"EXEC without a program name in trace line {line!r}"
        raise TraceParseError(msg)
    if activity is not Activity.EXEC and program is not None:
        msg = f"Unexpected name operand for {activity} in trace line {line!r}"
        raise TraceParseError(msg)

    return TraceEvent(activity=activity, operand=operand, program=program)


def _is_number(text: str) -> bool:
    return text.lstrip("+-").isdigit()


def parse_lines(lines: Iterable[str]) -> list[TraceEvent]:
    """Parse every line of a trace, stopping at the first bad one."""
    return [parse_trace(line) for line in lines]
