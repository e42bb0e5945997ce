"""Process Control Block (PCB).

The PCB is the record the OS keeps for every process: who it is
(PID), who created it (parent PID), what program it runs, how much
memory that image needs, and which memory partition holds it.

Lifecycle in the simulator::

    init_process()  →  fork() clones  →  exec_image() overwrites in place
                                          (same PID, new program)

FORK is the only way a new PID comes into existence.  EXEC never
creates a process — it swaps the image of the one that is running.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

NO_PARENT = -1
NO_PARTITION = -1

INIT_PID = 0
INIT_PROGRAM = "init"
INIT_SIZE = 1


@dataclass
class PCB:
    """A simulated process control block.

    Attributes:
        pid: Unique process identifier, never reused.
        parent_pid: PID of the creator (``NO_PARENT`` for init).
        program: Name of the loaded program image.
        size: Image footprint in Mb.
        partition: Memory partition number (``NO_PARTITION`` if none).

    """

    pid: int
    parent_pid: int
    program: str
    size: int
    partition: int = NO_PARTITION

    def fork(self, child_pid: int) -> PCB:
        """Clone this PCB for a freshly forked child.

        The child inherits the program, size and partition number.  No
        new partition is allocated: the child shares the parent's until
        it EXECs its own image.

        Args:
            child_pid: The PID assigned to the child.

        Returns:
            The child's PCB.

        """
        return replace(self, pid=child_pid, parent_pid=self.pid)

    def exec_image(self, program: str, size: int) -> None:
        """Replace the program image, keeping the process identity."""
        self.program = program
        self.size = size

    def snapshot(self) -> PCB:
        """Return an independent copy of this PCB."""
        return replace(self)


def init_process() -> PCB:
    """Return the PCB of the first process (not yet in memory)."""
    return PCB(pid=INIT_PID, parent_pid=NO_PARENT, program=INIT_PROGRAM, size=INIT_SIZE)


_COLUMNS = ("PID", "program name", "partition number", "size", "state")


def render_pcb_table(current: PCB, wait_queue: Sequence[PCB]) -> str:
    """Render the running PCB and the wait queue as a boxed table.

    Example::

        +--------------------------------------------------------+
        | PID | program name | partition number | size | state   |
        +--------------------------------------------------------+
        |   1 |         init |                6 |    1 | running |
        |   0 |         init |                6 |    1 | waiting |
        +--------------------------------------------------------+

    Args:
        current: The running process.
        wait_queue: Processes blocked waiting on a child, oldest first.

    Returns:
        The table, newline terminated.

    """
    rows = [(current, "running")] + [(pcb, "waiting") for pcb in wait_queue]
    widths = [len(c) for c in _COLUMNS]
    cells = [
        (str(pcb.pid), pcb.program, str(pcb.partition), str(pcb.size), state)
        for pcb, state in rows
    ]
    for row in cells:
        widths = [max(w, len(c)) for w, c in zip(widths, row, strict=True)]

    border = "+" + "-" * (sum(widths) + 3 * len(widths) - 1) + "+"
    header = "|" + "|".join(f" {c:<{w}} " for c, w in zip(_COLUMNS, widths, strict=True)) + "|"
    lines = [border, header, border]
    lines.extend(
        "|" + "|".join(f" {c:>{w}} " for c, w in zip(row, widths, strict=True)) + "|"
        for row in cells
    )
    lines.append(border)
    return "\n".join(lines) + "\n"
