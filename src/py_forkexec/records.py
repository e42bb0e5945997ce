"""Log records and the result of one interpreted branch.

The simulator produces two logs:

- the **execution log** — a timeline of ``(time, duration, label)``
  records, one per simulated action;
- the **system-status log** — a snapshot of the PCBs at every FORK and
  EXEC, plus a diagnostic for every branch that had to stop.

A ``SimulationResult`` bundles both logs with the clock value the
branch finished at, so a parent branch can splice a child's result
into its own.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ExecutionRecord:
    """One line of the execution timeline."""

    time: int
    duration: int
    label: str

    @property
    def end(self) -> int:
        """Return the clock value once this action has finished."""
        return self.time + self.duration

    def __str__(self) -> str:
        """Format as ``<time>, <duration>, <label>``."""
        return f"{self.time}, {self.duration}, {self.label}"


@dataclass(frozen=True)
class StatusSnapshot:
    """The PCB table as it stood right after a FORK or EXEC.

    Attributes:
        time: Clock value once the system call returned.
        trace: The trace event that triggered the snapshot.
        table: The rendered PCB table.
        pid: The process that issued the call.

    """

    time: int
    trace: str
    table: str
    pid: int = -1

    def __str__(self) -> str:
        """Format as a header line followed by the table."""
        return f"time: {self.time}; current trace: {self.trace}\n{self.table}"


@dataclass(frozen=True)
class FatalEntry:
    """A diagnostic for a branch that could not continue."""

    time: int
    kind: str
    message: str
    pid: int = -1

    def __str__(self) -> str:
        """Format as ``time: <t>; ERROR! <kind>: <message>``."""
        return f"time: {self.time}; ERROR! {self.kind}: {self.message}"


StatusEntry = StatusSnapshot | FatalEntry


@dataclass
class SimulationResult:
    """Both logs of a branch and the clock value it finished at."""

    execution: list[ExecutionRecord] = field(default_factory=lambda: [])  # noqa: PIE807
    status: list[StatusEntry] = field(default_factory=lambda: [])  # noqa: PIE807
    final_time: int = 0

    @property
    def errors(self) -> list[FatalEntry]:
        """Return the diagnostics recorded in the status log."""
        return [e for e in self.status if isinstance(e, FatalEntry)]

    def extend(self, other: SimulationResult) -> None:
        """Splice a sub-branch's logs in and adopt its final clock."""
        self.execution.extend(other.execution)
        self.status.extend(other.status)
        self.final_time = other.final_time
