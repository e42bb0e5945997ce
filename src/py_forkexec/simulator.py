"""Trace interpreter — the simulated machine's main loop.

The simulator walks a trace one line at a time, advancing a single
integer clock and writing every action it takes to the execution log.

Process nesting is modelled with recursion, one call per **branch**:

- **FORK** carves the child's lines out of the current trace and runs
  them as a fresh branch for the child PCB.  The parent is blocked for
  the whole of the child's run — the child's branch finishes completely
  before the parent's next line is interpreted.  There is no
  interleaving.
- **EXEC** loads the new program's trace and runs it as a branch for
  the *same* PCB.  Whatever that branch produces is the rest of the
  process's life: lines after the EXEC in the old trace never run.

How FORK carves a branch::

    FORK, 10
    IF_CHILD, 0        ← child lines start after this marker
    CPU, 20            ← child only
    IF_PARENT, 0       ← parent resumes after this marker
    CPU, 40            ← parent only (skipped while carving)
    ENDIF, 0           ← both processes continue past here
    SYSCALL, 4         ← runs in the child *and* later in the parent

An EXEC inside the child section ends the child's branch at once, and
forks nested inside either section are copied through untouched for
the nested FORK to carve.

Errors:
    Anything that goes wrong inside a branch (bad line, bad device,
    unknown program, no memory, missing trace) stops that branch only.
    A diagnostic is added to the status log and to the kernel log, and
    the caller carries on from the clock value the branch reached.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from itertools import count
from typing import TYPE_CHECKING, assert_never

from py_forkexec.errors import AllocationError, SimulationError, TraceParseError
from py_forkexec.interrupts import (
    CONTEXT_SAVE_COST,
    VECTOR_EXEC,
    VECTOR_FORK,
    enter_interrupt,
)
from py_forkexec.logging import Logger, LogLevel
from py_forkexec.memory.partitions import PartitionPool
from py_forkexec.process.pcb import INIT_PID, PCB, init_process, render_pcb_table
from py_forkexec.records import (
    ExecutionRecord,
    FatalEntry,
    SimulationResult,
    StatusSnapshot,
)
from py_forkexec.trace import Activity, TraceEvent, parse_trace

if TYPE_CHECKING:
    from collections.abc import Sequence

    from py_forkexec.config import MachineConfig
    from py_forkexec.sources import TraceSource

LOAD_TICKS_PER_MB = 15
IRET_COST = 1
EXEC_DELAY_MIN = 1
EXEC_DELAY_MAX = 10


@dataclass(frozen=True)
class ChildBranch:
    """The lines a forked child runs, and where its parent picks up.

    Attributes:
        lines: The child's trace.
        resume: Index of the next line the parent interprets.

    """

    lines: list[str]
    resume: int


def _activity_of(line: str) -> Activity | None:
    try:
        return parse_trace(line).activity
    except TraceParseError:
        return None


def carve_child_branch(lines: Sequence[str], fork_index: int) -> ChildBranch:
    """Split the lines after a FORK into the child's branch.

    Markers are matched by nesting depth.  A FORK inside the child
    section brings its own IF_CHILD, IF_PARENT and ENDIF, and that whole
    block is copied into the child for the nested FORK to carve.  The
    child section therefore ends at the IF_PARENT at the same depth, not
    at the first IF_PARENT after IF_CHILD as a flat scan would.

    Malformed lines are copied like any other, so they fail in the
    branch that would have run them rather than in the one carving.

    Args:
        lines: The trace holding the FORK.
        fork_index: Index of the FORK line.

    Returns:
        The child's lines and the parent's resume index.

    """
    child: list[str] = []
    copying = False
    opened = False
    closed = False
    exec_seen = False
    depth = 0
    resume: int | None = None

    for j in range(fork_index + 1, len(lines)):
        activity = _activity_of(lines[j])

        if depth == 0 and not closed:
            if activity is Activity.IF_CHILD and not opened:
                opened = copying = True
                continue
            if activity is Activity.IF_PARENT:
                copying = False
                resume = j + 1
                if exec_seen:
                    break
                continue
            if activity is Activity.ENDIF:
                closed = True
                copying = not exec_seen
                if resume is None:
                    resume = j + 1
                if exec_seen:
                    break
                continue

        # Nested fork blocks are copied through for the nested FORK.
        if activity is Activity.IF_CHILD:
            depth += 1
        elif activity is Activity.ENDIF and depth > 0:
            depth -= 1

        if not copying:
            continue
        child.append(lines[j])
        if activity is Activity.EXEC and depth == 0:
            exec_seen = True
            copying = False
            if closed:
                break

    if resume is None:
        resume = len(lines) if opened else fork_index + 1
    return ChildBranch(lines=child, resume=resume)


@dataclass
class _Branch:
    """Interpreter state for one branch (one recursive call)."""

    lines: list[str]
    pcb: PCB
    wait_queue: list[PCB]
    result: SimulationResult
    index: int = 0
    finished: bool = False

    @property
    def clock(self) -> int:
        return self.result.final_time

    @clock.setter
    def clock(self, value: int) -> None:
        self.result.final_time = value


class Simulator:
    """Interpret traces on one simulated machine.

    The simulator owns the state that outlives a single branch: the
    memory partition pool and the PID counter.  PIDs start at 1 (init
    is PID 0), are issued only by FORK, and are never reused.
    """

    def __init__(
        self,
        config: MachineConfig,
        *,
        trace_source: TraceSource,
        pool: PartitionPool | None = None,
        rng: random.Random | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Create a simulator for a machine.

        Args:
            config: Vector table, ISR delays, and external files.
            trace_source: Where EXEC loads program traces from.
            pool: Memory partitions (built from the config if omitted).
            rng: Random source for the EXEC bookkeeping delays.
            logger: Kernel log (a fresh one if omitted).

        """
        self._config = config
        self._trace_source = trace_source
        self._pool = pool if pool is not None else PartitionPool(config.partitions)
        self._rng = rng if rng is not None else random.Random()  # noqa: S311
        self._logger = logger if logger is not None else Logger()
        self._pids = count(start=1)

    @property
    def config(self) -> MachineConfig:
        """Return the machine configuration."""
        return self._config

    @property
    def pool(self) -> PartitionPool:
        """Return the memory partition pool."""
        return self._pool

    @property
    def logger(self) -> Logger:
        """Return the kernel log."""
        return self._logger

    def dmesg(self, *, min_level: LogLevel = LogLevel.DEBUG) -> list[str]:
        """Return the kernel log as text lines.

        Args:
            min_level: Leave out entries below this level.

        """
        return [str(e) for e in self._logger.filter(min_level=min_level)]

    def next_pid(self) -> int:
        """Issue the next PID."""
        return next(self._pids)

    def boot(self) -> PCB:
        """Create the init process and load it into memory.

        Raises:
            AllocationError: If no partition can hold init.

        """
        pcb = init_process()
        if not self._pool.allocate(pcb):
            msg = f"Memory allocation failed for {pcb.program}"
            raise AllocationError(msg)
        self._logger.log(
            LogLevel.INFO,
            f"{pcb.program} loaded into partition {pcb.partition}",
            source="boot",
            pid=pcb.pid,
        )
        return pcb

    def run(self, lines: Sequence[str], *, start_time: int = 0) -> SimulationResult:
        """Boot init and interpret its trace.

        Args:
            lines: The initial process's trace.
            start_time: Clock value to start at.

        Returns:
            Both logs and the final clock value.

        """
        try:
            init = self.boot()
        except AllocationError as e:
            result = SimulationResult(final_time=start_time)
            self._record_fatal(result, e, pid=INIT_PID)
            return result
        return self.simulate(lines, time=start_time, pcb=init, wait_queue=[])

    def simulate(
        self,
        lines: Sequence[str],
        *,
        time: int,
        pcb: PCB,
        wait_queue: Sequence[PCB] = (),
    ) -> SimulationResult:
        """Interpret one branch.

        Args:
            lines: The branch's trace lines.  Blank lines are skipped.
            time: Clock value when the branch starts.
            pcb: The process running the branch (mutated by EXEC).
            wait_queue: Processes already blocked on a child.  The
                branch works on its own copy.

        Returns:
            The branch's logs and the clock value it finished at.  A
            branch that hits an error ends early with a diagnostic.

        """
        branch = _Branch(
            lines=[line for line in lines if line.strip()],
            pcb=pcb,
            wait_queue=list(wait_queue),
            result=SimulationResult(final_time=time),
        )
        try:
            self._interpret(branch)
        except SimulationError as e:
            self._record_fatal(branch.result, e, pid=pcb.pid)
        return branch.result

    def _interpret(self, branch: _Branch) -> None:
        while branch.index < len(branch.lines) and not branch.finished:
            event = parse_trace(branch.lines[branch.index])
            branch.index += 1
            match event.activity:
                case Activity.CPU:
                    self._emit(branch, event.operand, "CPU Burst")
                case Activity.SYSCALL:
                    self._service(branch, event, "SYSCALL ISR")
                case Activity.END_IO:
                    self._service(branch, event, "ENDIO ISR")
                case Activity.FORK:
                    self._fork(branch, event)
                case Activity.EXEC:
                    self._exec(branch, event)
                case Activity.IF_CHILD | Activity.IF_PARENT | Activity.ENDIF:
                    pass
                case _:
                    assert_never(event.activity)

    def _emit(self, branch: _Branch, duration: int, label: str) -> None:
        branch.result.execution.append(ExecutionRecord(branch.clock, duration, label))
        branch.clock += duration

    def _enter_kernel(self, branch: _Branch, device: int) -> None:
        records, branch.clock = enter_interrupt(
            branch.clock, device, CONTEXT_SAVE_COST, self._config.vectors
        )
        branch.result.execution.extend(records)

    def _service(self, branch: _Branch, event: TraceEvent, label: str) -> None:
        """Run an interrupt service routine for SYSCALL or END_IO."""
        self._enter_kernel(branch, event.operand)
        self._emit(branch, self._config.delay(event.operand), label)
        self._emit(branch, IRET_COST, "IRET")

    def _snapshot(self, branch: _Branch, event: TraceEvent, running: PCB) -> None:
        branch.result.status.append(
            StatusSnapshot(
                time=branch.clock,
                trace=str(event),
                table=render_pcb_table(running, branch.wait_queue),
                pid=branch.pcb.pid,
            )
        )

    def _fork(self, branch: _Branch, event: TraceEvent) -> None:
        """Clone the PCB, run the child's branch, then resume the parent.

        The child shares the parent's partition number; nothing new is
        allocated until the child EXECs.
        """
        fork_index = branch.index - 1
        self._enter_kernel(branch, VECTOR_FORK)
        self._emit(branch, event.operand, "cloning the PCB")
        self._emit(branch, 0, "scheduler called")
        self._emit(branch, IRET_COST, "IRET")

        parent = branch.pcb
        child = parent.fork(self.next_pid())
        branch.wait_queue.append(parent.snapshot())
        self._snapshot(branch, event, child)
        self._logger.log(
            LogLevel.INFO,
            f"Process {parent.pid} forked child {child.pid}",
            source="fork",
            pid=parent.pid,
            time=branch.clock,
        )

        carved = carve_child_branch(branch.lines, fork_index)
        child_result = self.simulate(carved.lines, time=branch.clock, pcb=child, wait_queue=[])
        branch.result.extend(child_result)
        self._pool.release(child)
        branch.index = carved.resume

    def _exec(self, branch: _Branch, event: TraceEvent) -> None:
        """Replace the process image and run the new program's trace."""
        branch.finished = True
        program = event.program
        assert program is not None  # guaranteed by parse_trace  # noqa: S101

        self._enter_kernel(branch, VECTOR_EXEC)
        size = self._config.program_size(program)
        self._emit(branch, event.operand, f"Program is {size} Mb large")
        self._emit(branch, size * LOAD_TICKS_PER_MB, "loading program into memory")

        pcb = branch.pcb
        self._pool.release(pcb)
        pcb.exec_image(program, size)
        if not self._pool.allocate(pcb):
            msg = f"Memory allocation failed for {program} ({size} Mb)"
            raise AllocationError(msg)

        self._emit(branch, self._random_delay(), "marking partition as occupied")
        self._emit(branch, self._random_delay(), "updating PCB")
        self._emit(branch, 0, "scheduler called")
        self._emit(branch, IRET_COST, "IRET")
        self._snapshot(branch, event, pcb)
        self._logger.log(
            LogLevel.INFO,
            f"Process {pcb.pid} exec'd {program} into partition {pcb.partition}",
            source="exec",
            pid=pcb.pid,
            time=branch.clock,
        )

        lines = self._trace_source.load(program)
        self._logger.log(
            LogLevel.DEBUG,
            f"Loaded {len(lines)} trace lines for {program}",
            source="loader",
            pid=pcb.pid,
            time=branch.clock,
        )
        image_result = self.simulate(
            lines, time=branch.clock, pcb=pcb, wait_queue=branch.wait_queue
        )
        branch.result.extend(image_result)

    def _random_delay(self) -> int:
        return self._rng.randint(EXEC_DELAY_MIN, EXEC_DELAY_MAX)

    def _record_fatal(self, result: SimulationResult, error: SimulationError, *, pid: int) -> None:
        entry = FatalEntry(
            time=result.final_time,
            kind=type(error).__name__,
            message=str(error),
            pid=pid,
        )
        result.status.append(entry)
        self._logger.log(
            LogLevel.ERROR,
            f"{entry.kind}: {entry.message} (branch of process {pid} stopped)",
            source="simulator",
            pid=pid,
            time=result.final_time,
        )
