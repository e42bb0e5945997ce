"""Kernel log for the simulated machine.

The execution and system-status logs are what a run produces.  This
log records what the simulator did to produce them: init booted into a
partition, a process forked a child, an image was exec'd and its trace
loaded, a branch was stopped by an error.  Each entry carries the PID
it concerns and the simulated clock value, so the log reads like a
``dmesg`` of the run.

Callers read it through ``Simulator.dmesg()``, usually filtered by
level: the CLI prints the ERROR entries for every run and the full log
with ``--verbose``.
"""

from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """Severity levels for log entries."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """A single structured log record.

    Attributes:
        level: The severity of this event.
        message: A human-readable description of what happened.
        source: The subsystem that generated the event (e.g. "fork").
        pid: The simulated process the event concerns (-1 = none).
        time: The simulated clock value when the event happened.

    """

    level: LogLevel
    message: str
    source: str
    pid: int = -1
    time: int = 0

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message``."""
        return f"[{self.level.name}] {self.source}: {self.message}"


class Logger:
    """Append-only log buffer with filtering."""

    def __init__(self) -> None:
        """Create an empty logger."""
        self._entries: list[LogEntry] = []

    @property
    def entries(self) -> list[LogEntry]:
        """Return all log entries in the order they were logged."""
        return list(self._entries)

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        source: str,
        pid: int = -1,
        time: int = 0,
    ) -> None:
        """Append a new entry to the log.

        Args:
            level: Severity of the event.
            message: Human-readable event description.
            source: Subsystem that generated the event.
            pid: Simulated process the event concerns.
            time: Simulated clock value at the event.

        """
        self._entries.append(
            LogEntry(level=level, message=message, source=source, pid=pid, time=time)
        )

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
    ) -> list[LogEntry]:
        """Return entries matching the given criteria.

        Args:
            min_level: If set, only return entries at or above this level.
            source: If set, only return entries from this source.

        Returns:
            A filtered list of log entries.

        """
        result = self._entries
        if min_level is not None:
            result = [e for e in result if e.level >= min_level]
        if source is not None:
            result = [e for e in result if e.source == source]
        return result if result is not self._entries else list(result)
