"""Trace sources — where EXEC finds the trace of a new program image.

When a process EXECs ``program1`` the simulator needs that program's
own trace.  On disk this is ``program1.txt`` next to the main trace;
in tests and in the web API it is simply a dict of line lists.

Blank lines are dropped on load: a trailing newline must not turn into
an unparseable empty event.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from py_forkexec.errors import TraceLoadError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


class TraceSource(Protocol):
    """Anything that can produce the trace lines of a named program."""

    def load(self, program: str) -> list[str]:
        """Return the program's trace lines.

        Raises:
            TraceLoadError: If the program's trace is unavailable.

        """
        ...


def read_trace_file(path: Path) -> list[str]:
    """Read a trace file, dropping blank lines.

    Raises:
        TraceLoadError: If the file cannot be read.

    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        msg = f"Could not open {path}: {e}"
        raise TraceLoadError(msg) from e
    return [line for line in text.splitlines() if line.strip()]


class DirectoryTraceSource:
    """Load ``<name><suffix>`` files from a directory."""

    def __init__(self, root: Path, *, suffix: str = ".txt") -> None:
        """Create a source rooted at a directory.

        Args:
            root: Directory holding the program traces.
            suffix: File extension appended to the program name.

        """
        self._root = Path(root)
        self._suffix = suffix

    @property
    def root(self) -> Path:
        """Return the directory traces are read from."""
        return self._root

    def path_for(self, program: str) -> Path:
        """Return the file a program's trace is expected in."""
        return self._root / f"{program}{self._suffix}"

    def load(self, program: str) -> list[str]:
        """Read the program's trace file."""
        return read_trace_file(self.path_for(program))


class MappingTraceSource:
    """Serve traces from an in-memory mapping of program name → lines."""

    def __init__(self, traces: Mapping[str, Sequence[str]] | None = None) -> None:
        """Create a source from a mapping (empty by default)."""
        self._traces = {name: list(lines) for name, lines in (traces or {}).items()}

    def add(self, program: str, lines: Sequence[str]) -> None:
        """Register or replace a program's trace."""
        self._traces[program] = list(lines)

    def load(self, program: str) -> list[str]:
        """Return a copy of the registered trace."""
        lines = self._traces.get(program)
        if lines is None:
            msg = f"No trace registered for program {program!r}"
            raise TraceLoadError(msg)
        return [line for line in lines if line.strip()]
