"""Tests for rendering and writing the two output logs."""

from pathlib import Path

from py_forkexec.output import (
    EXECUTION_FILE,
    STATUS_FILE,
    format_execution,
    format_status,
    write_output,
    write_results,
)
from py_forkexec.records import ExecutionRecord, FatalEntry, SimulationResult, StatusSnapshot

_RECORDS = [ExecutionRecord(0, 5, "CPU Burst"), ExecutionRecord(5, 1, "switch to kernel mode")]
_SNAPSHOT = StatusSnapshot(time=24, trace="FORK, 10", table="+--+\n| 1 |\n+--+\n")
_FATAL = FatalEntry(time=30, kind="UnknownProgramError", message="no such program")


class TestFormatting:
    """Verify the text form of each log."""

    def test_execution_lines(self) -> None:
        """One ``time, duration, label`` line per record."""
        assert format_execution(_RECORDS) == "0, 5, CPU Burst\n5, 1, switch to kernel mode\n"

    def test_empty_execution(self) -> None:
        """No records means an empty file."""
        assert format_execution([]) == ""

    def test_status_blocks(self) -> None:
        """Snapshots keep their table; diagnostics get their own line."""
        assert format_status([_SNAPSHOT, _FATAL]) == (
            "time: 24; current trace: FORK, 10\n+--+\n| 1 |\n+--+\n"
            "time: 30; ERROR! UnknownProgramError: no such program\n"
        )


class TestWriting:
    """Verify writing logs to disk."""

    def test_write_output_creates_directories(self, tmp_path: Path) -> None:
        """Missing parent directories are created."""
        path = write_output("hello\n", tmp_path / "out" / "log.txt")
        assert path.read_text() == "hello\n"

    def test_write_results(self, tmp_path: Path) -> None:
        """Both logs are written under their fixed names."""
        result = SimulationResult(execution=list(_RECORDS), status=[_SNAPSHOT], final_time=6)
        execution, status = write_results(result, tmp_path)
        assert execution == tmp_path / EXECUTION_FILE
        assert status == tmp_path / STATUS_FILE
        assert execution.read_text().startswith("0, 5, CPU Burst\n")
        assert status.read_text().startswith("time: 24; current trace: FORK, 10\n")
