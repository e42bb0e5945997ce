"""py-forkexec — an interrupt, fork, and exec simulator.

Re-exports the main entry points so callers can write::

    from py_forkexec import MachineConfig, Simulator
"""

from py_forkexec.config import MachineConfig
from py_forkexec.errors import (
    AllocationError,
    ConfigError,
    OutOfRangeVectorError,
    SimulationError,
    TraceLoadError,
    TraceParseError,
    UnknownProgramError,
)
from py_forkexec.interrupts import VectorTable
from py_forkexec.records import ExecutionRecord, FatalEntry, SimulationResult, StatusSnapshot
from py_forkexec.simulator import Simulator
from py_forkexec.sources import DirectoryTraceSource, MappingTraceSource

__all__ = [
    "AllocationError",
    "ConfigError",
    "DirectoryTraceSource",
    "ExecutionRecord",
    "FatalEntry",
    "MachineConfig",
    "MappingTraceSource",
    "OutOfRangeVectorError",
    "SimulationError",
    "SimulationResult",
    "Simulator",
    "StatusSnapshot",
    "TraceLoadError",
    "TraceParseError",
    "UnknownProgramError",
    "VectorTable",
]
