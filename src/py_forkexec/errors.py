"""Error hierarchy for the trace simulator.

Every failure the interpreter can hit while running a branch derives
from ``SimulationError``.  The interpreter catches these at the branch
boundary: the branch stops, a diagnostic is recorded, and the parent
branch carries on.  Nothing above the branch boundary ever sees them.

``ConfigError`` is different — it belongs to the outer layers (CLI and
web app) and means the machine could not even be described.
"""


class SimulationError(RuntimeError):
    """Raise when a branch of the simulation cannot continue."""


class TraceParseError(SimulationError):
    """Raise when a trace line has an unknown tag or a malformed operand."""


class OutOfRangeVectorError(SimulationError):
    """Raise when a device number falls outside the vector or delay table."""


class UnknownProgramError(SimulationError):
    """Raise when EXEC names a program missing from the external files."""


class AllocationError(SimulationError):
    """Raise when no free memory partition is large enough for an image."""


class TraceLoadError(SimulationError):
    """Raise when a program's trace cannot be read."""


class ConfigError(RuntimeError):
    """Raise when the machine configuration cannot be loaded.

    Examples: missing vector table, non-numeric ISR delay, bad JSON.
    """
