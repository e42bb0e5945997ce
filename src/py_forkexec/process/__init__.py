"""Process subsystem — the PCB and its rendering.

Re-exports public symbols so callers can write::

    from py_forkexec.process import PCB, render_pcb_table
"""

from py_forkexec.process.pcb import (
    INIT_PID,
    NO_PARENT,
    NO_PARTITION,
    PCB,
    init_process,
    render_pcb_table,
)

__all__ = [
    "INIT_PID",
    "NO_PARENT",
    "NO_PARTITION",
    "PCB",
    "init_process",
    "render_pcb_table",
]
