"""Interrupt prologue — the fixed cost of entering a handler.

Every SYSCALL, END_IO, FORK and EXEC starts the same way.  Before any
handler code runs the CPU must:

1. **Switch to kernel mode** — flip the privilege bit (1 tick).
2. **Save the context** — push the registers of the interrupted
   process (a configurable cost, 10 ticks in practice).
3. **Find the vector** — look up the device's slot in the interrupt
   vector table to learn where its handler lives (1 tick).

Key concepts:
    - **Vector** — a numbered slot in the vector table.  Each device
      is assigned one; the slot holds the handler's memory address.
    - **Vector table** — read-only after boot.  Asking for a slot the
      table does not have is a hard error, never clamped.

FORK and EXEC are system calls with fixed, well-known vectors.
"""

from __future__ import annotations

from dataclasses import dataclass

from py_forkexec.errors import OutOfRangeVectorError
from py_forkexec.records import ExecutionRecord

CONTEXT_SAVE_COST = 10

# Well-known vector numbers for the process-control system calls
VECTOR_FORK = 2
VECTOR_EXEC = 3

_MODE_SWITCH_COST = 1
_VECTOR_LOOKUP_COST = 1


@dataclass(frozen=True)
class VectorTable:
    """The interrupt vector table, indexed by device number.

    Each slot holds the handler's address as it appears in the table
    file (e.g. ``"0X01E3"``).
    """

    addresses: tuple[str, ...]

    def __len__(self) -> int:
        """Return the number of slots."""
        return len(self.addresses)

    def address(self, device: int) -> str:
        """Return the handler address for a device.

        Raises:
            OutOfRangeVectorError: If the device has no slot.

        """
        if not 0 <= device < len(self.addresses):
            msg = f"Vector {device} is outside the vector table (size {len(self.addresses)})"
            raise OutOfRangeVectorError(msg)
        return self.addresses[device]


def enter_interrupt(
    clock: int,
    device: int,
    context_save_cost: int,
    vectors: VectorTable,
) -> tuple[list[ExecutionRecord], int]:
    """Simulate the prologue of an interrupt or trap.

    Args:
        clock: Clock value when the interrupt is taken.
        device: Vector number to look up.
        context_save_cost: Ticks spent saving the context.
        vectors: The machine's vector table.

    Returns:
        The three prologue records and the clock once they are done.

    Raises:
        OutOfRangeVectorError: If the device is outside the table.

    """
    address = vectors.address(device)
    records = [ExecutionRecord(clock, _MODE_SWITCH_COST, "switch to kernel mode")]
    clock += _MODE_SWITCH_COST
    records.append(ExecutionRecord(clock, context_save_cost, "context saved"))
    clock += context_save_cost
    records.append(
        ExecutionRecord(
            clock,
            _VECTOR_LOOKUP_COST,
            f"find vector {device} in memory position {address}",
        )
    )
    clock += _VECTOR_LOOKUP_COST
    return records, clock
