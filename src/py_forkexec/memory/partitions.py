"""Memory partitions — fixed-partition allocation for program images.

Physical memory is carved at boot into a handful of **partitions** of
fixed, unequal capacity.  A program image occupies exactly one
partition for as long as it is loaded; the unused tail of the
partition is wasted (internal fragmentation).

Why best-fit?
    With unequal partitions the choice matters.  Best-fit hands each
    image the *smallest* free partition that can hold it, keeping the
    large partitions free for large images.  The classic layout lists
    partitions from largest to smallest, so scanning from the end and
    taking the first fit is the same policy.

Ownership:
    A partition records which PID owns it.  A forked child starts out
    with its parent's partition number (no copy is made); it only ever
    owns a partition of its own after an EXEC.  Releasing a PCB frees
    the partition only if that PCB owns it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from py_forkexec.process.pcb import NO_PARTITION

if TYPE_CHECKING:
    from collections.abc import Iterable

    from py_forkexec.process.pcb import PCB

DEFAULT_PARTITION_SIZES: tuple[int, ...] = (40, 25, 15, 10, 8, 2)


@dataclass
class Partition:
    """One fixed-size region of memory.

    Attributes:
        number: 1-based partition number.
        capacity: Size in Mb.
        occupant: Name of the program loaded here, or None if free.
        owner_pid: PID of the process that owns the partition.

    """

    number: int
    capacity: int
    occupant: str | None = None
    owner_pid: int | None = None

    @property
    def is_free(self) -> bool:
        """Return True if no image occupies this partition."""
        return self.owner_pid is None


class PartitionPool:
    """The machine's memory, as an ordered set of partitions.

    The pool is shared by every branch of a simulation and is only
    mutated through ``allocate()`` and ``release()``.
    """

    def __init__(self, sizes: Iterable[int] = DEFAULT_PARTITION_SIZES) -> None:
        """Create a pool with one partition per capacity, numbered from 1.

        Raises:
            ValueError: If a capacity is not positive.

        """
        self._partitions: list[Partition] = []
        for number, capacity in enumerate(sizes, start=1):
            if capacity <= 0:
                msg = f"Partition {number} has non-positive capacity {capacity}"
                raise ValueError(msg)
            self._partitions.append(Partition(number=number, capacity=capacity))

    @property
    def partitions(self) -> list[Partition]:
        """Return the partitions in number order."""
        return list(self._partitions)

    @property
    def free_count(self) -> int:
        """Return the number of free partitions."""
        return sum(1 for p in self._partitions if p.is_free)

    def get(self, number: int) -> Partition:
        """Return a partition by number.

        Raises:
            KeyError: If no partition has that number.

        """
        if not 1 <= number <= len(self._partitions):
            msg = f"Partition {number} does not exist"
            raise KeyError(msg)
        return self._partitions[number - 1]

    def allocate(self, pcb: PCB) -> bool:
        """Give the PCB the smallest free partition that fits its image.

        Args:
            pcb: The process whose image needs loading.  On success its
                ``partition`` field is set.

        Returns:
            True on success, False (pool untouched) if nothing fits.

        """
        candidates = [p for p in self._partitions if p.is_free and p.capacity >= pcb.size]
        if not candidates:
            return False
        best = min(candidates, key=lambda p: (p.capacity, p.number))
        best.occupant = pcb.program
        best.owner_pid = pcb.pid
        pcb.partition = best.number
        return True

    def release(self, pcb: PCB) -> None:
        """Detach the PCB from its partition, freeing it if owned.

        Releasing a PCB that holds no partition is a no-op, so calling
        this twice is safe.
        """
        if pcb.partition == NO_PARTITION:
            return
        partition = self.get(pcb.partition)
        if partition.owner_pid == pcb.pid:
            partition.occupant = None
            partition.owner_pid = None
        pcb.partition = NO_PARTITION

    def snapshot(self) -> list[dict[str, object]]:
        """Return info about every partition, for display."""
        return [
            {
                "number": p.number,
                "capacity": p.capacity,
                "occupant": p.occupant,
                "owner_pid": p.owner_pid,
            }
            for p in self._partitions
        ]
