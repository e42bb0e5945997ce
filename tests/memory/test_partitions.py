"""Tests for fixed-partition memory allocation.

Memory is six partitions of 40, 25, 15, 10, 8 and 2 Mb by default.
Images go to the smallest free partition that fits (best-fit), and a
partition is only freed by the process that owns it.
"""

import pytest

from py_forkexec.memory import DEFAULT_PARTITION_SIZES, PartitionPool
from py_forkexec.process import NO_PARTITION, PCB

PARTITION_COUNT = 6
SMALLEST = 6
TEN_MB = 4


def _pcb(pid: int = 1, size: int = 10, program: str = "program1") -> PCB:
    """Create a PCB that holds no partition yet."""
    return PCB(pid=pid, parent_pid=0, program=program, size=size)


class TestPoolCreation:
    """Verify the initial state of the pool."""

    def test_default_layout(self) -> None:
        """The default pool has six partitions numbered from 1."""
        pool = PartitionPool()
        capacities = [p.capacity for p in pool.partitions]
        assert capacities == list(DEFAULT_PARTITION_SIZES)
        assert [p.number for p in pool.partitions] == list(range(1, PARTITION_COUNT + 1))

    def test_all_free_initially(self) -> None:
        """Every partition starts free."""
        assert PartitionPool().free_count == PARTITION_COUNT

    def test_custom_sizes(self) -> None:
        """A pool can be built from any capacities."""
        pool = PartitionPool([5, 5])
        expected = 2
        assert len(pool.partitions) == expected

    def test_non_positive_capacity_rejected(self) -> None:
        """Zero-sized partitions make no sense."""
        with pytest.raises(ValueError, match="non-positive"):
            PartitionPool([10, 0])

    def test_get_unknown_partition(self) -> None:
        """Partition numbers are 1-based and bounded."""
        with pytest.raises(KeyError):
            PartitionPool().get(0)


class TestAllocate:
    """Verify best-fit allocation."""

    def test_best_fit_exact(self) -> None:
        """A 10 Mb image lands in the 10 Mb partition."""
        pool = PartitionPool()
        pcb = _pcb(size=10)
        assert pool.allocate(pcb)
        assert pcb.partition == TEN_MB

    def test_best_fit_smallest_that_fits(self) -> None:
        """A 1 Mb image lands in the 2 Mb partition."""
        pool = PartitionPool()
        pcb = _pcb(size=1)
        assert pool.allocate(pcb)
        assert pcb.partition == SMALLEST

    def test_marks_partition_occupied(self) -> None:
        """The chosen partition records its occupant and owner."""
        pool = PartitionPool()
        pcb = _pcb(pid=7, size=10)
        pool.allocate(pcb)
        partition = pool.get(pcb.partition)
        assert partition.occupant == "program1"
        assert partition.owner_pid == 7  # noqa: PLR2004
        assert not partition.is_free

    def test_skips_occupied_partitions(self) -> None:
        """The next best fit is used once the best is taken."""
        pool = PartitionPool()
        first, second = _pcb(pid=1, size=10), _pcb(pid=2, size=10)
        pool.allocate(first)
        pool.allocate(second)
        expected = 3
        assert second.partition == expected

    def test_ties_go_to_lowest_number(self) -> None:
        """Equal capacities are taken in number order."""
        pool = PartitionPool([5, 5, 5])
        pcb = _pcb(size=5)
        pool.allocate(pcb)
        assert pcb.partition == 1

    def test_nothing_fits(self) -> None:
        """Too large an image fails without touching the pool."""
        pool = PartitionPool()
        pcb = _pcb(size=41)
        assert not pool.allocate(pcb)
        assert pcb.partition == NO_PARTITION
        assert pool.free_count == PARTITION_COUNT

    def test_pool_exhausted(self) -> None:
        """Once every partition is taken, allocation fails."""
        pool = PartitionPool([4, 4])
        assert pool.allocate(_pcb(pid=1, size=1))
        assert pool.allocate(_pcb(pid=2, size=1))
        assert not pool.allocate(_pcb(pid=3, size=1))


class TestRelease:
    """Verify releasing partitions."""

    def test_release_frees_owned_partition(self) -> None:
        """Releasing the owner frees the partition."""
        pool = PartitionPool()
        pcb = _pcb(size=10)
        pool.allocate(pcb)
        pool.release(pcb)
        assert pcb.partition == NO_PARTITION
        assert pool.free_count == PARTITION_COUNT
        assert pool.get(TEN_MB).occupant is None

    def test_release_is_idempotent(self) -> None:
        """Releasing twice leaves the pool unchanged."""
        pool = PartitionPool()
        pcb = _pcb(size=10)
        pool.allocate(pcb)
        pool.release(pcb)
        before = pool.snapshot()
        pool.release(pcb)
        assert pool.snapshot() == before
        assert pcb.partition == NO_PARTITION

    def test_release_unallocated_is_noop(self) -> None:
        """A PCB that never had memory can be released safely."""
        pool = PartitionPool()
        pool.release(_pcb())
        assert pool.free_count == PARTITION_COUNT

    def test_forked_child_does_not_free_parent_memory(self) -> None:
        """A child sharing its parent's partition only drops its reference."""
        pool = PartitionPool()
        parent = _pcb(pid=0, size=1, program="init")
        pool.allocate(parent)
        child = parent.fork(1)
        pool.release(child)
        assert child.partition == NO_PARTITION
        assert parent.partition == SMALLEST
        assert pool.get(SMALLEST).owner_pid == 0

    def test_snapshot_rows(self) -> None:
        """The snapshot lists every partition."""
        rows = PartitionPool().snapshot()
        assert len(rows) == PARTITION_COUNT
        assert rows[0] == {"number": 1, "capacity": 40, "occupant": None, "owner_pid": None}
