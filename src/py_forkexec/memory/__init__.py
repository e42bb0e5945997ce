"""Memory subsystem — fixed partitions for program images.

Re-exports public symbols so callers can write::

    from py_forkexec.memory import PartitionPool
"""

from py_forkexec.memory.partitions import DEFAULT_PARTITION_SIZES, Partition, PartitionPool

__all__ = [
    "DEFAULT_PARTITION_SIZES",
    "Partition",
    "PartitionPool",
]
