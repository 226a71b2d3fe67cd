from __future__ import annotations


class PartitionMismatchError(ValueError):
    """Raised when partitions or leaf sequences break the merge preconditions.

    Callers are expected to hand in two partitions of the very same line. Any
    breach is a programming error upstream and is never recovered from.
    """
