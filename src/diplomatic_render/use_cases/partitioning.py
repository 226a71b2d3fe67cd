from __future__ import annotations

from typing import Sequence

from ..domain.models import Dimension, Leaf, Line, LineMarkup, MergeStep, Partition
from .services.boundary_service import AdjacencyOracle
from .services.markup_tree_service import MarkupTreeService
from .services.partition_merge_service import PartitionMergeService
from .services.partition_service import PartitionService

# Module facade. Consumers import these functions, the logic is owned by the service classes.
_PARTITION_SERVICE = PartitionService()
_MERGE_SERVICE = PartitionMergeService(_PARTITION_SERVICE)
_TREE_SERVICE = MarkupTreeService(partition_service=_PARTITION_SERVICE, merge_service=_MERGE_SERVICE)


def build_partition(sequence: Sequence[Leaf], dimension: Dimension) -> Partition:
    return _PARTITION_SERVICE.build_partition(sequence, dimension)


def merge_partitions(first: Partition, second: Partition) -> list[MergeStep]:
    return _MERGE_SERVICE.merge(first, second)


def build_line_markup(line: Line, oracle: AdjacencyOracle | None = None) -> LineMarkup:
    return _TREE_SERVICE.build_line(line, oracle)
