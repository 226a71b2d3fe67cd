from __future__ import annotations

from typing import Callable, Sequence

from ...domain.errors import PartitionMismatchError
from ...domain.models import Dimension, Label, Leaf, Partition, Run, is_annotated


class PartitionService:
    """Groups a line's leaves into maximal runs per annotation dimension."""

    def build_partition(self, sequence: Sequence[Leaf], dimension: Dimension) -> Partition:
        return Partition(dimension=dimension, runs=tuple(self.build_runs(sequence, dimension.label_of, dimension)))

    @staticmethod
    def build_runs(
        sequence: Sequence[Leaf],
        label_of: Callable[[Leaf], Label],
        dimension: Dimension,
    ) -> list[Run]:
        runs: list[Run] = []
        current: list[Leaf] = []
        current_label: Label = None
        start = 0
        for offset, leaf in enumerate(sequence):
            label = label_of(leaf)
            # Only equal positive values extend a run; unannotated leaves stay alone.
            if current and is_annotated(label) and label == current_label:
                current.append(leaf)
                continue
            if current:
                runs.append(Run(dimension, current_label, start, tuple(current)))
            current = [leaf]
            current_label = label
            start = offset
        if current:
            runs.append(Run(dimension, current_label, start, tuple(current)))
        return runs

    @staticmethod
    def validate(partition: Partition, sequence: Sequence[Leaf]) -> None:
        """Check that ``partition`` is a gapless, non-overlapping cover of ``sequence``."""
        expected_start = 0
        for position, run in enumerate(partition.runs):
            if run.dimension is not partition.dimension:
                raise PartitionMismatchError(
                    f"Run {position} belongs to {run.dimension.value}, partition is {partition.dimension.value}"
                )
            if run.start != expected_start:
                raise PartitionMismatchError(
                    f"{partition.dimension.value} run {position} starts at {run.start}, expected {expected_start}"
                )
            if tuple(sequence[run.start : run.stop]) != run.leaves:
                raise PartitionMismatchError(
                    f"{partition.dimension.value} run {position} does not match the sequence at {run.start}"
                )
            expected_start = run.stop
        if expected_start != len(sequence):
            raise PartitionMismatchError(
                f"{partition.dimension.value} partition covers {expected_start} of {len(sequence)} leaves"
            )

    @staticmethod
    def check_indices(sequence: Sequence[Leaf]) -> None:
        previous: int | None = None
        for leaf in sequence:
            if previous is not None and leaf.index <= previous:
                raise PartitionMismatchError(
                    f"Leaf {leaf.id!r} has index {leaf.index}, which does not follow {previous}"
                )
            previous = leaf.index
