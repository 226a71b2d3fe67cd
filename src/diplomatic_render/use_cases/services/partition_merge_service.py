from __future__ import annotations

from ...domain.errors import PartitionMismatchError
from ...domain.models import MergeStep, Partition, Run
from .partition_service import PartitionService


class _RunCursor:
    """Read position over one partition's runs.

    A split remainder replaces the current run locally; the partition itself
    is never modified.
    """

    def __init__(self, partition: Partition) -> None:
        self.partition = partition
        self.run_index = 0
        self._pending: Run | None = None

    @property
    def exhausted(self) -> bool:
        return self._pending is None and self.run_index >= len(self.partition.runs)

    def current(self) -> Run:
        if self._pending is not None:
            return self._pending
        if self.run_index >= len(self.partition.runs):
            raise PartitionMismatchError(
                f"{self.partition.dimension.value} partition ran out of runs before the line was covered"
            )
        return self.partition.runs[self.run_index]

    def advance(self) -> None:
        if self._pending is not None:
            self._pending = None
        self.run_index += 1

    def replace_current(self, remainder: Run) -> None:
        # The split head is consumed, the remainder becomes the next run to read.
        self._pending = remainder


class PartitionMergeService:
    """Reconciles two overlapping run partitions of one line into nested merge steps."""

    def __init__(self, partition_service: PartitionService | None = None) -> None:
        self._partitions = partition_service or PartitionService()

    def merge(self, first: Partition, second: Partition) -> list[MergeStep]:
        """Merge ``first`` and ``second`` into merge steps covering the line in order.

        The locally longer run becomes the outer run of a step; runs of the
        other partition tile it, and an inner run that crosses the outer run's
        end is split so the step stays nested. On equal lengths ``first`` is
        the outer partition.
        """
        self._check_preconditions(first, second)
        steps: list[MergeStep] = []
        cursor_a = _RunCursor(first)
        cursor_b = _RunCursor(second)

        while not cursor_a.exhausted or not cursor_b.exhausted:
            run_a = cursor_a.current()
            run_b = cursor_b.current()
            if len(run_a) >= len(run_b):
                outer, inner = cursor_a, cursor_b
            else:
                outer, inner = cursor_b, cursor_a

            outer_run = outer.current()
            first_inner = inner.current()
            inner_runs = [first_inner]
            consumed = len(first_inner)
            inner.advance()

            while consumed < len(outer_run):
                remaining = len(outer_run) - consumed
                piece = inner.current()
                if len(piece) > remaining:
                    piece, remainder = piece.split(remaining)
                    inner.replace_current(remainder)
                else:
                    inner.advance()
                inner_runs.append(piece)
                consumed += len(piece)

            outer.advance()
            steps.append(
                MergeStep(
                    outer_dimension=outer_run.dimension,
                    outer_label=outer_run.label,
                    inner_dimension=first_inner.dimension,
                    inner_runs=tuple(inner_runs),
                    outer_run=outer_run,
                )
            )
        return steps

    @staticmethod
    def count_splits(steps: list[MergeStep], first: Partition, second: Partition) -> int:
        # Every split turns one source run into two emitted pieces.
        pieces = sum(len(step.inner_runs) + 1 for step in steps)
        return pieces - len(first.runs) - len(second.runs)

    def _check_preconditions(self, first: Partition, second: Partition) -> None:
        if first.dimension is second.dimension:
            raise PartitionMismatchError(f"Both partitions annotate {first.dimension.value}")
        sequence = first.leaves()
        if second.leaves() != sequence:
            raise PartitionMismatchError(
                f"Partitions cover different sequences ({first.size} and {second.size} leaves)"
            )
        self._partitions.validate(first, sequence)
        self._partitions.validate(second, sequence)
