from __future__ import annotations

from typing import Callable, Optional, Sequence

from ...domain.models import (
    Container,
    Dimension,
    Leaf,
    LeafNode,
    Line,
    LineMarkup,
    MarkupNode,
    MergeStep,
    RenderedContent,
    Run,
    is_annotated,
)
from .boundary_service import AdjacencyOracle, BoundaryService, LineIndex
from .leaf_renderer_service import LeafRendererService
from .partition_merge_service import PartitionMergeService
from .partition_service import PartitionService

LeafRenderer = Callable[[Leaf], Optional[RenderedContent]]


class MarkupTreeService:
    """Builds the nested damage/unclear span tree of one line."""

    def __init__(
        self,
        *,
        partition_service: PartitionService | None = None,
        merge_service: PartitionMergeService | None = None,
        leaf_renderer: LeafRenderer | None = None,
    ) -> None:
        self._partitions = partition_service or PartitionService()
        self._merger = merge_service or PartitionMergeService(self._partitions)
        self._render_leaf = leaf_renderer or LeafRendererService(nest=self.build_fragment)

    def build_line(self, line: Line, oracle: AdjacencyOracle | None = None) -> LineMarkup:
        self._partitions.check_indices(line.leaves)
        if oracle is None:
            oracle = LineIndex.from_leaves(line.id, line.leaves)
        damage = self._partitions.build_partition(line.leaves, Dimension.DAMAGE)
        unclear = self._partitions.build_partition(line.leaves, Dimension.UNCLEAR)
        steps = self._merger.merge(damage, unclear)
        boundaries = BoundaryService(oracle, line.id)
        return LineMarkup(
            line_id=line.id,
            n=line.n,
            children=self.build_nodes(steps, boundaries),
            leaf_count=len(line.leaves),
            steps=len(steps),
            splits=self._merger.count_splits(steps, damage, unclear),
            notes=line.notes,
        )

    def build_fragment(self, parent: Leaf, leaves: Sequence[Leaf]) -> tuple[MarkupNode, ...]:
        """Span tree of a leaf's children, with adjacency scoped to those children."""
        damage = self._partitions.build_partition(leaves, Dimension.DAMAGE)
        unclear = self._partitions.build_partition(leaves, Dimension.UNCLEAR)
        steps = self._merger.merge(damage, unclear)
        boundaries = BoundaryService(LineIndex.from_leaves(parent.id, leaves), parent.id)
        return self.build_nodes(steps, boundaries)

    def build_nodes(self, steps: list[MergeStep], boundaries: BoundaryService) -> tuple[MarkupNode, ...]:
        nodes: list[MarkupNode] = []
        for step in steps:
            inner_nodes: list[MarkupNode] = []
            for run in step.inner_runs:
                leaf_nodes = [LeafNode(leaf=leaf, content=self._render_leaf(leaf)) for leaf in run.leaves]
                inner_nodes.extend(self._wrap(run, leaf_nodes, boundaries))
            nodes.extend(self._wrap(step.outer_run, inner_nodes, boundaries))
        return tuple(nodes)

    @staticmethod
    def _wrap(run: Run, children: list[MarkupNode], boundaries: BoundaryService) -> list[MarkupNode]:
        # Unannotated runs add no span level of their own.
        if not is_annotated(run.label):
            return children
        opening, closing = boundaries.delimiters(run)
        return [
            Container(
                dimension=run.dimension,
                label=run.label,
                children=tuple(children),
                open_delimiter=opening,
                close_delimiter=closing,
            )
        ]
