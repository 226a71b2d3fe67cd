"""Render service layer for single-responsibility components."""

from .boundary_service import BoundaryService, LineIndex
from .edition_render_service import EditionRenderService
from .incremental_cache_service import IncrementalCacheService, IncrementalCacheSnapshot
from .leaf_renderer_service import LeafRendererService
from .markup_tree_service import MarkupTreeService
from .partition_merge_service import PartitionMergeService
from .partition_service import PartitionService
from .render_gate_service import RenderGateService

__all__ = [
    "BoundaryService",
    "EditionRenderService",
    "IncrementalCacheService",
    "IncrementalCacheSnapshot",
    "LeafRendererService",
    "LineIndex",
    "MarkupTreeService",
    "PartitionMergeService",
    "PartitionService",
    "RenderGateService",
]
