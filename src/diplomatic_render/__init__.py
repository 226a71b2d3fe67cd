"""Nested damage/unclear span rendering for diplomatic transcriptions."""

from .pipeline import run_pipeline
from .use_cases.partitioning import build_line_markup, build_partition, merge_partitions
from .use_cases.rendering import render_edition
from .use_cases.render_gates import RenderGateConfig, run_render_gates
from .domain.errors import PartitionMismatchError
from .domain.models import (
    Container,
    DamageLevel,
    Dimension,
    Edition,
    Leaf,
    LeafNode,
    Line,
    LineMarkup,
    MergeStep,
    Partition,
    Run,
)
from .use_cases.services.boundary_service import DELIMITERS, LineIndex
from .infrastructure.html_serializer import HtmlSerializer, tree_to_dict
from .config.render_config import RenderConfig

__all__ = [
    "run_pipeline",
    "build_line_markup",
    "build_partition",
    "merge_partitions",
    "render_edition",
    "RenderGateConfig",
    "run_render_gates",
    "PartitionMismatchError",
    "Container",
    "DamageLevel",
    "Dimension",
    "Edition",
    "Leaf",
    "LeafNode",
    "Line",
    "LineMarkup",
    "MergeStep",
    "Partition",
    "Run",
    "DELIMITERS",
    "LineIndex",
    "HtmlSerializer",
    "tree_to_dict",
    "RenderConfig",
]
