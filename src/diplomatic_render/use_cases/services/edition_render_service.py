from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from ...domain.models import Edition, EditionMarkup, Line, LineMarkup
from .boundary_service import LineIndex
from .markup_tree_service import MarkupTreeService

logger = logging.getLogger(__name__)


class EditionRenderService:
    """Renders every line of an edition, optionally on a thread pool.

    Lines are independent: each task builds its own partitions, merge steps
    and tree, and only reads its own precomputed line index.
    """

    def __init__(self, tree_service: MarkupTreeService | None = None, *, workers: int = 1) -> None:
        self._trees = tree_service or MarkupTreeService()
        self.workers = max(1, workers)

    def render(self, edition: Edition) -> EditionMarkup:
        lines = edition.lines()
        if self.workers == 1 or len(lines) <= 1:
            rendered = [self._render_line(line) for line in lines]
        else:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                rendered = list(pool.map(self._render_line, lines))
        logger.debug("Rendered %d lines of %r", len(rendered), edition.title)

        by_position = iter(rendered)
        surfaces = tuple(
            tuple(tuple(next(by_position) for _ in column.lines) for column in surface.columns)
            for surface in edition.surfaces
        )
        return EditionMarkup(title=edition.title, surfaces=surfaces)

    def _render_line(self, line: Line) -> LineMarkup:
        return self._trees.build_line(line, LineIndex.from_leaves(line.id, line.leaves))
