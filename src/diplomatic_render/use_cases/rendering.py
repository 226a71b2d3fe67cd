from __future__ import annotations

from ..domain.models import Edition, EditionMarkup
from .services.edition_render_service import EditionRenderService


def render_edition(edition: Edition, *, workers: int = 1) -> EditionMarkup:
    return EditionRenderService(workers=workers).render(edition)
