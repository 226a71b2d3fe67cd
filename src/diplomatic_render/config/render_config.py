from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class RenderConfig:
    """Runtime configuration for the batch rendering pipeline.

    Only primitive and path fields, so the render-affecting subset can be
    folded into incremental cache signatures without custom logic.
    """

    input_dir: Path
    output_dir: Path
    stylesheet_href: str = "../css/styles.css"
    workers: int = 1
    incremental: bool = True
    fail_fast: bool = False
    write_tree_json: bool = False
