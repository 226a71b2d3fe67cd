from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class RenderGateConfig:
    """Configuration for deterministic DeepEval gates over render artifacts."""

    artifacts_dir: Path
    output_json: Path
    min_coverage_ratio: float = 100.0
    max_unbalanced_line_pct: float = 5.0
    max_split_line_pct: float = 50.0
    max_error_pct: float = 0.0
